from typing import Dict, List, Optional

from .scoring import round_half_up
from .types import SavedDecision, is_number

CLARIDAD = "claridad"
CONFIANZA = "confianza"

TREND_WINDOW = 7


def calc_avg_clarity(decisions: List[SavedDecision]) -> Optional[int]:
    if not decisions:
        return None
    total = sum(d.score if is_number(d.score) else 0 for d in decisions)
    return round_half_up(total / len(decisions))


def calc_avg_alignment(decisions: List[SavedDecision]) -> Optional[int]:
    values = [d.snapshot.alignment for d in decisions if d.snapshot.alignment is not None]
    if not values:
        return None
    return round_half_up(sum(values) / len(values) * 10)  # 1-10 -> 0-100


def calc_avg_doubt(decisions: List[SavedDecision]) -> Optional[float]:
    if not decisions:
        return None
    return sum(d.snapshot.doubt_score() for d in decisions) / len(decisions)


def doubt_to_confidence(doubt: float) -> int:
    return round_half_up((10 - doubt) * 10)


def calc_confianza(decisions: List[SavedDecision]) -> Optional[int]:
    """Confidence on a 0-100 scale: the inverse of average doubt."""
    avg_doubt = calc_avg_doubt(decisions)
    if avg_doubt is None:
        return None
    return doubt_to_confidence(avg_doubt)


def calc_regret_metrics(decisions: List[SavedDecision]) -> Dict:
    followed = [d for d in decisions if d.follow_up is not None]
    regret_count = len([d for d in followed if d.follow_up.regret is True])
    # None means "not measurable yet", which is different from 0%
    rate = round_half_up(regret_count / len(followed) * 100) if followed else None
    return {
        "regret_rate": rate,
        "regret_count": regret_count,
        "followed_count": len(followed),
    }


def last_7_chrono(decisions: List[SavedDecision]) -> List[SavedDecision]:
    # decisions arrive newest first
    return list(reversed(decisions[:TREND_WINDOW]))


def build_trend_series(decisions: List[SavedDecision]) -> Dict:
    window = last_7_chrono(decisions)
    clarity_series = [d.score for d in window]
    confidence_series = [doubt_to_confidence(d.snapshot.doubt_score()) for d in window]
    n = len(clarity_series)
    return {
        "clarity_series": clarity_series,
        "confidence_series": confidence_series,
        "clarity_delta": clarity_series[-1] - clarity_series[0] if n >= 2 else None,
        "confidence_delta": confidence_series[-1] - confidence_series[0] if n >= 2 else None,
        "trend_count": n,
    }


def format_delta(delta: Optional[int]) -> Optional[str]:
    if delta is None:
        return None
    if delta > 0:
        return f"+{delta}"
    return str(delta)


def get_system_confidence(count: int) -> str:
    if count < 5:
        return "Baja"
    if count <= 15:
        return "Media"
    return "Alta"


def level_from_score(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score >= 70:
        return "Alta"
    if score >= 45:
        return "Media"
    return "Baja"


def level_from_regret_rate(regret_rate: Optional[float]) -> Optional[str]:
    # separate thresholds from level_from_score; lower is better here
    if regret_rate is None:
        return None
    if regret_rate <= 15:
        return "Bajo"
    if regret_rate <= 35:
        return "Medio"
    return "Alto"


def interpretation_claridad(score: Optional[float]) -> str:
    if score is None:
        return "Registra decisiones para ver tu lectura."
    if score >= 70:
        return "Tus decisiones tienden a ser coherentes."
    if score >= 45:
        return "Hay espacio para ganar claridad."
    return "Tus decisiones no están siendo consistentes."


def interpretation_confianza(score: Optional[float]) -> str:
    if score is None:
        return "Más datos para ver tu nivel de confianza."
    if score >= 70:
        return "Cierras bien; poca duda al decidir."
    if score >= 45:
        return "Tu duda está en rango medio."
    return "Estás dudando más de lo ideal."


def interpretation_arrepentimiento(regret_rate: Optional[float]) -> str:
    if regret_rate is None:
        return "Actívalo con seguimiento"
    return "Cuántas decisiones lamentas con el tiempo."


def lowest_metric(claridad: Optional[float], confianza: Optional[float]) -> Optional[str]:
    if claridad is None and confianza is None:
        return None
    if claridad is None:
        return CONFIANZA
    if confianza is None:
        return CLARIDAD
    return CLARIDAD if claridad <= confianza else CONFIANZA


def tip_for_metric(metric: Optional[str], avg_clarity: Optional[float], confianza: Optional[float]) -> str:
    if metric == CLARIDAD:
        if avg_clarity is None:
            return "Registra una decisión para recibir tu primer tip."
        if avg_clarity >= 70:
            return "Mantén el ritmo: una decisión pequeña por semana."
        if avg_clarity >= 45:
            return "Antes de decidir, escribe en una línea qué pasaría si te equivocas."
        return "Elige una sola decisión pendiente y date 7 días antes de actuar."
    if metric == CONFIANZA:
        return "Reduce la incertidumbre: anota qué información te falta y define un criterio claro antes de decidir."
    return "Registra decisiones para ver tu próximo paso."


def get_weekly_insight(
    clarity_delta: Optional[int],
    confidence_delta: Optional[int],
    regret_rate: Optional[float],
) -> str:
    if clarity_delta is not None and clarity_delta >= 5:
        return "Claridad subiendo: estás decidiendo más consistente."
    if clarity_delta is not None and clarity_delta <= -5:
        return "Claridad bajando: reduce variables y decide con un paso pequeño."
    if confidence_delta is not None and confidence_delta <= -5:
        return "Confianza bajando: define 3 criterios antes de decidir."
    if regret_rate is not None and regret_rate > 35:
        return "Arrepentimiento alto: usa «Preparar plan» en decisiones difíciles de revertir."
    return "Buen ritmo. Mantén el seguimiento para aprender más."


def compute_dashboard(decisions: List[SavedDecision]) -> Dict:
    avg_clarity = calc_avg_clarity(decisions)
    avg_doubt = calc_avg_doubt(decisions)
    confianza = calc_confianza(decisions)
    regret = calc_regret_metrics(decisions)
    trend = build_trend_series(decisions)
    lowest = lowest_metric(avg_clarity, confianza)

    return {
        "total": len(decisions),
        "avg_clarity": avg_clarity,
        "avg_doubt": avg_doubt,
        "avg_alignment": calc_avg_alignment(decisions),
        "confianza": confianza,
        "regret_rate": regret["regret_rate"],
        "regret_count": regret["regret_count"],
        "followed_count": regret["followed_count"],
        "clarity_level": level_from_score(avg_clarity),
        "confianza_level": level_from_score(confianza),
        "regret_level": level_from_regret_rate(regret["regret_rate"]),
        "system_confidence": get_system_confidence(len(decisions)),
        "lowest_metric": lowest,
        "tip": tip_for_metric(lowest, avg_clarity, confianza),
        "weekly_insight": get_weekly_insight(
            trend["clarity_delta"], trend["confidence_delta"], regret["regret_rate"]
        ),
        **trend,
    }
