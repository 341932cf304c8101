# clarity/scoring.py

ENGINE_VERSION = "1.0.0"

import math

from .types import (
    ACTUAR_HOY,
    DESCARTAR,
    ESPERAR_7_DIAS,
    PREPARAR_PLAN,
    ClarityResult,
    DecisionInput,
)

CONVICTION_WEIGHT = 0.4
ENERGY_WEIGHT = 0.35
COST_WEIGHT = 0.25


def round_half_up(x: float) -> int:
    # .5 always rounds towards +inf, so round_half_up(-2.5) == -2
    return int(math.floor(x + 0.5))


def clamp_score(score: float) -> int:
    return int(max(0, min(100, score)))


def calculate_clarity_score(input: DecisionInput) -> int:
    normalized_energy = (input.energy + 5) / 10  # -5..5 -> 0..1
    conviction_score = input.conviction / 10
    cost_penalty = (10 - input.cost_if_wrong) / 10  # low cost -> higher clarity
    clarity = (
        conviction_score * CONVICTION_WEIGHT
        + normalized_energy * ENERGY_WEIGHT
        + cost_penalty * COST_WEIGHT
    )
    return clamp_score(round_half_up(clarity * 100))


def get_recommendation(input: DecisionInput) -> str:
    """
    Ordered rule list, first match wins. Rule 1 must stay ahead of the
    high-conviction rule: irreversible + costly always gets a plan.
    """
    if input.reversibility == "irreversible" and input.cost_if_wrong >= 7:
        return PREPARAR_PLAN
    if input.energy <= -3:
        return ESPERAR_7_DIAS
    if input.conviction >= 8 and input.cost_if_wrong <= 4:
        return ACTUAR_HOY
    if input.conviction >= 7 and input.cost_if_wrong >= 6:
        return PREPARAR_PLAN
    if input.conviction <= 4:
        return DESCARTAR
    return ESPERAR_7_DIAS


FALLBACK_REASON = "Revisa los factores y vuelve a evaluar."

REASON_ES = {
    ACTUAR_HOY: "Alta convicción y bajo costo. Avanza hoy con un paso pequeño.",
    PREPARAR_PLAN: "No tomes la decisión irreversible aún. Prepara un plan concreto.",
    ESPERAR_7_DIAS: "Espera 7 días y revisa esta decisión con menos ruido.",
    DESCARTAR: "Hoy no vale el costo. Mejor no avanzar.",
}

REASON = {
    ACTUAR_HOY: "Alta convicción y bajo costo. Avanza con un paso pequeño.",
    PREPARAR_PLAN: "Decisión de alto impacto. Prepara un plan antes de actuar.",
    ESPERAR_7_DIAS: "Date 7 días para revisar con menos ruido.",
    DESCARTAR: "La convicción es baja. Mejor no avanzar hoy.",
}


def get_reason_es(input: DecisionInput, recommendation: str) -> str:
    # `input` is accepted for signature parity with get_recommendation; the text
    # depends on the recommendation alone.
    return REASON_ES.get(recommendation, FALLBACK_REASON)


def get_reason(input: DecisionInput, recommendation: str) -> str:
    return REASON.get(recommendation, FALLBACK_REASON)


def get_diagnostic_line(input: DecisionInput) -> str:
    if input.reversibility == "irreversible" and input.cost_if_wrong >= 7:
        return "Decisión difícil de revertir con alto costo."
    if input.energy <= -3:
        return "Energía negativa y alta incertidumbre."
    if input.conviction >= 8 and input.cost_if_wrong <= 4:
        return "Alta convicción y bajo costo."
    if input.conviction >= 7 and input.cost_if_wrong >= 6:
        return "Alta convicción pero alto costo."
    if input.conviction <= 4:
        return "Baja convicción."
    return "Incertidumbre moderada; conviene esperar."


def evaluate(input: DecisionInput) -> ClarityResult:
    recommendation = get_recommendation(input)
    return ClarityResult(
        score=calculate_clarity_score(input),
        recommendation=recommendation,
        reason=get_reason_es(input, recommendation),
    )
