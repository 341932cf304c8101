from datetime import datetime
from typing import Dict, Optional

from .scoring import get_diagnostic_line
from .types import ACTUAR_HOY, DESCARTAR, ESPERAR_7_DIAS, PREPARAR_PLAN, normalize_input

MONTHS_ES = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic"]

PLACEHOLDER = "—"
LEGACY_NOTE = "Registro con el formato anterior; sin diagnóstico."


def action_contradicts_recommendation(recommendation: str, action_taken: str) -> bool:
    if recommendation == ACTUAR_HOY and action_taken in ("espere", "descarte"):
        return True
    if recommendation in (ESPERAR_7_DIAS, PREPARAR_PLAN, DESCARTAR) and action_taken == "actue":
        return True
    return False


def get_replay_evaluation_text(recommendation: str, action_taken: str, outcome: str) -> str:
    """
    One sentence comparing what the engine said with what the user did and how
    it turned out. The specific combinations are checked before the generic
    "contradicted but it went better" case.
    """
    if recommendation == ESPERAR_7_DIAS and action_taken == "actue" and outcome == "peor":
        return "El sistema probablemente tenía razón."
    if recommendation == ACTUAR_HOY and action_taken == "actue" and outcome == "mejor":
        return "La recomendación fue acertada."
    if recommendation == PREPARAR_PLAN and action_taken == "actue" and outcome == "peor":
        return "Actuar sin plan aumentó el riesgo."
    if action_contradicts_recommendation(recommendation, action_taken) and outcome == "mejor":
        return "El sistema fue conservador en esta ocasión."
    return "Resultado coherente con la decisión tomada."


def _fmt(x) -> str:
    if x is None:
        return PLACEHOLDER
    if isinstance(x, float) and x.is_integer():
        x = int(x)
    return str(x)


def get_input_display(raw_input) -> Dict[str, str]:
    snap = normalize_input(raw_input)
    conviction = snap.conviction
    if conviction is None and snap.doubt is not None:
        conviction = 10 - snap.doubt
    return {
        "conviccion": _fmt(conviction),
        "costo": _fmt(snap.cost_if_wrong),
        "energia": _fmt(snap.energy),
        "reversibilidad": snap.reversibility or PLACEHOLDER,
    }


def get_stored_diagnostic(raw_input) -> Optional[str]:
    snap = normalize_input(raw_input)
    stored = snap.as_decision_input()
    if stored is not None:
        return get_diagnostic_line(stored)
    if snap.kind == "legacy":
        return LEGACY_NOTE
    return None


def format_friendly_date(iso: str) -> str:
    try:
        d = datetime.fromisoformat((iso or "").replace("Z", "+00:00"))
    except ValueError:
        return (iso or "")[:10]
    return f"{d.day} {MONTHS_ES[d.month - 1]} {d.year}"


def truncate(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[:max_len].strip() + "…"
