from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .types import DEFAULT_DECISION_TYPE, DecisionInput

UNTITLED = "Decisión sin título"

COST_LEVELS = ("bajo", "medio", "alto")
EMOTIONAL_STATES = ("calmado", "bajo presion", "ansioso")
EVIDENCE_LEVELS = ("poca", "media", "alta")
PRESSURE_OPTIONS = ("calma", "presion")
PRESSURE_LABEL = {"calma": "Con calma", "presion": "Bajo presión"}

# the guided flow never asks for conviction directly
GUIDED_CONVICTION = 6

COST_TO_NUMBER = {"bajo": 3, "medio": 6, "alto": 9}
STATE_TO_ENERGY = {"calmado": 0, "bajo presion": -3, "ansioso": -4}
EVIDENCE_TO_CONVICTION = {"poca": 3, "media": 6, "alta": 9}

STAGE_ERRORS = {
    1: "Necesitamos entender tu objetivo para ayudarte a pensar mejor.",
    2: "Agrega al menos una alternativa o confirma que no hay más.",
    3: "Completa al menos una de las dos para seguir reflexionando.",
}

STAGE_TRANSITIONS = {
    1: "Respira… paso siguiente.",
    2: "Buen avance — sigamos.",
    3: "Esto nos da claridad.",
    4: "Casi listo.",
}

LAST_STAGE = 5


class StageError(ValueError):
    def __init__(self, stage: int, message: str):
        super().__init__(message)
        self.stage = stage


@dataclass
class Questionnaire:
    decision_text: str = ""
    decision_type: str = DEFAULT_DECISION_TYPE
    objective: str = ""
    alternatives: List[str] = field(default_factory=lambda: ["", ""])
    evidence_for: str = ""
    evidence_missing: str = ""
    cost_level: str = "medio"
    reversibility: str = "semi"
    emotional_state: str = "calmado"

    def title(self) -> str:
        return self.decision_text.strip() or UNTITLED

    def filled_alternatives(self) -> List[str]:
        return [a.strip() for a in self.alternatives if a.strip()]


def check_stage(q: Questionnaire, stage: int) -> None:
    """Raise StageError if `stage` is missing what it needs to move on."""
    if stage == 1 and not q.objective.strip():
        raise StageError(1, STAGE_ERRORS[1])
    if stage == 2 and not q.filled_alternatives():
        raise StageError(2, STAGE_ERRORS[2])
    if stage == 3 and not q.evidence_for.strip() and not q.evidence_missing.strip():
        raise StageError(3, STAGE_ERRORS[3])


def next_stage(q: Questionnaire, stage: int) -> int:
    check_stage(q, stage)
    return min(stage + 1, LAST_STAGE)


def to_decision_input(q: Questionnaire) -> DecisionInput:
    return DecisionInput(
        reversibility=q.reversibility,
        conviction=GUIDED_CONVICTION,
        cost_if_wrong=COST_TO_NUMBER.get(q.cost_level, COST_TO_NUMBER["medio"]),
        energy=STATE_TO_ENERGY.get(q.emotional_state, STATE_TO_ENERGY["calmado"]),
    )


def quick_form_input(evidence: str, cost: str, pressure: str, reversibility: str = "semi") -> DecisionInput:
    return DecisionInput(
        reversibility=reversibility,
        conviction=EVIDENCE_TO_CONVICTION.get(evidence, EVIDENCE_TO_CONVICTION["media"]),
        cost_if_wrong=COST_TO_NUMBER.get(cost, COST_TO_NUMBER["medio"]),
        energy=0 if pressure == "calma" else -4,
    )


def _blank_to_none(s: Optional[str]) -> Optional[str]:
    s = (s or "").strip()
    return s or None


def to_row_fields(q: Questionnaire) -> Dict[str, Any]:
    """Questionnaire columns stored next to the score snapshot in the row store."""
    alternatives = q.filled_alternatives()
    return {
        "decision_text": q.title(),
        "objective": _blank_to_none(q.objective),
        "alternatives": alternatives or None,
        "evidence_for": _blank_to_none(q.evidence_for),
        "evidence_missing": _blank_to_none(q.evidence_missing),
        "cost_level": q.cost_level,
        "reversibility": q.reversibility,
        "emotional_state": q.emotional_state,
        "decision_type": q.decision_type or None,
    }
