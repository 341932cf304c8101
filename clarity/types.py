from dataclasses import dataclass
from typing import Any, Dict, List, Optional

REVERSIBILITY = ("reversible", "semi", "irreversible")

ACTUAR_HOY = "ACTUAR_HOY"
PREPARAR_PLAN = "PREPARAR_PLAN"
ESPERAR_7_DIAS = "ESPERAR_7_DIAS"
DESCARTAR = "DESCARTAR"
RECOMMENDATIONS = (ACTUAR_HOY, PREPARAR_PLAN, ESPERAR_7_DIAS, DESCARTAR)

DECISION_TYPES = ("compra", "carrera", "relacion", "proyecto", "salud", "otra")
DEFAULT_DECISION_TYPE = "otra"

ACTIONS_TAKEN = ("actue", "espere", "descarte")
OUTCOMES = ("mejor", "igual", "peor")

DEFAULT_DOUBT = 5.0


def is_number(x) -> bool:
    # bool is an int subclass; stored JSON true/false must not count as a score
    return isinstance(x, (int, float)) and not isinstance(x, bool)


@dataclass(frozen=True)
class DecisionInput:
    reversibility: str
    conviction: float      # 1..10
    cost_if_wrong: float   # 1..10
    energy: float          # -5..5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reversibility": self.reversibility,
            "conviction": self.conviction,
            "costIfWrong": self.cost_if_wrong,
            "energy": self.energy,
        }


@dataclass(frozen=True)
class ClarityResult:
    score: int
    recommendation: str
    reason: str


@dataclass(frozen=True)
class InputSnapshot:
    """
    A stored input resolved once at read time.

    kind is "modern" when the record carries `conviction`, "legacy" when it only
    carries the older field names (doubt, financialImpact, emotionalEnergy,
    alignment) and "empty" when neither is present.
    """
    kind: str
    reversibility: Optional[str] = None
    conviction: Optional[float] = None
    cost_if_wrong: Optional[float] = None
    energy: Optional[float] = None
    doubt: Optional[float] = None
    alignment: Optional[float] = None

    def doubt_score(self) -> float:
        if self.conviction is not None:
            return 10 - self.conviction
        if self.doubt is not None:
            return self.doubt
        return DEFAULT_DOUBT

    def as_decision_input(self) -> Optional[DecisionInput]:
        if None in (self.reversibility, self.conviction, self.cost_if_wrong, self.energy):
            return None
        return DecisionInput(
            reversibility=self.reversibility,
            conviction=self.conviction,
            cost_if_wrong=self.cost_if_wrong,
            energy=self.energy,
        )


LEGACY_FIELDS = ("doubt", "financialImpact", "emotionalEnergy", "alignment")


def normalize_input(raw) -> InputSnapshot:
    if isinstance(raw, DecisionInput):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        return InputSnapshot(kind="empty")

    def num(*keys):
        for k in keys:
            v = raw.get(k)
            if is_number(v):
                return v
        return None

    rev = raw.get("reversibility")
    conviction = num("conviction")
    if conviction is not None:
        kind = "modern"
    elif any(is_number(raw.get(k)) for k in LEGACY_FIELDS):
        kind = "legacy"
    else:
        kind = "empty"

    return InputSnapshot(
        kind=kind,
        reversibility=rev if isinstance(rev, str) else None,
        conviction=conviction,
        cost_if_wrong=num("costIfWrong", "financialImpact"),
        energy=num("energy", "emotionalEnergy"),
        doubt=num("doubt"),
        alignment=num("alignment"),
    )


@dataclass
class FollowUp:
    action_taken: str   # actue | espere | descarte
    regret: bool
    outcome: str        # mejor | igual | peor
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actionTaken": self.action_taken,
            "regret": self.regret,
            "outcome": self.outcome,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FollowUp":
        return cls(
            action_taken=d.get("actionTaken", ""),
            regret=d.get("regret") is True,
            outcome=d.get("outcome", ""),
            updated_at=d.get("updatedAt", ""),
        )


@dataclass
class ActionPlanItem:
    id: str
    text: str
    done: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "done": self.done}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ActionPlanItem":
        return cls(id=str(d.get("id", "")), text=str(d.get("text", "")), done=d.get("done") is True)


@dataclass
class ActionPlan:
    items: List[ActionPlanItem]
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ActionPlan":
        items = d.get("items")
        if not isinstance(items, list):
            items = []
        return cls(
            items=[ActionPlanItem.from_dict(i) for i in items if isinstance(i, dict)],
            created_at=d.get("createdAt", ""),
            updated_at=d.get("updatedAt", ""),
        )


@dataclass
class SavedDecision:
    id: str
    created_at: str
    decision_text: str
    input: Dict[str, Any]
    score: int
    recommendation: str
    reason: str
    decision_type: Optional[str] = None
    follow_up: Optional[FollowUp] = None
    action_plan: Optional[ActionPlan] = None

    @property
    def snapshot(self) -> InputSnapshot:
        return normalize_input(self.input)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "createdAt": self.created_at,
            "decisionText": self.decision_text,
            "input": dict(self.input),
            "score": self.score,
            "recommendation": self.recommendation,
            "reason": self.reason,
        }
        if self.decision_type:
            out["decisionType"] = self.decision_type
        if self.follow_up is not None:
            out["followUp"] = self.follow_up.to_dict()
        if self.action_plan is not None:
            out["actionPlan"] = self.action_plan.to_dict()
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SavedDecision":
        fu = d.get("followUp")
        plan = d.get("actionPlan")
        raw_input = d.get("input")
        score = d.get("score")
        return cls(
            id=str(d.get("id", "")),
            created_at=d.get("createdAt", ""),
            decision_text=d.get("decisionText", ""),
            input=dict(raw_input) if isinstance(raw_input, dict) else {},
            score=score if is_number(score) else 0,
            recommendation=d.get("recommendation", ""),
            reason=d.get("reason", ""),
            decision_type=d.get("decisionType") or None,
            follow_up=FollowUp.from_dict(fu) if isinstance(fu, dict) else None,
            action_plan=ActionPlan.from_dict(plan) if isinstance(plan, dict) else None,
        )

