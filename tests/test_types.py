"""
Tests for the record types and stored-input normalization.

Covers:
- normalize_input kinds (modern / legacy / empty) and field fallbacks
- InputSnapshot doubt and DecisionInput recovery
- SavedDecision dict mapping with camelCase keys and malformed values
"""

import pytest

from clarity.types import (
    DEFAULT_DOUBT,
    ActionPlan,
    ActionPlanItem,
    DecisionInput,
    FollowUp,
    SavedDecision,
    is_number,
    normalize_input,
)


class TestIsNumber:
    @pytest.mark.parametrize("x,expected", [(1, True), (2.5, True), (True, False), ("3", False), (None, False)])
    def test_values(self, x, expected):
        assert is_number(x) is expected


class TestNormalizeInput:
    def test_modern(self):
        snap = normalize_input({"reversibility": "semi", "conviction": 7, "costIfWrong": 4, "energy": -1})
        assert snap.kind == "modern"
        assert snap.doubt_score() == 3
        assert snap.as_decision_input() == DecisionInput("semi", 7, 4, -1)

    def test_legacy(self):
        snap = normalize_input({"doubt": 6, "financialImpact": 8, "emotionalEnergy": 2, "alignment": 9})
        assert snap.kind == "legacy"
        assert snap.cost_if_wrong == 8
        assert snap.energy == 2
        assert snap.alignment == 9
        assert snap.doubt_score() == 6
        assert snap.as_decision_input() is None

    def test_modern_names_win_over_legacy(self):
        snap = normalize_input({"conviction": 5, "costIfWrong": 2, "financialImpact": 9})
        assert snap.cost_if_wrong == 2

    @pytest.mark.parametrize("raw", [None, "x", [], {}, {"reversibility": "semi"}, {"conviction": "alta"}])
    def test_empty(self, raw):
        snap = normalize_input(raw)
        assert snap.kind == "empty"
        assert snap.doubt_score() == DEFAULT_DOUBT

    def test_boolean_values_are_ignored(self):
        assert normalize_input({"conviction": True}).conviction is None

    def test_accepts_decision_input(self):
        assert normalize_input(DecisionInput("irreversible", 9, 9, 0)).kind == "modern"


class TestSavedDecisionDicts:
    def test_camel_case_keys(self):
        d = SavedDecision(
            id="dec_1",
            created_at="2026-01-01T00:00:00Z",
            decision_text="Comprar piso",
            input=DecisionInput("irreversible", 7, 9, 0).to_dict(),
            score=50,
            recommendation="PREPARAR_PLAN",
            reason="r",
            decision_type="compra",
            follow_up=FollowUp("espere", False, "igual", "2026-01-08T00:00:00Z"),
        )
        out = d.to_dict()
        assert out["createdAt"] == "2026-01-01T00:00:00Z"
        assert out["decisionText"] == "Comprar piso"
        assert out["decisionType"] == "compra"
        assert out["input"]["costIfWrong"] == 9
        assert out["followUp"]["actionTaken"] == "espere"
        assert "actionPlan" not in out

    def test_optional_keys_omitted(self):
        d = SavedDecision("a", "c", "t", {}, 1, "DESCARTAR", "r")
        assert set(d.to_dict()) == {"id", "createdAt", "decisionText", "input", "score", "recommendation", "reason"}

    def test_from_dict_tolerates_bad_values(self):
        d = SavedDecision.from_dict({
            "id": 7,
            "input": "nope",
            "score": True,
            "followUp": "x",
            "actionPlan": {"items": "x"},
        })
        assert d.id == "7"
        assert d.input == {}
        assert d.score == 0
        assert d.follow_up is None
        assert d.action_plan == ActionPlan(items=[], created_at="", updated_at="")

    def test_regret_must_be_true(self):
        assert FollowUp.from_dict({"regret": "yes"}).regret is False
        assert FollowUp.from_dict({"regret": True}).regret is True

    def test_snapshot_reads_input(self):
        d = SavedDecision.from_dict({"id": "a", "input": {"doubt": 4}})
        assert d.snapshot.kind == "legacy"

    @pytest.mark.parametrize("done,expected", [(True, True), (False, False), ("false", False), ("true", False), (1, False), (None, False)])
    def test_plan_item_done_must_be_true(self, done, expected):
        assert ActionPlanItem.from_dict({"id": "i", "text": "t", "done": done}).done is expected
