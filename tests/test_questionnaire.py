"""
Tests for the guided questionnaire and the quick form.

Covers:
- per-stage validation messages
- stage advance and clamping at the last stage
- questionnaire / quick form -> DecisionInput mapping
- row-store column mapping
"""

import pytest

from clarity.questionnaire import (
    LAST_STAGE,
    PRESSURE_LABEL,
    PRESSURE_OPTIONS,
    STAGE_ERRORS,
    Questionnaire,
    StageError,
    check_stage,
    next_stage,
    quick_form_input,
    to_decision_input,
    to_row_fields,
)
from clarity.types import DecisionInput


class TestStages:
    def test_stage_1_needs_objective(self):
        with pytest.raises(StageError) as exc:
            next_stage(Questionnaire(objective="  "), 1)
        assert exc.value.stage == 1
        assert str(exc.value) == STAGE_ERRORS[1]

    def test_stage_2_needs_one_alternative(self):
        with pytest.raises(StageError) as exc:
            check_stage(Questionnaire(alternatives=["", " "]), 2)
        assert exc.value.stage == 2
        check_stage(Questionnaire(alternatives=["", "Esperar"]), 2)

    def test_stage_3_needs_either_evidence(self):
        with pytest.raises(StageError):
            check_stage(Questionnaire(), 3)
        check_stage(Questionnaire(evidence_missing="precio final"), 3)
        check_stage(Questionnaire(evidence_for="dos ofertas"), 3)

    def test_stage_4_has_defaults(self):
        check_stage(Questionnaire(), 4)

    def test_advance(self):
        q = Questionnaire(objective="Ahorrar", alternatives=["a"], evidence_for="x")
        stage = 1
        for expected in (2, 3, 4, 5):
            stage = next_stage(q, stage)
            assert stage == expected
        assert next_stage(q, LAST_STAGE) == LAST_STAGE

    def test_stage_error_is_value_error(self):
        assert issubclass(StageError, ValueError)


class TestQuestionnaire:
    def test_title_fallback(self):
        assert Questionnaire().title() == "Decisión sin título"
        assert Questionnaire(decision_text="  Mudarme ").title() == "Mudarme"

    def test_filled_alternatives(self):
        assert Questionnaire(alternatives=[" a ", "", "b"]).filled_alternatives() == ["a", "b"]

    def test_defaults_are_independent(self):
        a, b = Questionnaire(), Questionnaire()
        a.alternatives.append("c")
        assert b.alternatives == ["", ""]


class TestInputMapping:
    @pytest.mark.parametrize("cost,state,expected_cost,expected_energy", [
        ("bajo", "calmado", 3, 0),
        ("medio", "bajo presion", 6, -3),
        ("alto", "ansioso", 9, -4),
    ])
    def test_guided(self, cost, state, expected_cost, expected_energy):
        q = Questionnaire(cost_level=cost, emotional_state=state, reversibility="reversible")
        assert to_decision_input(q) == DecisionInput(
            reversibility="reversible", conviction=6, cost_if_wrong=expected_cost, energy=expected_energy,
        )

    @pytest.mark.parametrize("evidence,conviction", [("poca", 3), ("media", 6), ("alta", 9)])
    def test_quick_form_evidence(self, evidence, conviction):
        assert quick_form_input(evidence, "medio", "calma").conviction == conviction

    def test_quick_form_pressure(self):
        assert quick_form_input("media", "bajo", "calma").energy == 0
        assert quick_form_input("media", "bajo", "presion").energy == -4

    def test_quick_form_default_reversibility(self):
        assert quick_form_input("media", "alto", "calma").reversibility == "semi"

    def test_pressure_options_are_labelled(self):
        assert set(PRESSURE_LABEL) == set(PRESSURE_OPTIONS)


class TestRowFields:
    def test_blank_fields_become_none(self):
        fields = to_row_fields(Questionnaire(decision_text="Viaje", objective=" "))
        assert fields["decision_text"] == "Viaje"
        assert fields["objective"] is None
        assert fields["alternatives"] is None
        assert fields["evidence_for"] is None
        assert fields["decision_type"] == "otra"

    def test_values_kept(self):
        q = Questionnaire(
            objective="Salud",
            alternatives=["Gimnasio", ""],
            evidence_for="médico",
            cost_level="bajo",
            reversibility="reversible",
            emotional_state="ansioso",
            decision_type="salud",
        )
        fields = to_row_fields(q)
        assert fields["alternatives"] == ["Gimnasio"]
        assert fields["cost_level"] == "bajo"
        assert fields["emotional_state"] == "ansioso"
        assert fields["decision_type"] == "salud"
