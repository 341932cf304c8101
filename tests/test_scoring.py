"""
Tests for the scoring engine.

Covers:
- Clarity score formula, bounds and half-up rounding
- Ordered recommendation rules, including every hard threshold
- Reason / diagnostic text lookups
- evaluate() bundling
"""

import pytest

from clarity.scoring import (
    FALLBACK_REASON,
    calculate_clarity_score,
    evaluate,
    get_diagnostic_line,
    get_reason,
    get_reason_es,
    get_recommendation,
    round_half_up,
)
from clarity.types import ACTUAR_HOY, DESCARTAR, ESPERAR_7_DIAS, PREPARAR_PLAN, ClarityResult, DecisionInput


def _input(reversibility="semi", conviction=5, cost=5, energy=0) -> DecisionInput:
    return DecisionInput(reversibility=reversibility, conviction=conviction, cost_if_wrong=cost, energy=energy)


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

class TestRoundHalfUp:
    @pytest.mark.parametrize("x,expected", [
        (2.5, 3),
        (2.49, 2),
        (0.5, 1),
        (-2.5, -2),
        (-2.51, -3),
        (70.0, 70),
    ])
    def test_values(self, x, expected):
        assert round_half_up(x) == expected

    def test_differs_from_bankers_rounding(self):
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3


# ---------------------------------------------------------------------------
# Clarity score
# ---------------------------------------------------------------------------

class TestClarityScore:
    @pytest.mark.parametrize("conviction,cost,energy,expected", [
        (9, 3, 0, 71),
        (5, 5, 0, 50),
        (3, 9, -4, 18),
        (6, 6, -3, 41),
    ])
    def test_known_values(self, conviction, cost, energy, expected):
        assert calculate_clarity_score(_input(conviction=conviction, cost=cost, energy=energy)) == expected

    def test_best_in_range_input(self):
        # conviction 10, cost 1, energy 5: 0.4 + 0.35 + 0.225
        assert calculate_clarity_score(_input(conviction=10, cost=1, energy=5)) == 98

    def test_worst_in_range_input(self):
        # only the conviction term survives: 0.1 * 0.4
        assert calculate_clarity_score(_input(conviction=1, cost=10, energy=-5)) == 4

    def test_bounded_over_whole_valid_grid(self):
        scores = [
            calculate_clarity_score(_input(conviction=c, cost=k, energy=e))
            for c in range(1, 11)
            for k in range(1, 11)
            for e in range(-5, 6)
        ]
        assert all(0 <= s <= 100 for s in scores)
        assert max(scores) == 98
        assert min(scores) == 4

    def test_reversibility_does_not_affect_score(self):
        scores = {calculate_clarity_score(_input(reversibility=r, conviction=7, cost=4, energy=1))
                  for r in ("reversible", "semi", "irreversible")}
        assert len(scores) == 1

    def test_out_of_range_input_is_clamped(self):
        assert calculate_clarity_score(_input(conviction=30, cost=0, energy=5)) == 100
        assert calculate_clarity_score(_input(conviction=-10, cost=10, energy=-5)) == 0

    def test_monotonic_in_conviction(self):
        scores = [calculate_clarity_score(_input(conviction=c)) for c in range(1, 11)]
        assert scores == sorted(scores)

    def test_returns_int(self):
        assert isinstance(calculate_clarity_score(_input()), int)

    def test_deterministic(self):
        inp = _input(conviction=7, cost=3, energy=2)
        assert calculate_clarity_score(inp) == calculate_clarity_score(inp)


# ---------------------------------------------------------------------------
# Recommendation rules
# ---------------------------------------------------------------------------

class TestRecommendation:
    @pytest.mark.parametrize("rev,conviction,cost,energy,expected", [
        # documented cases
        ("irreversible", 9, 7, 0, PREPARAR_PLAN),
        ("semi", 9, 3, 0, ACTUAR_HOY),
        ("semi", 3, 9, 0, DESCARTAR),
        ("semi", 6, 6, -4, ESPERAR_7_DIAS),
        ("semi", 5, 5, 0, ESPERAR_7_DIAS),
        # rule 1 pre-empts energy and low conviction
        ("irreversible", 9, 7, -5, PREPARAR_PLAN),
        ("irreversible", 2, 7, 0, PREPARAR_PLAN),
        # rule 1 needs cost >= 7
        ("irreversible", 9, 4, 0, ACTUAR_HOY),
        ("irreversible", 5, 6, 0, ESPERAR_7_DIAS),
        # energy threshold is -3 inclusive
        ("semi", 9, 3, -3, ESPERAR_7_DIAS),
        ("semi", 9, 3, -2, ACTUAR_HOY),
        # rule 3: conviction 8 vs 7, cost 4 vs 5
        ("semi", 8, 4, 0, ACTUAR_HOY),
        ("semi", 7, 4, 0, ESPERAR_7_DIAS),
        ("semi", 8, 5, 0, ESPERAR_7_DIAS),
        # rule 4: conviction >= 7 and cost >= 6
        ("semi", 7, 6, 0, PREPARAR_PLAN),
        ("reversible", 10, 10, 0, PREPARAR_PLAN),
        ("semi", 6, 6, 0, ESPERAR_7_DIAS),
        ("semi", 7, 5, 0, ESPERAR_7_DIAS),
        # rule 5: conviction <= 4
        ("semi", 4, 5, 0, DESCARTAR),
        ("reversible", 1, 1, 5, DESCARTAR),
        # low conviction still waits when energy is low
        ("semi", 2, 5, -3, ESPERAR_7_DIAS),
    ])
    def test_rule_table(self, rev, conviction, cost, energy, expected):
        assert get_recommendation(_input(rev, conviction, cost, energy)) == expected

    def test_always_one_of_four(self):
        seen = set()
        for rev in ("reversible", "semi", "irreversible"):
            for c in range(1, 11):
                for k in range(1, 11):
                    for e in range(-5, 6):
                        seen.add(get_recommendation(_input(rev, c, k, e)))
        assert seen == {ACTUAR_HOY, PREPARAR_PLAN, ESPERAR_7_DIAS, DESCARTAR}


# ---------------------------------------------------------------------------
# Reason and diagnostic text
# ---------------------------------------------------------------------------

class TestReasonText:
    def test_reason_es_per_recommendation(self):
        inp = _input()
        assert get_reason_es(inp, ACTUAR_HOY) == "Alta convicción y bajo costo. Avanza hoy con un paso pequeño."
        assert get_reason_es(inp, PREPARAR_PLAN) == "No tomes la decisión irreversible aún. Prepara un plan concreto."
        assert get_reason_es(inp, ESPERAR_7_DIAS) == "Espera 7 días y revisa esta decisión con menos ruido."
        assert get_reason_es(inp, DESCARTAR) == "Hoy no vale el costo. Mejor no avanzar."

    def test_reason_es_unknown_code(self):
        assert get_reason_es(_input(), "NOPE") == FALLBACK_REASON

    def test_reason_es_ignores_input(self):
        a = get_reason_es(_input(conviction=1, cost=10, energy=-5), ACTUAR_HOY)
        b = get_reason_es(_input(conviction=10, cost=1, energy=5), ACTUAR_HOY)
        assert a == b

    def test_neutral_reason(self):
        assert get_reason(_input(), DESCARTAR) == "La convicción es baja. Mejor no avanzar hoy."
        assert get_reason(_input(), "") == FALLBACK_REASON

    @pytest.mark.parametrize("inp,expected", [
        (_input("irreversible", 9, 8, 0), "Decisión difícil de revertir con alto costo."),
        (_input("semi", 9, 3, -3), "Energía negativa y alta incertidumbre."),
        (_input("semi", 9, 3, 0), "Alta convicción y bajo costo."),
        (_input("semi", 7, 6, 0), "Alta convicción pero alto costo."),
        (_input("semi", 4, 5, 0), "Baja convicción."),
        (_input("semi", 5, 5, 0), "Incertidumbre moderada; conviene esperar."),
    ])
    def test_diagnostic_line_follows_rule_order(self, inp, expected):
        assert get_diagnostic_line(inp) == expected


class TestEvaluate:
    def test_bundles_score_recommendation_reason(self):
        inp = _input("semi", 9, 3, 0)
        result = evaluate(inp)
        assert result == ClarityResult(score=71, recommendation=ACTUAR_HOY, reason=get_reason_es(inp, ACTUAR_HOY))

    def test_result_is_frozen(self):
        result = evaluate(_input())
        with pytest.raises(Exception):
            result.score = 1
