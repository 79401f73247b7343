"""Tests for the per-use-case ROI calculator."""

import math

import pytest

from roi_canvas.core.portfolio import calculate_portfolio_metrics
from roi_canvas.core.roi_calculations import (
    DISCOUNT_RATE,
    PROJECTION_YEARS,
    calculate_basic_roi,
    calculate_npv,
    calculate_payback_period,
    calculate_risk_adjusted_value,
    calculate_roi,
    calculate_roi_batch,
)
from roi_canvas.core.schemas_roi import PAYBACK_NEVER, is_never_payback
from tests.factories import make_use_case


def _expected_npv(implementation: float, annual_net: float) -> float:
    return round(
        -implementation
        + sum(annual_net / (1 + DISCOUNT_RATE) ** t for t in range(1, PROJECTION_YEARS + 1)),
        2,
    )


# =============================================================================
# Worked example: $150k build, $50k/yr run, $500k/yr benefit, effort 2, impact 4
# =============================================================================


class TestWorkedExample:
    def test_basic_roi(self):
        assert calculate_basic_roi(make_use_case()) == 150.0

    def test_npv(self):
        npv = calculate_npv(make_use_case())
        assert npv == pytest.approx(_expected_npv(150_000, 450_000))
        assert npv == pytest.approx(969_083.40)

    def test_payback(self):
        assert calculate_payback_period(make_use_case()) == 4.0

    def test_risk_adjusted_value_is_double_npv(self):
        uc = make_use_case()
        assert calculate_risk_adjusted_value(uc) == pytest.approx(calculate_npv(uc) * 2)

    def test_calculate_roi_bundles_metrics(self):
        uc = make_use_case(id="uc-42")
        metrics = calculate_roi(uc)
        assert metrics.use_case_id == "uc-42"
        assert metrics.basic_roi == 150.0
        assert metrics.payback_period == 4.0
        assert metrics.pays_back


class TestDegenerateInputs:
    def test_zero_cost_roi_is_zero(self):
        uc = make_use_case(implementation_cost=0, annual_cost=0, hard_benefits=1_000)
        assert calculate_basic_roi(uc) == 0

    def test_no_benefit_never_pays_back(self):
        uc = make_use_case(hard_benefits=0, annual_cost=1_000)
        assert calculate_payback_period(uc) == PAYBACK_NEVER
        assert is_never_payback(calculate_payback_period(uc))

    def test_benefit_equal_to_running_cost_never_pays_back(self):
        uc = make_use_case(hard_benefits=50_000, annual_cost=50_000)
        assert is_never_payback(calculate_payback_period(uc))

    def test_zero_implementation_pays_back_immediately(self):
        uc = make_use_case(implementation_cost=0)
        assert calculate_payback_period(uc) == 0.0

    def test_negative_roi(self):
        uc = make_use_case(hard_benefits=100_000, implementation_cost=150_000, annual_cost=50_000)
        assert calculate_basic_roi(uc) == -50.0

    def test_overflowing_npv_does_not_raise(self):
        metrics = calculate_roi(make_use_case(hard_benefits=1e308))
        assert metrics.npv == math.inf
        assert metrics.risk_adjusted_value == math.inf
        assert metrics.pays_back

    def test_overflowing_portfolio_does_not_raise(self):
        use_cases = [make_use_case(hard_benefits=1e308), make_use_case(hard_benefits=1e308)]
        assert calculate_portfolio_metrics(use_cases).portfolio_npv == math.inf

    def test_calculator_does_not_mutate(self):
        uc = make_use_case()
        before = uc.model_dump()
        calculate_roi(uc)
        assert uc.model_dump() == before


class TestMonotonicity:
    def test_npv_increases_with_benefits(self):
        npvs = [calculate_npv(make_use_case(hard_benefits=b)) for b in (0, 100_000, 500_000, 2_000_000)]
        assert npvs == sorted(npvs)
        assert len(set(npvs)) == len(npvs)

    def test_npv_decreases_with_implementation_cost(self):
        npvs = [calculate_npv(make_use_case(implementation_cost=c)) for c in (0, 50_000, 300_000)]
        assert npvs == sorted(npvs, reverse=True)


class TestRiskAdjustedValue:
    def test_scales_with_impact_effort_ratio(self):
        base = calculate_risk_adjusted_value(make_use_case(effort_score=1, impact_score=1))
        doubled = calculate_risk_adjusted_value(make_use_case(effort_score=1, impact_score=2))
        halved = calculate_risk_adjusted_value(make_use_case(effort_score=2, impact_score=1))
        assert doubled == pytest.approx(base * 2, abs=0.01)
        assert halved == pytest.approx(base / 2, abs=0.01)

    @pytest.mark.parametrize("risk, multiplier", [("Low", 1.0), ("Medium", 0.8), ("High", 0.6)])
    def test_risk_multiplier(self, risk, multiplier):
        uc = make_use_case(risk_level=risk, effort_score=3, impact_score=3)
        assert calculate_risk_adjusted_value(uc) == pytest.approx(
            calculate_npv(uc) * multiplier, abs=0.01
        )


class TestBatch:
    def test_batch_preserves_order(self):
        use_cases = [make_use_case(id="a"), make_use_case(id="b", hard_benefits=0)]
        metrics = calculate_roi_batch(use_cases)
        assert [m.use_case_id for m in metrics] == ["a", "b"]
        assert not metrics[1].pays_back

    def test_never_payback_serializes_as_null(self):
        metrics = calculate_roi(make_use_case(hard_benefits=0))
        assert metrics.model_dump(mode="json", by_alias=True)["paybackPeriod"] is None
