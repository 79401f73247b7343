"""ROI calculation engine for individual AI use cases.

Pure functions over a UseCase record: basic ROI, NPV, payback period and
risk-adjusted value. No I/O, no mutation of the record, and no exceptions for
degenerate inputs (zero cost → ROI 0, non-positive net benefit → never pays
back).
"""

from __future__ import annotations

from collections.abc import Iterable

from roi_canvas.core.formatting import round_half_up
from roi_canvas.core.schemas_roi import PAYBACK_NEVER, ROIMetrics
from roi_canvas.core.schemas_use_case import RiskLevel, UseCase

# =========================
# Financial policy
# =========================

DISCOUNT_RATE = 0.10  # annual, for NPV
PROJECTION_YEARS = 3
MONTHS_PER_YEAR = 12

RISK_MULTIPLIERS: dict[RiskLevel, float] = {
    RiskLevel.LOW: 1.0,
    RiskLevel.MEDIUM: 0.8,
    RiskLevel.HIGH: 0.6,
}


def roi_percent(benefit: float, cost: float) -> float:
    """(benefit - cost) / cost as an unrounded percentage; 0 when cost is 0."""
    if cost == 0:
        return 0.0
    return (benefit - cost) / cost * 100


def calculate_basic_roi(use_case: UseCase) -> float:
    """
    Basic one-year ROI: (hard benefits - total cost) / total cost * 100.

    Total cost is implementation cost plus one year of annual cost.

    Returns:
        ROI percent rounded to 2 decimals, 0 when total cost is 0
    """
    return round_half_up(roi_percent(use_case.hard_benefits, use_case.total_cost), 2)


def calculate_npv(use_case: UseCase) -> float:
    """
    Net present value over the projection horizon at the fixed discount rate.

    NPV = -implementation_cost + sum_{t=1..3} (hard_benefits - annual_cost) / 1.1^t

    Returns:
        NPV rounded to 2 decimals
    """
    annual_net_cash_flow = use_case.hard_benefits - use_case.annual_cost

    npv = -use_case.implementation_cost
    for year in range(1, PROJECTION_YEARS + 1):
        npv += annual_net_cash_flow / (1 + DISCOUNT_RATE) ** year

    return round_half_up(npv, 2)


def calculate_payback_period(use_case: UseCase) -> float:
    """
    Simple payback in months: implementation cost / monthly net benefit.

    Returns:
        Months rounded to 1 decimal, or PAYBACK_NEVER when the monthly net
        benefit is zero or negative
    """
    monthly_net_benefit = (
        use_case.hard_benefits / MONTHS_PER_YEAR - use_case.annual_cost / MONTHS_PER_YEAR
    )
    if monthly_net_benefit <= 0:
        return PAYBACK_NEVER

    return round_half_up(use_case.implementation_cost / monthly_net_benefit, 1)


def risk_multiplier(risk_level: RiskLevel) -> float:
    return RISK_MULTIPLIERS[risk_level]


def calculate_risk_adjusted_value(use_case: UseCase) -> float:
    """NPV * risk multiplier * (impact / effort), rounded to 2 decimals.

    Effort is clamped to >= 1 on the record, so the ratio is always defined.
    """
    effort_impact_ratio = use_case.impact_score / use_case.effort_score
    value = calculate_npv(use_case) * risk_multiplier(use_case.risk_level) * effort_impact_ratio
    return round_half_up(value, 2)


def calculate_roi(use_case: UseCase) -> ROIMetrics:
    """Calculate all ROI metrics for a use case."""
    return ROIMetrics(
        use_case_id=use_case.id,
        basic_roi=calculate_basic_roi(use_case),
        npv=calculate_npv(use_case),
        payback_period=calculate_payback_period(use_case),
        risk_adjusted_value=calculate_risk_adjusted_value(use_case),
    )


def calculate_roi_batch(use_cases: Iterable[UseCase]) -> list[ROIMetrics]:
    """Per-record metrics for a whole collection, in input order."""
    return [calculate_roi(uc) for uc in use_cases]
