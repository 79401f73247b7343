"""Portfolio-level aggregation, ranking and budget selection.

Everything here works on collections of UseCase records and returns new
values; input records are never mutated. Aggregates only ever consider the
``selected`` subset.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from roi_canvas.core.formatting import round_half_up
from roi_canvas.core.roi_calculations import (
    calculate_npv,
    calculate_payback_period,
    calculate_risk_adjusted_value,
    roi_percent,
)
from roi_canvas.core.schemas_roi import PortfolioMetrics, is_never_payback
from roi_canvas.core.schemas_use_case import Timeframe, UseCase

logger = logging.getLogger(__name__)

NEAR_TERM_TIMEFRAMES = frozenset({Timeframe.Q1, Timeframe.ONE_YEAR})
LONG_TERM_TIMEFRAMES = frozenset({Timeframe.THREE_YEAR})


def selected_use_cases(use_cases: Iterable[UseCase]) -> list[UseCase]:
    """The active portfolio: records marked selected, in input order."""
    return [uc for uc in use_cases if uc.selected]


def _subset_roi(use_cases: Sequence[UseCase]) -> float:
    """Basic ROI of a subset treated as one aggregate use case."""
    benefit = sum(uc.hard_benefits for uc in use_cases)
    cost = sum(uc.implementation_cost + uc.annual_cost for uc in use_cases)
    return roi_percent(benefit, cost)


# =============================================================================
# Aggregation
# =============================================================================


def calculate_portfolio_metrics(use_cases: Iterable[UseCase]) -> PortfolioMetrics:
    """
    Calculate portfolio-level metrics over the selected use cases.

    Args:
        use_cases: Full collection; unselected records are ignored

    Returns:
        PortfolioMetrics. All zeros when nothing is selected.
    """
    selected = selected_use_cases(use_cases)
    if not selected:
        return PortfolioMetrics()

    total_implementation_cost = sum(uc.implementation_cost for uc in selected)
    total_annual_cost = sum(uc.annual_cost for uc in selected)
    total_annual_benefits = sum(uc.hard_benefits for uc in selected)

    near_term = [uc for uc in selected if uc.timeframe in NEAR_TERM_TIMEFRAMES]
    long_term = [uc for uc in selected if uc.timeframe in LONG_TERM_TIMEFRAMES]

    portfolio_roi = roi_percent(
        total_annual_benefits, total_implementation_cost + total_annual_cost
    )

    # Per-record NPVs summed, not recomputed from aggregate cash flows
    portfolio_npv = sum(calculate_npv(uc) for uc in selected)

    paybacks = [
        months
        for months in (calculate_payback_period(uc) for uc in selected)
        if not is_never_payback(months)
    ]
    average_payback = sum(paybacks) / len(paybacks) if paybacks else 0.0

    return PortfolioMetrics(
        total_implementation_cost=round_half_up(total_implementation_cost),
        total_annual_cost=round_half_up(total_annual_cost),
        total_annual_benefits=round_half_up(total_annual_benefits),
        portfolio_roi=round_half_up(portfolio_roi, 2),
        portfolio_npv=round_half_up(portfolio_npv),
        average_payback=round_half_up(average_payback, 1),
        near_term_roi=round_half_up(_subset_roi(near_term), 2),
        long_term_roi=round_half_up(_subset_roi(long_term), 2),
    )


# =============================================================================
# Ranking & selection
# =============================================================================


def rank_use_cases(use_cases: Iterable[UseCase]) -> list[UseCase]:
    """
    Order use cases by risk-adjusted value, highest first.

    The sort is stable: records with equal value keep their input order, so
    re-ranking an already ranked collection returns it unchanged.
    """
    scored = [(calculate_risk_adjusted_value(uc), uc) for uc in use_cases]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [uc for _, uc in scored]


def select_portfolio_by_budget(use_cases: Iterable[UseCase], max_budget: float) -> list[UseCase]:
    """
    Greedily select use cases in ranked order under a budget cap.

    Walks the ranking once: a record is selected when its implementation cost
    fits the remaining budget (which is then reduced), otherwise it is kept in
    the output but deselected. Annual cost never counts against the budget.
    This is priority-order selection, not an optimal knapsack.

    Args:
        use_cases: Collection to choose from
        max_budget: Ceiling on summed implementation cost

    Returns:
        New list of copies in ranked order, each with ``selected`` set
    """
    remaining_budget = max_budget
    result: list[UseCase] = []

    for use_case in rank_use_cases(use_cases):
        cost = use_case.implementation_cost
        if cost <= remaining_budget:
            result.append(use_case.model_copy(update={"selected": True}))
            remaining_budget -= cost
        else:
            result.append(use_case.model_copy(update={"selected": False}))

    selected_count = sum(1 for uc in result if uc.selected)
    logger.info(
        f"Budget selection picked {selected_count}/{len(result)} use cases "
        f"(budget={max_budget}, remaining={remaining_budget})"
    )
    return result


# =============================================================================
# Merging proposed records
# =============================================================================


def _name_key(use_case: UseCase) -> str:
    return use_case.name.lower()


def merge_use_cases(existing: Sequence[UseCase], candidates: Iterable[UseCase]) -> list[UseCase]:
    """
    Append candidates whose name is not already in the collection.

    Names are compared case-insensitively against the existing records only;
    duplicates within one candidate batch are all kept.

    Returns:
        New list: existing records followed by the accepted candidates
    """
    existing_names = {_name_key(uc) for uc in existing}
    accepted = [uc for uc in candidates if _name_key(uc) not in existing_names]

    if accepted:
        logger.debug(f"Merged {len(accepted)} new use cases into collection of {len(existing)}")
    return [*existing, *accepted]
