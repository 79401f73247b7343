"""ROI and portfolio endpoints: metrics, ranking, budget selection and merge."""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from roi_canvas.core.logging import get_logger, log_with_context
from roi_canvas.core.portfolio import (
    calculate_portfolio_metrics,
    merge_use_cases,
    rank_use_cases,
    select_portfolio_by_budget,
)
from roi_canvas.core.roi_calculations import calculate_roi_batch
from roi_canvas.core.schemas_roi import PortfolioMetrics, ROIMetrics
from roi_canvas.core.schemas_use_case import UseCase
from roi_canvas.core.use_case_extraction import normalize_candidate

logger = get_logger(__name__)

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UseCaseBatchRequest(ApiModel):
    use_cases: list[UseCase] = Field(default_factory=list)


class BudgetSelectionRequest(UseCaseBatchRequest):
    max_budget: float = Field(..., ge=0, description="Ceiling on summed implementation cost")


class MergeRequest(ApiModel):
    existing: list[UseCase] = Field(default_factory=list)
    candidates: list[dict[str, Any]] = Field(
        default_factory=list, description="Raw proposed records, normalized on the way in"
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/roi/metrics", response_model=list[ROIMetrics])
async def roi_metrics(request: UseCaseBatchRequest) -> list[ROIMetrics]:
    """Per-use-case ROI, NPV, payback (null = never) and risk-adjusted value."""
    return calculate_roi_batch(request.use_cases)


@router.post("/portfolio/metrics", response_model=PortfolioMetrics)
async def portfolio_metrics(request: UseCaseBatchRequest) -> PortfolioMetrics:
    return calculate_portfolio_metrics(request.use_cases)


@router.post("/portfolio/rank", response_model=list[UseCase])
async def rank_portfolio(request: UseCaseBatchRequest) -> list[UseCase]:
    return rank_use_cases(request.use_cases)


@router.post("/portfolio/select", response_model=list[UseCase])
async def select_portfolio(request: BudgetSelectionRequest) -> list[UseCase]:
    """Greedy priority-order selection under the budget; deselected records are kept."""
    return select_portfolio_by_budget(request.use_cases, request.max_budget)


@router.post("/portfolio/merge", response_model=list[UseCase])
async def merge_portfolio(request: MergeRequest) -> list[UseCase]:
    """Existing records plus candidates whose name (case-insensitive) is new."""
    candidates = [uc for uc in map(normalize_candidate, request.candidates) if uc is not None]
    merged = merge_use_cases(request.existing, candidates)
    log_with_context(
        logger,
        logging.INFO,
        "Merged candidates",
        existing=len(request.existing),
        candidates=len(request.candidates),
        accepted=len(merged) - len(request.existing),
    )
    return merged
