"""Pydantic schemas for derived ROI and portfolio metrics."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# "Never pays back" sentinel. Excluded from averages, rendered as "N/A",
# serialized to JSON as null.
PAYBACK_NEVER = math.inf


def is_never_payback(months: float) -> bool:
    """True when a payback value is the never-pays-back sentinel."""
    return math.isinf(months)


class ROIMetrics(BaseModel):
    """Per-use-case investment metrics. Derived on demand, never stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    use_case_id: str
    basic_roi: float = 0.0  # percent
    npv: float = 0.0
    payback_period: float = PAYBACK_NEVER  # months
    risk_adjusted_value: float = 0.0

    @field_validator("payback_period", mode="before")
    @classmethod
    def null_means_never(cls, v: Any) -> Any:
        return PAYBACK_NEVER if v is None else v

    @field_serializer("payback_period", when_used="json")
    def never_as_null(self, v: float) -> float | None:
        return None if is_never_payback(v) else v

    @property
    def pays_back(self) -> bool:
        return not is_never_payback(self.payback_period)


class PortfolioMetrics(BaseModel):
    """Aggregates over the selected subset of a use-case collection."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_implementation_cost: float = 0
    total_annual_cost: float = 0
    total_annual_benefits: float = 0
    portfolio_roi: float = 0.0
    portfolio_npv: float = 0
    average_payback: float = 0.0
    near_term_roi: float = 0.0
    long_term_roi: float = 0.0
