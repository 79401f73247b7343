"""Pydantic schemas for AI use-case records and company context.

Records usually arrive from model output, so every validator here coerces
rather than rejects: missing numbers become 0, scores are clamped to 1-5,
and unrecognized risk levels / timeframes fall back to Medium / 1-Year.
Only input that cannot be coerced at all (e.g. ``"lots"`` or ``inf`` as a
cost) raises.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from roi_canvas.core.config import get_settings

UNNAMED_USE_CASE = "Unnamed Use Case"

MIN_SCORE = 1
MAX_SCORE = 5
DEFAULT_SCORE = 3


class RiskLevel(str, Enum):
    """Implementation risk of a use case."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Timeframe(str, Enum):
    """Delivery bucket a use case is planned into."""

    Q1 = "Q1"
    ONE_YEAR = "1-Year"
    THREE_YEAR = "3-Year"


# Normalized (lowercase, letters only) risk text → level.
# Compound labels like "medium-high" collapse to Medium.
_RISK_ALIASES: dict[str, RiskLevel] = {
    "low": RiskLevel.LOW,
    "medium": RiskLevel.MEDIUM,
    "high": RiskLevel.HIGH,
    "lowmedium": RiskLevel.MEDIUM,
    "mediumlow": RiskLevel.MEDIUM,
    "mediumhigh": RiskLevel.MEDIUM,
    "highmedium": RiskLevel.MEDIUM,
}

# Normalized (lowercase, alphanumerics only) timeframe text → bucket
_TIMEFRAME_ALIASES: dict[str, Timeframe] = {
    "q1": Timeframe.Q1,
    "1year": Timeframe.ONE_YEAR,
    "oneyear": Timeframe.ONE_YEAR,
    "3year": Timeframe.THREE_YEAR,
    "threeyear": Timeframe.THREE_YEAR,
}


def normalize_risk_level(value: Any) -> RiskLevel:
    """Map free-form risk text onto a RiskLevel, defaulting to Medium."""
    if isinstance(value, RiskLevel):
        return value
    if not isinstance(value, str):
        return RiskLevel.MEDIUM
    key = re.sub(r"[^a-z]", "", value.lower())
    return _RISK_ALIASES.get(key, RiskLevel.MEDIUM)


def normalize_timeframe(value: Any) -> Timeframe:
    """Map free-form timeframe text onto a Timeframe, defaulting to 1-Year."""
    if isinstance(value, Timeframe):
        return value
    if not isinstance(value, str):
        return Timeframe.ONE_YEAR
    key = re.sub(r"[^a-z0-9]", "", value.lower())
    return _TIMEFRAME_ALIASES.get(key, Timeframe.ONE_YEAR)


def clamp_score(value: Any) -> int:
    """Clamp an effort/impact score into [1, 5]; falsy or non-numeric input counts as 3."""
    if isinstance(value, bool) or not value:
        return DEFAULT_SCORE
    try:
        score = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    except OverflowError:
        # Integers too large for a float
        return MAX_SCORE if value > 0 else MIN_SCORE
    if math.isnan(score):
        return DEFAULT_SCORE
    # Clamp before rounding so infinities land on the bounds
    return round(min(MAX_SCORE, max(MIN_SCORE, score)))


def _new_use_case_id() -> str:
    return f"uc-{uuid4().hex[:8]}"


class UseCase(BaseModel):
    """A candidate AI initiative with its cost, benefit and risk attributes.

    Field names are snake_case in Python; camelCase aliases (``hardBenefits``,
    ``riskLevel`` …) are accepted on input and used for wire serialization.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )

    id: str = Field(default_factory=_new_use_case_id, description="Identifier within a collection")
    name: str = Field(default=UNNAMED_USE_CASE, description="Display label")
    problem_statement: str = ""
    kpis: list[str] = Field(default_factory=list)
    hard_benefits: float = Field(default=0.0, description="Annual quantified benefit ($)")
    soft_benefits: list[str] = Field(default_factory=list)
    implementation_cost: float = Field(default=0.0, description="One-time cost ($)")
    annual_cost: float = Field(default=0.0, description="Recurring annual cost ($)")
    effort_score: int = DEFAULT_SCORE
    impact_score: int = DEFAULT_SCORE
    risk_level: RiskLevel = RiskLevel.MEDIUM
    dependencies: list[str] = Field(default_factory=list)
    timeframe: Timeframe = Timeframe.ONE_YEAR
    selected: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def default_id(cls, v: Any) -> Any:
        if v is None or v == "":
            return _new_use_case_id()
        return str(v)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNNAMED_USE_CASE
        return v

    @field_validator("problem_statement", mode="before")
    @classmethod
    def default_problem_statement(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("hard_benefits", "implementation_cost", "annual_cost", mode="before")
    @classmethod
    def default_amount(cls, v: Any) -> Any:
        """Missing amounts count as 0."""
        if v is None or v == "":
            return 0.0
        return v

    @field_validator("hard_benefits", "implementation_cost", "annual_cost")
    @classmethod
    def floor_amount(cls, v: float) -> float:
        return max(0.0, v)

    @field_validator("effort_score", "impact_score", mode="before")
    @classmethod
    def clamp_scores(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("risk_level", mode="before")
    @classmethod
    def coerce_risk_level(cls, v: Any) -> RiskLevel:
        return normalize_risk_level(v)

    @field_validator("timeframe", mode="before")
    @classmethod
    def coerce_timeframe(cls, v: Any) -> Timeframe:
        return normalize_timeframe(v)

    @field_validator("kpis", "soft_benefits", "dependencies", mode="before")
    @classmethod
    def coerce_string_to_list(cls, v: Any) -> list[str]:
        """Convert null to [] and comma-separated strings to lists."""
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v if item is not None and str(item).strip()]
        return []

    @field_validator("selected", mode="before")
    @classmethod
    def default_selected(cls, v: Any) -> Any:
        return True if v is None else v

    @property
    def total_cost(self) -> float:
        """Implementation plus one year of running cost."""
        return self.implementation_cost + self.annual_cost


class CompanyContext(BaseModel):
    """Who the canvas is for and how much they can spend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    company_name: str = ""
    industry: str = ""
    budget_constraint: float = Field(default_factory=lambda: get_settings().DEFAULT_BUDGET)

    @field_validator("company_name", "industry", mode="before")
    @classmethod
    def default_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("budget_constraint", mode="before")
    @classmethod
    def default_budget(cls, v: Any) -> Any:
        if v is None or v == "":
            return get_settings().DEFAULT_BUDGET
        return v
