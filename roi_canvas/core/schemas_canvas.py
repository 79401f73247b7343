"""Pydantic schemas for the AI ROI & Roadmap Canvas document."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from roi_canvas.core.schemas_use_case import Timeframe


class CanvasModel(BaseModel):
    """Base for canvas sections: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Header & objectives
# ============================================================================


class CanvasHeader(CanvasModel):
    canvas_title: str = "AI ROI & Roadmap Canvas"
    name: str = ""
    designed_by: str = ""
    designed_for: str = ""
    date: str = ""  # ISO calendar date
    version: str = "1.0"


class CanvasObjectives(CanvasModel):
    primary_goal: str = ""
    strategic_focus: list[str] = []


class CanvasInputs(CanvasModel):
    resources: list[str] = []
    personnel: list[str] = []
    external_support: list[str] = []


class CanvasImpacts(CanvasModel):
    hard_benefits: list[str] = []  # "{name}: $X/year"
    soft_benefits: list[str] = []


# ============================================================================
# Timeline & risks
# ============================================================================


class Milestone(CanvasModel):
    name: str
    date: str
    description: str = ""


class TimelineEntry(CanvasModel):
    """One initiative scheduled into its timeframe window."""
    ai_initiative: str
    start_date: str
    end_date: str
    milestones: list[Milestone] = []
    timeframe: Timeframe


class CanvasRisk(CanvasModel):
    name: str
    likelihood: str  # Low, Medium, High
    impact: str
    mitigation: str = ""


class CanvasCapabilities(CanvasModel):
    skills_needed: list[str] = []
    technology: list[str] = []


# ============================================================================
# Money
# ============================================================================


class CanvasCosts(CanvasModel):
    near_term: float = 0
    long_term: float = 0
    annual_maintenance: float = 0


class CanvasBenefits(CanvasModel):
    near_term: float = 0
    long_term: float = 0
    soft_benefits: list[str] = []


class CanvasPortfolioROI(CanvasModel):
    near_term_roi_percent: float = Field(default=0.0, alias="nearTermROIPercent")
    long_term_roi_percent: float = Field(default=0.0, alias="longTermROIPercent")
    portfolio_note: str = ""


class CanvasFooter(CanvasModel):
    credit_line: str = ""


class CanvasDocument(CanvasModel):
    """The full exportable canvas. Regenerated wholesale, never patched."""
    header: CanvasHeader = Field(default_factory=CanvasHeader)
    objectives: CanvasObjectives = Field(default_factory=CanvasObjectives)
    inputs: CanvasInputs = Field(default_factory=CanvasInputs)
    impacts: CanvasImpacts = Field(default_factory=CanvasImpacts)
    timeline: list[TimelineEntry] = []
    risks: list[CanvasRisk] = []
    capabilities: CanvasCapabilities = Field(default_factory=CanvasCapabilities)
    costs: CanvasCosts = Field(default_factory=CanvasCosts)
    benefits: CanvasBenefits = Field(default_factory=CanvasBenefits)
    portfolio_roi: CanvasPortfolioROI = Field(default_factory=CanvasPortfolioROI, alias="portfolioROI")
    footer: CanvasFooter = Field(default_factory=CanvasFooter)
