"""Assemble an AI ROI & Roadmap Canvas from use cases and company context.

Pure Python, no LLM calls. The only non-deterministic input is "today",
which callers (and tests) may pin via ``today=``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from roi_canvas.core.formatting import format_currency
from roi_canvas.core.portfolio import calculate_portfolio_metrics, selected_use_cases
from roi_canvas.core.schemas_canvas import (
    CanvasBenefits,
    CanvasCapabilities,
    CanvasCosts,
    CanvasDocument,
    CanvasFooter,
    CanvasHeader,
    CanvasImpacts,
    CanvasInputs,
    CanvasObjectives,
    CanvasPortfolioROI,
    CanvasRisk,
    Milestone,
    TimelineEntry,
)
from roi_canvas.core.schemas_use_case import RiskLevel, Timeframe, UseCase

logger = logging.getLogger(__name__)

CANVAS_TITLE = "AI ROI & Roadmap Canvas"
CANVAS_VERSION = "1.0"
DEFAULT_DESIGNED_BY = "AI ROI Canvas Agent"

MAX_KPI_FOCUS = 3

BASELINE_STRATEGIC_FOCUS = [
    "Automate repetitive processes",
    "Enhance decision-making with data insights",
    "Improve customer experience",
]

BASELINE_RESOURCES = [
    "AI/ML development platform",
    "Cloud infrastructure",
    "Data storage and processing",
]

# Dependencies containing any of these (case-insensitive) are listed as resources.
# Crude substring heuristic; dependencies carry no structured type yet.
RESOURCE_KEYWORDS = ("data", "platform")

PERSONNEL = [
    "AI/ML Engineers",
    "Data Scientists",
    "Project Managers",
    "Business Analysts",
]

EXTERNAL_SUPPORT = [
    "AI consulting partners",
    "Cloud service providers",
    "Training and certification programs",
]

SKILLS_NEEDED = [
    "Machine Learning",
    "Natural Language Processing",
    "Computer Vision",
    "Data Engineering",
    "Cloud Architecture",
    "MLOps",
]

TECHNOLOGY = [
    "Python/TensorFlow/PyTorch",
    "Cloud AI Services (AWS/Azure/GCP)",
    "Data Pipeline Tools",
    "Model Monitoring Systems",
    "API Development",
]

# (start_day, end_day, [(milestone, day_offset, description), ...]) per bucket
TIMELINE_WINDOWS: dict[Timeframe, tuple[int, int, list[tuple[str, int, str]]]] = {
    Timeframe.Q1: (0, 90, [
        ("Kickoff", 0, "Project initiation"),
        ("MVP", 60, "Minimum viable product"),
        ("Go-Live", 90, "Production deployment"),
    ]),
    Timeframe.ONE_YEAR: (90, 365, [
        ("Planning", 90, "Detailed planning"),
        ("Development", 200, "Core development"),
        ("Launch", 365, "Full launch"),
    ]),
    Timeframe.THREE_YEAR: (365, 1095, [
        ("Foundation", 365, "Build foundation"),
        ("Scale", 730, "Scale operations"),
        ("Optimize", 1095, "Full optimization"),
    ]),
}

# Timeline order: Q1 first, then 1-Year, then 3-Year
TIMELINE_ORDER = (Timeframe.Q1, Timeframe.ONE_YEAR, Timeframe.THREE_YEAR)


def _unique(items: Iterable[str]) -> list[str]:
    """Deduplicate preserving first-seen order."""
    return list(dict.fromkeys(items))


def _offset(today: date, days: int) -> str:
    return (today + timedelta(days=days)).isoformat()


def _by_timeframe(use_cases: Sequence[UseCase], timeframe: Timeframe) -> list[UseCase]:
    return [uc for uc in use_cases if uc.timeframe == timeframe]


def _build_timeline(use_cases: Sequence[UseCase], today: date) -> list[TimelineEntry]:
    entries: list[TimelineEntry] = []
    for timeframe in TIMELINE_ORDER:
        start_day, end_day, checkpoints = TIMELINE_WINDOWS[timeframe]
        for uc in _by_timeframe(use_cases, timeframe):
            entries.append(
                TimelineEntry(
                    ai_initiative=uc.name,
                    start_date=_offset(today, start_day),
                    end_date=_offset(today, end_day),
                    milestones=[
                        Milestone(name=name, date=_offset(today, day), description=desc)
                        for name, day, desc in checkpoints
                    ],
                    timeframe=timeframe,
                )
            )
    return entries


def _build_risks(use_cases: Sequence[UseCase]) -> list[CanvasRisk]:
    return [
        CanvasRisk(
            name=f"{uc.name} Implementation Risk",
            likelihood="High" if uc.risk_level == RiskLevel.HIGH else "Medium",
            impact="Medium",
            mitigation=f"Phased rollout, pilot testing, and change management for {uc.name}",
        )
        for uc in use_cases
        if uc.risk_level != RiskLevel.LOW
    ]


def _is_resource_dependency(dependency: str) -> bool:
    text = dependency.lower()
    return any(keyword in text for keyword in RESOURCE_KEYWORDS)


def generate_canvas(
    use_cases: Iterable[UseCase],
    company_name: str,
    industry: str = "",
    designed_by: str = DEFAULT_DESIGNED_BY,
    today: date | None = None,
) -> CanvasDocument:
    """
    Build a canvas document from the selected use cases.

    Args:
        use_cases: Collection of records; only selected ones are used
        company_name: Company the canvas is designed for
        industry: Company industry (may be empty)
        designed_by: Author label for the header
        today: Generation date, defaults to the current date

    Returns:
        A fresh CanvasDocument. Empty selections produce empty lists and
        zero sums, never missing sections.
    """
    all_use_cases = list(use_cases)
    selected = selected_use_cases(all_use_cases)
    metrics = calculate_portfolio_metrics(all_use_cases)
    today = today or date.today()
    generated_on = today.isoformat()

    all_kpis = _unique(kpi for uc in selected for kpi in uc.kpis)
    all_soft_benefits = _unique(b for uc in selected for b in uc.soft_benefits)
    all_dependencies = _unique(d for uc in selected for d in uc.dependencies)

    q1_cases = _by_timeframe(selected, Timeframe.Q1)
    later_cases = _by_timeframe(selected, Timeframe.ONE_YEAR) + _by_timeframe(
        selected, Timeframe.THREE_YEAR
    )

    canvas = CanvasDocument(
        header=CanvasHeader(
            canvas_title=CANVAS_TITLE,
            name=f"{company_name} AI Strategy",
            designed_by=designed_by,
            designed_for=company_name,
            date=generated_on,
            version=CANVAS_VERSION,
        ),
        objectives=CanvasObjectives(
            primary_goal=f"Transform {company_name} operations through strategic AI adoption",
            strategic_focus=[*BASELINE_STRATEGIC_FOCUS, *all_kpis[:MAX_KPI_FOCUS]],
        ),
        inputs=CanvasInputs(
            resources=[
                *BASELINE_RESOURCES,
                *(d for d in all_dependencies if _is_resource_dependency(d)),
            ],
            personnel=list(PERSONNEL),
            external_support=list(EXTERNAL_SUPPORT),
        ),
        impacts=CanvasImpacts(
            hard_benefits=[f"{uc.name}: {format_currency(uc.hard_benefits)}/year" for uc in selected],
            soft_benefits=all_soft_benefits,
        ),
        timeline=_build_timeline(selected, today),
        risks=_build_risks(selected),
        capabilities=CanvasCapabilities(
            skills_needed=list(SKILLS_NEEDED),
            technology=list(TECHNOLOGY),
        ),
        costs=CanvasCosts(
            near_term=sum(uc.implementation_cost for uc in q1_cases),
            long_term=sum(uc.implementation_cost for uc in later_cases),
            annual_maintenance=sum(uc.annual_cost for uc in selected),
        ),
        benefits=CanvasBenefits(
            near_term=sum(uc.hard_benefits for uc in q1_cases),
            long_term=sum(uc.hard_benefits for uc in later_cases),
            soft_benefits=list(all_soft_benefits),
        ),
        portfolio_roi=CanvasPortfolioROI(
            near_term_roi_percent=metrics.near_term_roi,
            long_term_roi_percent=metrics.long_term_roi,
            portfolio_note=(
                f"Portfolio of {len(selected)} AI initiatives with total NPV of "
                f"{format_currency(metrics.portfolio_npv)} and average payback of "
                f"{metrics.average_payback:.1f} months."
            ),
        ),
        footer=CanvasFooter(credit_line=f"Generated by AI ROI Canvas Agent | {generated_on}"),
    )

    logger.info(
        f"Generated canvas for {company_name or '<unnamed company>'} ({industry or 'no industry'}): "
        f"{len(selected)} initiatives, {len(canvas.risks)} risks"
    )
    return canvas


def create_empty_canvas() -> CanvasDocument:
    """A blank but well-formed canvas, used before anything is generated."""
    return CanvasDocument()
