"""Render a CanvasDocument into exportable JSON and Markdown strings.

Pure Python. The download/save step lives in the caller; this module only
produces file contents.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable

from roi_canvas.core.formatting import format_currency, format_percent
from roi_canvas.core.schemas_canvas import CanvasDocument

SECTION_DIVIDER = "---"


def export_to_json(canvas: CanvasDocument) -> str:
    """Pretty-printed JSON with camelCase keys in schema field order."""
    return json.dumps(canvas.model_dump(mode="json", by_alias=True), indent=2)


def export_filename(canvas: CanvasDocument, extension: str) -> str:
    """Download file name, e.g. ``acme-ai-strategy-2026-10-19.md``."""
    slug = re.sub(r"[^a-z0-9]+", "-", canvas.header.name.lower()).strip("-") or "ai-roi-canvas"
    suffix = f"-{canvas.header.date}" if canvas.header.date else ""
    return f"{slug}{suffix}.{extension.lstrip('.')}"


# =============================================================================
# Markdown
# =============================================================================


def _inline(value: str) -> str:
    """Collapse runs of whitespace, newlines included, to single spaces."""
    return " ".join(value.split())


def _bullets(items: Iterable[str]) -> list[str]:
    return [f"- {_inline(item)}" for item in items]


def _subsection(title: str, items: Iterable[str]) -> list[str]:
    """``### title`` followed by a bullet list (possibly empty) and a blank line."""
    return [f"### {title}", *_bullets(items), ""]


def _table_cell(value: str) -> str:
    return _inline(value).replace("|", "\\|")


def export_to_markdown(canvas: CanvasDocument) -> str:
    """
    Render every canvas section as headed Markdown.

    Section headers are always emitted; empty lists leave the header with no
    bullets beneath it.
    """
    header = canvas.header
    lines = [
        f"# {header.canvas_title}",
        "",
        "## Header",
        f"- **Name:** {header.name}",
        f"- **Designed By:** {header.designed_by}",
        f"- **Designed For:** {header.designed_for}",
        f"- **Date:** {header.date}",
        f"- **Version:** {header.version}",
        "",
        SECTION_DIVIDER,
        "",
        "## Objectives",
        "",
        "### Primary Goal",
        canvas.objectives.primary_goal,
        "",
        *_subsection("Strategic Focus", canvas.objectives.strategic_focus),
        SECTION_DIVIDER,
        "",
        "## Inputs",
        "",
        *_subsection("Resources", canvas.inputs.resources),
        *_subsection("Personnel", canvas.inputs.personnel),
        *_subsection("External Support", canvas.inputs.external_support),
        SECTION_DIVIDER,
        "",
        "## Impacts",
        "",
        *_subsection("Hard Benefits", canvas.impacts.hard_benefits),
        *_subsection("Soft Benefits", canvas.impacts.soft_benefits),
        SECTION_DIVIDER,
        "",
        "## Timeline",
        "",
    ]

    for entry in canvas.timeline:
        lines.extend([
            f"### {_inline(entry.ai_initiative)} ({entry.timeframe.value})",
            f"- **Start:** {entry.start_date}",
            f"- **End:** {entry.end_date}",
            "- **Milestones:**",
            *(f"  - {_inline(m.name)} ({m.date}): {_inline(m.description)}" for m in entry.milestones),
            "",
        ])

    lines.extend([
        SECTION_DIVIDER,
        "",
        "## Risks",
        "",
        "| Risk | Likelihood | Impact | Mitigation |",
        "|------|------------|--------|------------|",
        *(
            f"| {_table_cell(r.name)} | {r.likelihood} | {r.impact} | {_table_cell(r.mitigation)} |"
            for r in canvas.risks
        ),
        "",
        SECTION_DIVIDER,
        "",
        "## Capabilities",
        "",
        *_subsection("Skills Needed", canvas.capabilities.skills_needed),
        *_subsection("Technology", canvas.capabilities.technology),
        SECTION_DIVIDER,
        "",
        "## Costs",
        "",
        "| Category | Amount |",
        "|----------|--------|",
        f"| Near-Term Investment | {format_currency(canvas.costs.near_term)} |",
        f"| Long-Term Investment | {format_currency(canvas.costs.long_term)} |",
        f"| Annual Maintenance | {format_currency(canvas.costs.annual_maintenance)} |",
        "",
        SECTION_DIVIDER,
        "",
        "## Benefits",
        "",
        "| Category | Amount |",
        "|----------|--------|",
        f"| Near-Term Benefits | {format_currency(canvas.benefits.near_term)}/year |",
        f"| Long-Term Benefits | {format_currency(canvas.benefits.long_term)}/year |",
        "",
        *_subsection("Soft Benefits", canvas.benefits.soft_benefits),
        SECTION_DIVIDER,
        "",
        "## Portfolio ROI",
        "",
        f"- **Near-Term ROI:** {format_percent(canvas.portfolio_roi.near_term_roi_percent)}",
        f"- **Long-Term ROI:** {format_percent(canvas.portfolio_roi.long_term_roi_percent)}",
        "",
        canvas.portfolio_roi.portfolio_note,
        "",
        SECTION_DIVIDER,
        "",
        f"*{canvas.footer.credit_line}*" if canvas.footer.credit_line else "",
        "",
    ])

    return "\n".join(lines)
