"""Caller-owned canvas workspace: use cases, company context and last canvas.

The workspace is a plain pydantic model. It holds no locks and never touches
storage: callers persist it by saving ``to_snapshot()`` and restore it with
``CanvasWorkspace.from_snapshot()``, and serialize their own writes.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from roi_canvas.core.canvas_builder import create_empty_canvas, generate_canvas
from roi_canvas.core.config import get_settings
from roi_canvas.core.logging import get_logger, log_with_context
from roi_canvas.core.portfolio import (
    calculate_portfolio_metrics,
    merge_use_cases,
    select_portfolio_by_budget,
    selected_use_cases,
)
from roi_canvas.core.schemas_canvas import CanvasDocument
from roi_canvas.core.schemas_roi import PortfolioMetrics
from roi_canvas.core.schemas_use_case import CompanyContext, UseCase
from roi_canvas.core.use_case_extraction import ExtractionResult

logger = get_logger(__name__)


class UseCaseNotFoundError(KeyError):
    """No use case with the given id in the workspace."""


def _new_workspace_id() -> str:
    return f"ws-{uuid4().hex[:8]}"


class CanvasWorkspace(BaseModel):
    """Mutable working set behind the interview, portfolio and canvas views."""

    id: str = Field(default_factory=_new_workspace_id, description="Correlation id for logs")
    use_cases: list[UseCase] = Field(default_factory=list)
    company: CompanyContext = Field(default_factory=CompanyContext)
    canvas: CanvasDocument = Field(default_factory=create_empty_canvas)

    # ========================================================================
    # Use cases
    # ========================================================================

    def _index_of(self, use_case_id: str) -> int:
        for i, uc in enumerate(self.use_cases):
            if uc.id == use_case_id:
                return i
        raise UseCaseNotFoundError(use_case_id)

    def get_use_case(self, use_case_id: str) -> UseCase:
        return self.use_cases[self._index_of(use_case_id)]

    def add_use_case(self, use_case: UseCase) -> None:
        self.use_cases.append(use_case)

    def update_use_case(self, use_case_id: str, **changes: Any) -> UseCase:
        """
        Apply field edits to one use case.

        The edited record is re-validated, so edits get the same clamping and
        defaulting as freshly ingested records.

        Raises:
            UseCaseNotFoundError: If no record has this id
        """
        index = self._index_of(use_case_id)
        data = self.use_cases[index].model_dump()
        data.update(changes)
        data["id"] = use_case_id
        updated = UseCase.model_validate(data)
        self.use_cases[index] = updated
        return updated

    def remove_use_case(self, use_case_id: str) -> None:
        del self.use_cases[self._index_of(use_case_id)]

    def toggle_use_case_selection(self, use_case_id: str) -> UseCase:
        index = self._index_of(use_case_id)
        current = self.use_cases[index]
        self.use_cases[index] = current.model_copy(update={"selected": not current.selected})
        return self.use_cases[index]

    def set_use_cases(self, use_cases: list[UseCase]) -> None:
        self.use_cases = list(use_cases)

    def merge_candidates(self, candidates: list[UseCase]) -> int:
        """Merge proposed use cases by name; returns how many were added."""
        before = len(self.use_cases)
        self.use_cases = merge_use_cases(self.use_cases, candidates)
        added = len(self.use_cases) - before
        log_with_context(
            logger,
            logging.INFO,
            "Merged candidates into workspace",
            workspace_id=self.id,
            candidates=len(candidates),
            added=added,
        )
        return added

    def apply_extraction(self, result: ExtractionResult) -> int:
        """Fold one ingestion result into the workspace; returns use cases added."""
        if result.company is not None:
            self.company = result.company.apply_to(self.company)
        return self.merge_candidates(result.use_cases)

    # ========================================================================
    # Company context
    # ========================================================================

    def set_company_context(self, name: str, industry: str, budget: float) -> None:
        self.company = CompanyContext(
            company_name=name, industry=industry, budget_constraint=budget
        )

    # ========================================================================
    # Derived views
    # ========================================================================

    def selected_use_cases(self) -> list[UseCase]:
        return selected_use_cases(self.use_cases)

    def portfolio_metrics(self) -> PortfolioMetrics:
        return calculate_portfolio_metrics(self.use_cases)

    def apply_budget_selection(self, max_budget: float | None = None) -> list[UseCase]:
        """Re-select the portfolio greedily under the budget (company budget by default)."""
        budget = self.company.budget_constraint if max_budget is None else max_budget
        self.use_cases = select_portfolio_by_budget(self.use_cases, budget)
        log_with_context(
            logger,
            logging.INFO,
            "Applied budget selection",
            workspace_id=self.id,
            budget=budget,
            selected=len(self.selected_use_cases()),
        )
        return self.use_cases

    def regenerate_canvas(self, designed_by: str | None = None, today: date | None = None) -> CanvasDocument:
        """Rebuild the canvas from the current selection and store it."""
        self.canvas = generate_canvas(
            self.use_cases,
            company_name=self.company.company_name,
            industry=self.company.industry,
            designed_by=designed_by or get_settings().CANVAS_DESIGNED_BY,
            today=today,
        )
        log_with_context(
            logger,
            logging.INFO,
            "Regenerated canvas",
            workspace_id=self.id,
            initiatives=len(self.canvas.timeline),
        )
        return self.canvas

    def reset(self) -> None:
        """Clear use cases, company and canvas; the workspace keeps its id."""
        self.use_cases = []
        self.company = CompanyContext()
        self.canvas = create_empty_canvas()

    # ========================================================================
    # Persistence snapshot
    # ========================================================================

    def to_snapshot(self) -> str:
        """JSON snapshot for an external key-value store."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_snapshot(cls, snapshot: str) -> CanvasWorkspace:
        workspace = cls.model_validate_json(snapshot)
        log_with_context(
            logger,
            logging.DEBUG,
            "Restored workspace",
            workspace_id=workspace.id,
            use_cases=len(workspace.use_cases),
        )
        return workspace
