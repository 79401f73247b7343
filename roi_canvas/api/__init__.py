"""API router for v1 endpoints."""

from fastapi import APIRouter

from roi_canvas.api import canvas, extract, portfolio

router = APIRouter()

# Per-use-case ROI, portfolio aggregates, ranking, budget selection, merge
router.include_router(portfolio.router, tags=["portfolio"])

# Canvas generation and JSON/Markdown export
router.include_router(canvas.router, prefix="/canvas", tags=["canvas"])

# Candidate ingestion from model output, and the math tool
router.include_router(extract.router, tags=["extract"])
