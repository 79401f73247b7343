"""Canvas generation and export endpoints."""

from datetime import date

from fastapi import APIRouter
from pydantic import Field

from roi_canvas.api.portfolio import ApiModel
from roi_canvas.core.canvas_builder import generate_canvas
from roi_canvas.core.canvas_export import export_filename, export_to_json, export_to_markdown
from roi_canvas.core.config import get_settings
from roi_canvas.core.schemas_canvas import CanvasDocument
from roi_canvas.core.schemas_use_case import UseCase

router = APIRouter()


class CanvasRequest(ApiModel):
    use_cases: list[UseCase] = Field(default_factory=list)
    company_name: str = ""
    industry: str = ""
    designed_by: str | None = None
    today: date | None = Field(None, description="Generation date, defaults to today")


class ExportRequest(ApiModel):
    canvas: CanvasDocument


class ExportResponse(ApiModel):
    filename: str
    media_type: str
    content: str


@router.post("", response_model=CanvasDocument)
async def create_canvas(request: CanvasRequest) -> CanvasDocument:
    """Assemble a canvas from the selected use cases."""
    return generate_canvas(
        request.use_cases,
        company_name=request.company_name,
        industry=request.industry,
        designed_by=request.designed_by or get_settings().CANVAS_DESIGNED_BY,
        today=request.today,
    )


@router.post("/export/json", response_model=ExportResponse)
async def export_canvas_json(request: ExportRequest) -> ExportResponse:
    return ExportResponse(
        filename=export_filename(request.canvas, "json"),
        media_type="application/json",
        content=export_to_json(request.canvas),
    )


@router.post("/export/markdown", response_model=ExportResponse)
async def export_canvas_markdown(request: ExportRequest) -> ExportResponse:
    return ExportResponse(
        filename=export_filename(request.canvas, "md"),
        media_type="text/markdown",
        content=export_to_markdown(request.canvas),
    )
