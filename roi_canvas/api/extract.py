"""Candidate ingestion and math tool endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import Field

from roi_canvas.api.portfolio import ApiModel
from roi_canvas.core.logging import get_logger
from roi_canvas.core.math_tool import MathExpressionError, evaluate_math
from roi_canvas.core.schemas_use_case import CompanyContext, UseCase
from roi_canvas.core.use_case_extraction import extract_from_response

logger = get_logger(__name__)

router = APIRouter()


class ExtractRequest(ApiModel):
    content: str = Field(..., min_length=1, description="Assistant response text")
    user_message: str = ""
    company: CompanyContext | None = None


class ExtractResponse(ApiModel):
    use_cases: list[UseCase] = []
    company: CompanyContext | None = None


class MathRequest(ApiModel):
    expression: str


class MathResponse(ApiModel):
    expression: str
    result: float


@router.post("/extract", response_model=ExtractResponse)
async def extract_use_cases(request: ExtractRequest) -> ExtractResponse:
    """Parse proposed use cases and company context out of one exchange.

    The returned company is the request's context with any newly mentioned
    fields applied.
    """
    result = extract_from_response(request.content, request.user_message, request.company)

    company = request.company
    if result.company is not None:
        company = result.company.apply_to(company or CompanyContext())

    return ExtractResponse(use_cases=result.use_cases, company=company)


@router.post("/math/evaluate", response_model=MathResponse)
async def evaluate_expression(request: MathRequest) -> MathResponse:
    try:
        return MathResponse(**evaluate_math(request.expression))
    except MathExpressionError as e:
        logger.info(f"Rejected math expression: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e
