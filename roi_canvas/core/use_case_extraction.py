"""Turn model output and user text into candidate use cases and company context.

This is the ingestion boundary in front of the ROI engine. The assistant is
prompted to embed ```json blocks shaped like::

    {"company": {"name": ..., "industry": ..., "budget": ...},
     "useCases": [{"name": ..., "hardBenefits": ..., ...}]}

Blocks are parsed leniently: a block that fails to parse is logged and
skipped, never raised. Each candidate is normalized through the UseCase
validators (clamped scores, defaulted enums and amounts). When the model
emitted no fenced block with use cases, inline ``{"useCases": [...]}``
objects in the prose are tried instead. Company context falls back to regex
extraction from the user's own message.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from roi_canvas.core.config import get_settings
from roi_canvas.core.schemas_use_case import CompanyContext, UseCase

logger = logging.getLogger(__name__)

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)```")
_INLINE_USE_CASES_KEY_RE = re.compile(r'"useCases"\s*:')

# User-message fallbacks
_COMPANY_RE = re.compile(
    r"(?:I'm|I am|we're|we are)\s+(?:the\s+)?(?:CTO|CEO|VP|Director|Manager|Head)?\s*"
    r"(?:at|of|for)\s+([A-Za-z0-9\s]+?)(?:,|\.|\s+a\s|\s+in\s)",
    re.IGNORECASE,
)
_INDUSTRY_RE = re.compile(
    r"\b(?:in the|industry[:\s]+|sector[:\s]+)\s*([A-Za-z][A-Za-z\s]{2,}?)"
    r"(?:\s+industry|\s+sector|\s+space|\.|,)",
    re.IGNORECASE,
)
_BUDGET_RE = re.compile(r"budget[^\d]*\$?([\d,.]+)\s*(million|thousand|m|k)?\b", re.IGNORECASE)

_BUDGET_MULTIPLIERS = {
    "million": 1_000_000,
    "m": 1_000_000,
    "thousand": 1_000,
    "k": 1_000,
}

_INDUSTRY_STOP_WORDS = {"the", "a", "an", "and", "or"}
MIN_INDUSTRY_CHARS = 3


@dataclass
class CompanyContextUpdate:
    """Company fields found in one response. None means "not mentioned"."""
    company_name: str | None = None
    industry: str | None = None
    budget_constraint: float | None = None

    def is_empty(self) -> bool:
        return not (self.company_name or self.industry or self.budget_constraint)

    def apply_to(self, context: CompanyContext) -> CompanyContext:
        """New context with mentioned fields overriding the current ones."""
        return CompanyContext(
            company_name=self.company_name or context.company_name,
            industry=self.industry or context.industry,
            budget_constraint=self.budget_constraint or context.budget_constraint,
        )


@dataclass
class ExtractionResult:
    use_cases: list[UseCase] = field(default_factory=list)
    company: CompanyContextUpdate | None = None


# =============================================================================
# JSON blocks
# =============================================================================


def extract_json_blocks(text: str) -> list[Any]:
    """Parse every fenced ```json block; unparseable blocks are skipped."""
    blocks: list[Any] = []
    for match in _FENCED_JSON_RE.finditer(text):
        try:
            blocks.append(json.loads(match.group(1).strip()))
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping unparseable JSON block: {e}")
    return blocks


def extract_inline_use_case_blocks(text: str) -> list[Any]:
    """
    Parse unfenced ``{..."useCases": [...]...}`` objects embedded in prose.

    For each ``"useCases"`` key, candidate opening braces are tried from the
    nearest one outwards until one decodes to an object holding that key.
    """
    decoder = json.JSONDecoder()
    blocks: list[Any] = []
    consumed_until = 0

    for key in _INLINE_USE_CASES_KEY_RE.finditer(text):
        if key.start() < consumed_until:
            continue
        start = text.rfind("{", consumed_until, key.start())
        while start != -1:
            try:
                obj, end = decoder.raw_decode(text, start)
            except json.JSONDecodeError:
                obj, end = None, start
            if isinstance(obj, dict) and "useCases" in obj:
                blocks.append(obj)
                consumed_until = end
                break
            start = text.rfind("{", consumed_until, start)
        else:
            logger.warning("Skipping unparseable inline use-case JSON")

    return blocks


def normalize_candidate(raw: Any) -> UseCase | None:
    """
    Build a UseCase from one raw candidate dict (camelCase or snake_case keys).

    Proposed records start selected. Returns None when the candidate cannot be
    coerced at all (not a dict, or e.g. a non-numeric cost).
    """
    if not isinstance(raw, dict):
        logger.warning(f"Skipping non-object use-case candidate: {type(raw).__name__}")
        return None

    data = dict(raw)
    data.setdefault("selected", True)
    try:
        return UseCase.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Skipping use-case candidate {data.get('name')!r}: {e.error_count()} errors")
        return None


def _use_cases_from_block(block: Any) -> list[UseCase] | None:
    """Candidates in a block, or None when the block has no useCases array."""
    if not isinstance(block, dict):
        return None
    raw_use_cases = block.get("useCases", block.get("use_cases"))
    if not isinstance(raw_use_cases, list):
        return None
    candidates = (normalize_candidate(raw) for raw in raw_use_cases)
    return [uc for uc in candidates if uc is not None]


def _company_from_block(block: Any) -> CompanyContextUpdate | None:
    if not isinstance(block, dict) or not isinstance(block.get("company"), dict):
        return None
    company = block["company"]
    budget = company.get("budget")
    update = CompanyContextUpdate(
        company_name=company.get("name") or None,
        industry=company.get("industry") or None,
        budget_constraint=float(budget) if isinstance(budget, (int, float)) and budget else None,
    )
    return None if update.is_empty() else update


# =============================================================================
# User-message fallback
# =============================================================================


def parse_budget(amount: str, unit: str | None = None) -> float | None:
    """``("2.5", "million")`` → 2500000.0. None when the amount isn't numeric."""
    try:
        budget = float(amount.replace(",", ""))
    except ValueError:
        return None
    return budget * _BUDGET_MULTIPLIERS.get((unit or "").lower(), 1)


def extract_company_context_from_text(message: str) -> CompanyContextUpdate | None:
    """
    Best-effort company name, industry and budget from a user message.

    Handles phrasing like "I'm the CTO at Acme Corp, a retailer in the
    grocery industry. Our budget is $2.5 million."
    """
    company_match = _COMPANY_RE.search(message)
    industry_match = _INDUSTRY_RE.search(message)
    budget_match = _BUDGET_RE.search(message)

    name = company_match.group(1).strip() if company_match else ""
    industry = industry_match.group(1).strip() if industry_match else ""
    if len(industry) < MIN_INDUSTRY_CHARS or industry.lower() in _INDUSTRY_STOP_WORDS:
        industry = ""

    budget = parse_budget(budget_match.group(1), budget_match.group(2)) if budget_match else None

    update = CompanyContextUpdate(
        company_name=name or None,
        industry=industry or None,
        budget_constraint=budget,
    )
    return None if update.is_empty() else update


# =============================================================================
# Entry point
# =============================================================================


def extract_from_response(
    ai_content: str,
    user_message: str = "",
    current_context: CompanyContext | None = None,
) -> ExtractionResult:
    """
    Extract candidate use cases and company context from one exchange.

    Args:
        ai_content: Assistant response text, possibly with embedded JSON
        user_message: The user turn that prompted it (company-context fallback)
        current_context: Company context already known to the caller

    Returns:
        ExtractionResult; use cases are not yet deduplicated against any
        existing collection (see ``portfolio.merge_use_cases``)
    """
    settings = get_settings()
    if len(ai_content) > settings.MAX_EXTRACTION_CHARS:
        logger.warning(
            f"Model output truncated for extraction: {len(ai_content)} > "
            f"{settings.MAX_EXTRACTION_CHARS} chars"
        )
        ai_content = ai_content[: settings.MAX_EXTRACTION_CHARS]

    result = ExtractionResult()
    found_use_case_block = False

    for block in extract_json_blocks(ai_content):
        company = _company_from_block(block)
        if company:
            result.company = company

        use_cases = _use_cases_from_block(block)
        if use_cases is not None:
            result.use_cases.extend(use_cases)
            found_use_case_block = True

    if not found_use_case_block:
        for block in extract_inline_use_case_blocks(ai_content):
            result.use_cases.extend(_use_cases_from_block(block) or [])

    # Text fallback only while we still don't know who the company is
    has_company_name = bool(current_context and current_context.company_name)
    if result.company is None and not has_company_name and user_message:
        result.company = extract_company_context_from_text(user_message)

    logger.debug(
        f"Extracted {len(result.use_cases)} use cases, "
        f"company={'yes' if result.company else 'no'}"
    )
    return result
