"""Tests for parsing proposed use cases and company context out of model output."""

import json

import pytest

from roi_canvas.core.config import get_settings
from roi_canvas.core.schemas_use_case import CompanyContext, RiskLevel, Timeframe
from roi_canvas.core.use_case_extraction import (
    CompanyContextUpdate,
    extract_company_context_from_text,
    extract_from_response,
    extract_inline_use_case_blocks,
    extract_json_blocks,
    normalize_candidate,
    parse_budget,
)


def _fenced(payload: dict) -> str:
    return f"```json\n{json.dumps(payload)}\n```"


RESPONSE = (
    "Here are two ideas worth costing out.\n\n"
    + _fenced(
        {
            "company": {"name": "Acme", "industry": "Retail", "budget": 750000},
            "useCases": [
                {
                    "name": "Support Chatbot",
                    "hardBenefits": 350000,
                    "implementationCost": 100000,
                    "riskLevel": "Medium-High",
                    "timeframe": "Q1",
                    "effortScore": 0,
                },
                {"name": "Demand Forecasting", "hardBenefits": 1200000, "timeframe": "3-Year"},
            ],
        }
    )
    + "\n\nLet me know which to refine."
)


class TestJsonBlocks:
    def test_parses_fenced_blocks(self):
        blocks = extract_json_blocks(RESPONSE)
        assert len(blocks) == 1
        assert blocks[0]["company"]["name"] == "Acme"

    def test_bad_block_skipped(self):
        text = "```json\n{not json}\n```\n" + _fenced({"useCases": []})
        assert extract_json_blocks(text) == [{"useCases": []}]

    def test_inline_object_in_prose(self):
        text = 'Proposal: {"useCases": [{"name": "OCR"}]} as discussed.'
        assert extract_inline_use_case_blocks(text) == [{"useCases": [{"name": "OCR"}]}]

    def test_inline_object_with_nested_company(self):
        text = 'See {"company": {"name": "Acme"}, "useCases": [{"name": "OCR"}]} here.'
        blocks = extract_inline_use_case_blocks(text)
        assert len(blocks) == 1
        assert blocks[0]["company"] == {"name": "Acme"}

    def test_truncated_inline_object_skipped(self):
        assert extract_inline_use_case_blocks('{"useCases": [{"name": "OCR"}') == []


class TestNormalizeCandidate:
    def test_defaults_and_clamping(self):
        uc = normalize_candidate({"name": "X", "riskLevel": "extreme", "impactScore": 11, "selected": None})
        assert uc.risk_level == RiskLevel.MEDIUM
        assert uc.impact_score == 5
        assert uc.timeframe == Timeframe.ONE_YEAR
        assert uc.selected is True

    def test_missing_name(self):
        assert normalize_candidate({}).name == "Unnamed Use Case"

    def test_non_object_rejected(self):
        assert normalize_candidate(["X"]) is None

    def test_uncoercible_amount_rejected(self):
        assert normalize_candidate({"name": "X", "hardBenefits": "a lot"}) is None

    def test_infinite_amount_rejected(self):
        assert normalize_candidate({"name": "X", "hardBenefits": float("inf")}) is None


class TestExtractFromResponse:
    def test_use_cases_and_company(self):
        result = extract_from_response(RESPONSE)

        assert [uc.name for uc in result.use_cases] == ["Support Chatbot", "Demand Forecasting"]
        chatbot = result.use_cases[0]
        assert chatbot.risk_level == RiskLevel.MEDIUM
        assert chatbot.effort_score == 3
        assert chatbot.selected is True
        assert result.company == CompanyContextUpdate(
            company_name="Acme", industry="Retail", budget_constraint=750_000
        )

    def test_overflowing_score_clamped(self):
        result = extract_from_response('```json\n{"useCases": [{"name": "X", "effortScore": 1e999}]}\n```')
        assert [uc.effort_score for uc in result.use_cases] == [5]

    def test_snake_case_key_accepted(self):
        result = extract_from_response(_fenced({"use_cases": [{"name": "OCR"}]}))
        assert [uc.name for uc in result.use_cases] == ["OCR"]

    def test_no_json_yields_nothing(self):
        result = extract_from_response("Tell me more about your operations.")
        assert result.use_cases == []
        assert result.company is None

    def test_inline_fallback_when_no_fenced_use_cases(self):
        text = _fenced({"company": {"name": "Acme"}}) + '\nAlso {"useCases": [{"name": "OCR"}]}'
        result = extract_from_response(text)
        assert [uc.name for uc in result.use_cases] == ["OCR"]
        assert result.company.company_name == "Acme"

    def test_inline_ignored_when_fenced_use_cases_present(self):
        text = _fenced({"useCases": [{"name": "A"}]}) + '\n{"useCases": [{"name": "B"}]}'
        assert [uc.name for uc in extract_from_response(text).use_cases] == ["A"]

    def test_company_from_user_message(self):
        result = extract_from_response(
            "Great, let's get started.",
            user_message="I'm the CTO at Acme Corp, a retailer in the grocery industry. "
            "Our budget is $2.5 million.",
        )
        assert result.company == CompanyContextUpdate(
            company_name="Acme Corp", industry="grocery", budget_constraint=2_500_000
        )

    def test_user_message_ignored_once_company_known(self):
        result = extract_from_response(
            "Noted.",
            user_message="I'm the CEO at Globex, in the energy sector.",
            current_context=CompanyContext(company_name="Acme"),
        )
        assert result.company is None

    def test_oversized_output_truncated(self, monkeypatch):
        monkeypatch.setenv("MAX_EXTRACTION_CHARS", "50")
        get_settings.cache_clear()
        try:
            result = extract_from_response("x" * 60 + _fenced({"useCases": [{"name": "OCR"}]}))
        finally:
            monkeypatch.delenv("MAX_EXTRACTION_CHARS")
            get_settings.cache_clear()
        assert result.use_cases == []


class TestCompanyText:
    @pytest.mark.parametrize(
        "amount, unit, expected",
        [("2.5", "million", 2_500_000), ("750", "k", 750_000), ("1,200,000", None, 1_200_000), ("..", None, None)],
    )
    def test_parse_budget(self, amount, unit, expected):
        assert parse_budget(amount, unit) == expected

    def test_unit_must_be_whole_word(self):
        update = extract_company_context_from_text("Our budget is 500000 monthly.")
        assert update.budget_constraint == 500_000

    def test_nothing_found(self):
        assert extract_company_context_from_text("Hello there") is None

    def test_update_applies_over_existing_context(self):
        current = CompanyContext(company_name="Acme", industry="Retail", budget_constraint=1_000)
        updated = CompanyContextUpdate(budget_constraint=5_000).apply_to(current)
        assert updated.company_name == "Acme"
        assert updated.industry == "Retail"
        assert updated.budget_constraint == 5_000
