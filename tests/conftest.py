"""Pytest configuration and fixtures."""

import os

import pytest

from roi_canvas.core.config import get_settings
from roi_canvas.core.schemas_use_case import UseCase
from tests.factories import make_use_case


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["ROI_CANVAS_ENV"] = "test"
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def chatbot() -> UseCase:
    return make_use_case(
        id="uc-chatbot",
        name="Support Chatbot",
        kpis=["First response time", "Ticket deflection rate"],
        soft_benefits=["Happier customers", "24/7 coverage"],
        dependencies=["Customer data lake", "Legal review"],
        hard_benefits=350_000,
        implementation_cost=100_000,
        annual_cost=0,
        risk_level="Medium",
        timeframe="Q1",
    )


@pytest.fixture
def forecasting() -> UseCase:
    return make_use_case(
        id="uc-forecast",
        name="Demand Forecasting",
        kpis=["Forecast accuracy", "Ticket deflection rate", "Stockout rate"],
        soft_benefits=["Happier customers", "Better planning"],
        dependencies=["ML Platform", "ERP integration"],
        hard_benefits=1_200_000,
        implementation_cost=400_000,
        annual_cost=0,
        risk_level="High",
        timeframe="3-Year",
    )
