"""Tests for display formatting helpers."""

import math

import pytest

from roi_canvas.core.formatting import (
    format_currency,
    format_payback,
    format_percent,
    round_half_up,
)
from roi_canvas.core.schemas_roi import PAYBACK_NEVER


@pytest.mark.parametrize(
    "value, places, expected",
    [
        (2.5, 0, 3.0),
        (-2.5, 0, -3.0),
        (0.125, 2, 0.13),
        (3.45, 1, 3.5),
        (1.005, 2, 1.01),
        (-0.4, 0, 0.0),
        (1e300, 2, 1e300),
    ],
)
def test_round_half_up(value, places, expected):
    assert round_half_up(value, places) == expected


@pytest.mark.parametrize("value", [math.inf, -math.inf])
def test_round_half_up_passes_infinities_through(value):
    assert round_half_up(value, 2) == value


def test_round_half_up_passes_nan_through():
    assert math.isnan(round_half_up(math.nan))


def test_negative_zero_collapsed():
    assert str(round_half_up(-0.4)) == "0.0"


@pytest.mark.parametrize(
    "value, expected",
    [(1_250_000, "$1,250,000"), (0, "$0"), (999.5, "$1,000"), (-500, "-$500")],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


@pytest.mark.parametrize("value, expected", [(12.5, "+12.5%"), (0, "+0.0%"), (-3.5, "-3.5%")])
def test_format_percent(value, expected):
    assert format_percent(value) == expected


def test_format_payback():
    assert format_payback(4.0) == "4.0 months"
    assert format_payback(PAYBACK_NEVER) == "N/A"
