"""Display formatting shared by the canvas assembler and exporters.

Pure Python, US-dollar only.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal

from roi_canvas.core.schemas_roi import is_never_payback

# Wide enough that quantizing any finite float to a few decimals never overflows
_ROUNDING_CONTEXT = Context(prec=400)


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero at the given number of decimal places.

    Non-finite values (an NPV overflowing on huge amounts) pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    result = float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT))
    # Collapse -0.0 so it never renders as "-0"
    return result if result else 0.0


def format_currency(value: float) -> str:
    """Format as whole US dollars, e.g. ``$1,250,000`` or ``-$500``."""
    amount = round_half_up(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_percent(value: float) -> str:
    """Format a percentage with an explicit sign and one decimal, e.g. ``+12.5%``."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}%"


def format_payback(months: float) -> str:
    """Format a payback period in months, ``N/A`` when it never pays back."""
    if is_never_payback(months):
        return "N/A"
    return f"{months:.1f} months"
