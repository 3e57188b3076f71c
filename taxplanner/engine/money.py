"""
money.py — boundary coercion for monetary inputs.

Every monetary value that enters the engine is clamped rather than rejected:
negative, NaN, infinite or non-numeric input becomes 0.0. Numeric strings are
accepted, including Indian-style thousands separators ("12,00,000").
"""
from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BeforeValidator


def clamp_money(value: Any) -> float:
    """Coerce a raw monetary input to a finite, non-negative float."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").replace("₹", "").strip()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def safe_percentage(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0.0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def safe_divide(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


# Pydantic field type applying clamp_money before float validation
Money = Annotated[float, BeforeValidator(clamp_money)]


__all__ = ["Money", "clamp_money", "safe_percentage", "safe_divide"]
