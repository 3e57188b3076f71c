"""
Slab tax calculator — pure Python, deterministic. Same input → same output.

Computation sequence (order determines correctness):
  1. taxable_income = max(0, gross_income - total_deductions)
  2. base_tax       = progressive bracket calculation (breakdown per bracket)
  3. cess           = 4% of base_tax
  4. total_tax      = base_tax + cess
  5. effective_rate = total_tax / gross_income * 100, 0 when gross_income is 0

Precondition: the bracket table is ordered by lower_bound and gap-free. The
calculator does not verify this, but a malformed table can only under-tax
(gaps) — it never loops forever or yields a negative amount.
"""
from __future__ import annotations

import logging
from typing import Sequence

from taxplanner.engine.money import clamp_money, safe_percentage
from taxplanner.engine.schemas import BracketBreakdown, Regime, TaxBracket, TaxResult
from taxplanner.engine.tables import CESS_RATE, LATEST_FISCAL_YEAR, get_brackets

logger = logging.getLogger(__name__)


# ===========================================================================
# INTERNAL HELPERS
# ===========================================================================

def _calculate_slab_tax(
    taxable_income: float,
    brackets: Sequence[TaxBracket],
) -> tuple[float, list[BracketBreakdown]]:
    """
    Apply progressive slab tax to taxable_income.
    Stops at the first bracket whose lower bound is at or above the income.
    """
    tax = 0.0
    breakdown: list[BracketBreakdown] = []
    for bracket in brackets:
        if taxable_income <= bracket.lower_bound:
            break
        portion = min(taxable_income, bracket.ceiling) - bracket.lower_bound
        if portion <= 0:
            # overlapping or unordered table
            continue
        tax_in_bracket = portion * bracket.rate / 100
        tax += tax_in_bracket
        breakdown.append(BracketBreakdown(
            bracket=bracket,
            taxable_portion=portion,
            tax_in_bracket=tax_in_bracket,
        ))
    return tax, breakdown


def marginal_rate(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """
    Marginal slab rate (percent) of the bracket the next rupee would fall in.
    Income exactly on a breakpoint is charged at the bracket above it.
    """
    rate = 0.0
    for bracket in brackets:
        if taxable_income < bracket.lower_bound:
            break
        rate = bracket.rate
    return rate


# ===========================================================================
# PUBLIC API
# ===========================================================================

def calculate_income_tax(
    gross_income: float,
    total_deductions: float = 0.0,
    brackets: Sequence[TaxBracket] | None = None,
) -> TaxResult:
    """
    Compute bracket-wise tax plus cess for one regime.

    Negative or non-numeric amounts are clamped to zero. When brackets is None
    the latest new-regime table is used.
    """
    if brackets is None:
        brackets = get_brackets(Regime.new, LATEST_FISCAL_YEAR)

    gross = clamp_money(gross_income)
    deductions = clamp_money(total_deductions)
    taxable_income = max(0.0, gross - deductions)

    base_tax, breakdown = _calculate_slab_tax(taxable_income, brackets)
    cess = base_tax * CESS_RATE
    total_tax = base_tax + cess

    logger.debug(
        "Slab tax computed taxable=%.2f base=%.2f total=%.2f brackets=%d",
        taxable_income, base_tax, total_tax, len(breakdown),
    )
    return TaxResult(
        gross_income=gross,
        total_deductions=deductions,
        taxable_income=taxable_income,
        base_tax=base_tax,
        cess=cess,
        total_tax=total_tax,
        effective_rate=safe_percentage(total_tax, gross),
        bracket_breakdown=breakdown,
    )


def calculate_regime_tax(
    gross_income: float,
    total_deductions: float = 0.0,
    regime: Regime | str = Regime.new,
    fiscal_year: str = LATEST_FISCAL_YEAR,
) -> TaxResult:
    """calculate_income_tax() against the static table for (fiscal_year, regime)."""
    return calculate_income_tax(gross_income, total_deductions, get_brackets(regime, fiscal_year))
