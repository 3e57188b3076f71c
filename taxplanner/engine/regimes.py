"""
Regime comparison — run the slab calculator under both regimes and recommend
the cheaper one.

Regime A (old, full-deduction):  taxable = income - standard deduction - eligible deductions
Regime B (new, simplified):      taxable = income - standard deduction only

Ties go to TIE_BREAK_REGIME. That is a policy choice, kept as a named constant
so it can be changed without touching the comparison logic.
"""
from __future__ import annotations

import logging

from taxplanner.engine.money import clamp_money
from taxplanner.engine.schemas import Regime, RegimeComparison, RegimeResult
from taxplanner.engine.tables import LATEST_FISCAL_YEAR, RegimeRules, get_regime_rules
from taxplanner.engine.tax_engine import calculate_income_tax

logger = logging.getLogger(__name__)

TIE_BREAK_REGIME = Regime.old


def calculate_regime(
    gross_income: float,
    eligible_deductions: float,
    rules: RegimeRules,
) -> RegimeResult:
    """Tax for one regime. Chapter deductions are dropped when the regime disallows them."""
    income = clamp_money(gross_income)
    standard = min(rules.standard_deduction, income)
    eligible = clamp_money(eligible_deductions) if rules.allows_chapter_deductions else 0.0

    result = calculate_income_tax(income, standard + eligible, rules.brackets)
    return RegimeResult(
        **dict(result),
        regime=rules.regime,
        standard_deduction=standard,
        eligible_deductions=eligible,
    )


def _build_rationale(
    old: RegimeResult,
    new: RegimeResult,
    recommended: Regime,
    savings: float,
) -> str:
    if savings == 0.0:
        return (
            f"Both regimes result in the same tax (₹{old.total_tax:,.0f}). "
            f"{recommended.value.title()} Regime recommended by default."
        )
    if recommended == Regime.old:
        return (
            f"Old Regime saves ₹{savings:,.0f} over the New Regime. "
            f"Eligible deductions of ₹{old.eligible_deductions:,.0f} bring Old Regime tax to "
            f"₹{old.total_tax:,.0f} vs ₹{new.total_tax:,.0f} under the New Regime."
        )
    return (
        f"New Regime saves ₹{savings:,.0f} over the Old Regime. "
        f"Your eligible deductions (₹{old.eligible_deductions:,.0f}) are insufficient "
        f"to overcome the lower New Regime slab rates."
    )


def compare_regimes(
    gross_income: float,
    eligible_deductions: float = 0.0,
    fiscal_year: str = LATEST_FISCAL_YEAR,
) -> RegimeComparison:
    """
    Compare old and new regime tax for the given income and deduction total.
    eligible_deductions is typically DeductionTotals.total.
    """
    old = calculate_regime(gross_income, eligible_deductions, get_regime_rules(Regime.old, fiscal_year))
    new = calculate_regime(gross_income, eligible_deductions, get_regime_rules(Regime.new, fiscal_year))

    if old.total_tax < new.total_tax:
        recommended = Regime.old
    elif new.total_tax < old.total_tax:
        recommended = Regime.new
    else:
        recommended = TIE_BREAK_REGIME
    savings = abs(old.total_tax - new.total_tax)

    logger.debug(
        "Regimes compared fiscal_year=%s recommended=%s savings=%.2f",
        fiscal_year, recommended.value, savings,
    )
    return RegimeComparison(
        fiscal_year=get_regime_rules(Regime.old, fiscal_year).fiscal_year,
        old_regime=old,
        new_regime=new,
        recommended_regime=recommended,
        savings=savings,
        rationale=_build_rationale(old, new, recommended, savings),
    )
