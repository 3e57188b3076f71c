"""
Optimizer — plain-English suggestions for unused deduction headroom and an
investment strategy for the remaining 80C / 80D room.
Pure functions. No I/O.

Savings are valued at the filer's marginal slab rate plus cess, read from the
bracket table rather than assumed.
"""
from __future__ import annotations

import logging
from typing import Mapping, Sequence

from taxplanner.engine.deductions import cap_section_amounts
from taxplanner.engine.money import clamp_money
from taxplanner.engine.schemas import (
    DeductionSection,
    DeductionTotals,
    HeadroomSuggestion,
    Regime,
    RiskAppetite,
    Strategy,
    TaxBracket,
    TaxStrategy,
)
from taxplanner.engine.regimes import calculate_regime
from taxplanner.engine.tables import CESS_RATE, LATEST_FISCAL_YEAR, get_brackets, get_regime_rules
from taxplanner.engine.tax_engine import marginal_rate

logger = logging.getLogger(__name__)

_SUGGESTION_MIN_SAVING = 1_000   # Suppress suggestions where tax saving < ₹1,000
_MAX_SUGGESTIONS = 3
_ELSS_MIN_HORIZON_YEARS = 3

_SECTION_ADVICE: dict[DeductionSection, str] = {
    DeductionSection.section_80c: "in 80C instruments (PPF, ELSS, LIC)",
    DeductionSection.section_80d: "in health insurance premiums under Section 80D",
    DeductionSection.section_80ccd1b: "to NPS under Section 80CCD(1B)",
    DeductionSection.section_24b: "of home loan interest under Section 24(b)",
    DeductionSection.section_80tta: "of savings interest under Section 80TTA",
}


def effective_marginal_rate(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """Marginal slab rate × (1 + cess), as a fraction: 0.312 for the 30% slab."""
    return marginal_rate(taxable_income, brackets) / 100 * (1 + CESS_RATE)


def suggest_deduction_headroom(
    taxable_income: float,
    totals: DeductionTotals,
    brackets: Sequence[TaxBracket] | None = None,
) -> list[HeadroomSuggestion]:
    """
    One suggestion per capped section with unused room.
    Suppresses suggestions with < ₹1,000 tax saving.
    Returns at most 3, sorted by rupee saving descending.
    """
    if brackets is None:
        brackets = get_brackets(Regime.old, LATEST_FISCAL_YEAR)

    rate = effective_marginal_rate(clamp_money(taxable_income), brackets)
    if rate == 0.0:
        return []   # zero-tax bracket

    candidates: list[HeadroomSuggestion] = []
    for section, headroom in totals.headroom.items():
        saving = headroom * rate
        if headroom <= 0 or saving < _SUGGESTION_MIN_SAVING:
            continue
        advice = _SECTION_ADVICE.get(section, f"under Section {section.value}")
        candidates.append(HeadroomSuggestion(
            section=section,
            headroom=headroom,
            tax_saving=saving,
            text=(
                f"Claim ₹{headroom:,.0f} more {advice} "
                f"to save ₹{round(saving):,.0f} in the Old Regime."
            ),
        ))

    candidates.sort(key=lambda s: s.tax_saving, reverse=True)
    return candidates[:_MAX_SUGGESTIONS]


def optimize_tax_strategy(
    income: float,
    deductions: Mapping[DeductionSection, float],
    risk_appetite: RiskAppetite | str = RiskAppetite.medium,
    time_horizon_years: int = 0,
    fiscal_year: str = LATEST_FISCAL_YEAR,
    senior_citizen: bool = False,
) -> TaxStrategy:
    """
    Strategy for the unused 80C and 80D room under the old regime. Current
    tax includes the old-regime standard deduction.

    80C: ELSS for a high risk appetite with a horizon of 3+ years, PPF for a
    low risk appetite, nothing otherwise. 80D: top up health insurance.
    """
    risk_appetite = RiskAppetite(risk_appetite)
    rules = get_regime_rules(Regime.old, fiscal_year)
    totals = cap_section_amounts(deductions, rules.fiscal_year, senior_citizen)
    current = calculate_regime(income, totals.total, rules)
    rate = effective_marginal_rate(current.taxable_income, rules.brackets)

    strategies: list[Strategy] = []

    room_80c = totals.headroom.get(DeductionSection.section_80c, 0.0)
    if room_80c > 0:
        if risk_appetite == RiskAppetite.high and time_horizon_years >= _ELSS_MIN_HORIZON_YEARS:
            strategies.append(Strategy(
                kind="ELSS Investment",
                section=DeductionSection.section_80c,
                amount=room_80c,
                tax_saving=room_80c * rate,
                expected_returns=room_80c * 0.15,
                risk="HIGH",
                liquidity="3 years lock-in",
            ))
        elif risk_appetite == RiskAppetite.low:
            strategies.append(Strategy(
                kind="PPF Investment",
                section=DeductionSection.section_80c,
                amount=room_80c,
                tax_saving=room_80c * rate,
                expected_returns=room_80c * 0.08,
                risk="LOW",
                liquidity="15 years lock-in",
            ))

    room_80d = totals.headroom.get(DeductionSection.section_80d, 0.0)
    if room_80d > 0:
        strategies.append(Strategy(
            kind="Health Insurance",
            section=DeductionSection.section_80d,
            amount=room_80d,
            tax_saving=room_80d * rate,
            expected_returns=0.0,   # Protection benefit
            risk="NONE",
            liquidity="Annual premium",
        ))

    logger.debug("Strategy built risk=%s strategies=%d", risk_appetite.value, len(strategies))
    return TaxStrategy(
        current_tax=current.total_tax,
        marginal_rate=rate,
        strategies=strategies,
        total_potential_saving=sum(s.tax_saving for s in strategies),
    )
