"""
Projection engine — in-year extrapolation, multi-year growth projection and
what-if scenario comparison. Pure functions; the "current date" is always a
parameter.

In-year:
  average_monthly_income = income_to_date / months_elapsed       (0 if no months)
  projected_income       = income_to_date + average * remaining_months
  monthly recommendation = deduction headroom / remaining_months  (0 if none left)
  potential_savings      = tax(projected) - tax(projected, headroom fully used)

Multi-year, for period i in [0, N):
  income_i     = base_income     * (1 + g)^i
  deductions_i = base_deductions * (1 + min(g, 5%))^i
Deduction growth is capped to model conservative reinvestment.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from taxplanner.engine.deductions import cap_section_amounts
from taxplanner.engine.fiscal import (
    fiscal_year_label_for_start,
    fiscal_year_start_year,
    months_elapsed as months_elapsed_as_of,
    normalize_fiscal_year,
)
from taxplanner.engine.money import clamp_money, safe_divide
from taxplanner.engine.regimes import compare_regimes
from taxplanner.engine.schemas import (
    DeductionSection,
    InYearProjection,
    MultiPeriodProjection,
    ProjectionPeriod,
    Regime,
    ScenarioComparison,
    ScenarioResult,
    TaxBracket,
    TaxScenario,
)
from taxplanner.engine.tables import CAP_80C, LATEST_FISCAL_YEAR, get_brackets
from taxplanner.engine.tax_engine import calculate_income_tax

logger = logging.getLogger(__name__)

MONTHS_PER_FISCAL_YEAR = 12
MAX_DEDUCTION_GROWTH_RATE = 5.0      # percent


# ===========================================================================
# IN-YEAR PROJECTION
# ===========================================================================

def project_in_year(
    income_to_date: float,
    current_deductions: float = 0.0,
    months_elapsed: Optional[int] = None,
    as_of: Optional[date] = None,
    deduction_headroom: Optional[float] = None,
    regime: Regime | str = Regime.old,
    fiscal_year: str = LATEST_FISCAL_YEAR,
    brackets: Sequence[TaxBracket] | None = None,
) -> InYearProjection:
    """
    Extrapolate the rest of the fiscal year at the average monthly rate so far.

    months_elapsed wins over as_of; one of them is required. When
    deduction_headroom is None the unused 80C room is assumed.
    """
    if months_elapsed is None:
        if as_of is None:
            raise ValueError("project_in_year needs either months_elapsed or as_of")
        months_elapsed = months_elapsed_as_of(as_of)
    elapsed = max(0, min(MONTHS_PER_FISCAL_YEAR, int(months_elapsed)))
    remaining = MONTHS_PER_FISCAL_YEAR - elapsed

    if brackets is None:
        brackets = get_brackets(regime, fiscal_year)

    to_date = clamp_money(income_to_date)
    deductions = clamp_money(current_deductions)
    average = safe_divide(to_date, elapsed)
    projected_income = to_date + average * remaining

    if deduction_headroom is None:
        headroom = max(0.0, CAP_80C - deductions)
    else:
        headroom = clamp_money(deduction_headroom)

    projected_tax = calculate_income_tax(projected_income, deductions, brackets)
    optimized_tax = calculate_income_tax(projected_income, deductions + headroom, brackets)

    logger.debug(
        "In-year projection elapsed=%d projected_income=%.2f headroom=%.2f",
        elapsed, projected_income, headroom,
    )
    return InYearProjection(
        months_elapsed=elapsed,
        remaining_months=remaining,
        income_to_date=to_date,
        average_monthly_income=average,
        projected_income=projected_income,
        current_deductions=deductions,
        projected_tax=projected_tax,
        deduction_headroom=headroom,
        monthly_investment_recommendation=safe_divide(headroom, remaining),
        optimized_tax=optimized_tax,
        potential_savings=projected_tax.total_tax - optimized_tax.total_tax,
    )


# ===========================================================================
# MULTI-YEAR PROJECTION
# ===========================================================================

def project_multi_year(
    base_income: float,
    base_deductions: float,
    years: int,
    annual_growth_rate: float = 0.0,
    start_fiscal_year: str = LATEST_FISCAL_YEAR,
    regime: Regime | str = Regime.new,
    brackets: Sequence[TaxBracket] | None = None,
) -> MultiPeriodProjection:
    """
    Project income, deductions and tax over `years` fiscal years.

    annual_growth_rate is a percentage (10 means 10%). The bracket table of the
    starting fiscal year is applied to every period.
    """
    regime = Regime(regime)
    start = fiscal_year_start_year(start_fiscal_year)
    if brackets is None:
        brackets = get_brackets(regime, start_fiscal_year)

    income0 = clamp_money(base_income)
    deductions0 = clamp_money(base_deductions)
    deduction_growth = min(annual_growth_rate, MAX_DEDUCTION_GROWTH_RATE)

    periods: list[ProjectionPeriod] = []
    for i in range(max(0, int(years))):
        income = income0 * (1 + annual_growth_rate / 100) ** i
        deductions = deductions0 * (1 + deduction_growth / 100) ** i
        result = calculate_income_tax(income, deductions, brackets)
        periods.append(ProjectionPeriod(
            period_label=fiscal_year_label_for_start(start + i),
            income=result.gross_income,
            deductions=result.total_deductions,
            tax=result.total_tax,
            effective_rate=result.effective_rate,
        ))

    count = len(periods)
    return MultiPeriodProjection(
        regime=regime,
        annual_growth_rate=annual_growth_rate,
        deduction_growth_rate=deduction_growth,
        periods=periods,
        total_income=sum(p.income for p in periods),
        total_deductions=sum(p.deductions for p in periods),
        total_tax=sum(p.tax for p in periods),
        average_effective_rate=safe_divide(sum(p.effective_rate for p in periods), count),
    )


# ===========================================================================
# WHAT-IF SCENARIOS
# ===========================================================================

def preset_scenarios(current_income: float, current_deductions: float) -> list[TaxScenario]:
    """The five standard what-if scenarios built around the filer's current position."""
    income = clamp_money(current_income)
    deductions = clamp_money(current_deductions)
    S = DeductionSection
    return [
        TaxScenario(
            name="Current Situation",
            income=income,
            deductions={S.section_80c: min(deductions, CAP_80C), S.other: max(0.0, deductions - CAP_80C)},
            description="Your current tax situation",
        ),
        TaxScenario(
            name="Fully Optimized",
            income=income,
            deductions={
                S.section_80c: 150_000, S.section_80d: 25_000, S.section_80ccd1b: 50_000,
                S.section_24b: 200_000, S.other: 50_000,
            },
            description="Maximum possible tax savings scenario",
        ),
        TaxScenario(
            name="Conservative Approach",
            income=income,
            deductions={S.section_80c: 100_000, S.section_80d: 15_000, S.other: 25_000},
            description="Moderate tax planning with lower risk investments",
        ),
        TaxScenario(
            name="Aggressive Savings",
            income=income,
            deductions={
                S.section_80c: 150_000, S.section_80d: 25_000, S.section_80ccd1b: 50_000,
                S.section_24b: 350_000, S.other: 75_000,
            },
            description="Maximum deductions with higher investment amounts",
        ),
        TaxScenario(
            name="20% Salary Increase",
            income=income * 1.2,
            deductions={
                S.section_80c: 150_000, S.section_80d: 25_000, S.section_80ccd1b: 50_000,
                S.section_24b: 200_000, S.other: 50_000,
            },
            description="Planning for a potential salary increase",
        ),
    ]


def compare_scenarios(
    scenarios: Iterable[TaxScenario],
    fiscal_year: str = LATEST_FISCAL_YEAR,
    senior_citizen: bool = False,
) -> ScenarioComparison:
    """
    Evaluate each scenario under both regimes. Scenario deductions go through
    the statutory caps first. best_scenario is the one with the lowest tax
    (first one wins a tie).
    """
    results: list[ScenarioResult] = []
    for scenario in scenarios:
        totals = cap_section_amounts(scenario.deductions, fiscal_year, senior_citizen)
        comparison = compare_regimes(scenario.income, totals.total, fiscal_year)
        best = (
            comparison.old_regime
            if comparison.recommended_regime == Regime.old
            else comparison.new_regime
        )
        results.append(ScenarioResult(
            name=scenario.name,
            income=clamp_money(scenario.income),
            total_deductions=totals.total,
            old_regime_tax=comparison.old_regime.total_tax,
            new_regime_tax=comparison.new_regime.total_tax,
            recommended_regime=comparison.recommended_regime,
            best_tax=best.total_tax,
            effective_rate=best.effective_rate,
        ))

    best_scenario = min(results, key=lambda r: r.best_tax).name if results else None
    logger.debug("Compared %d scenarios best=%s", len(results), best_scenario)
    return ScenarioComparison(
        fiscal_year=normalize_fiscal_year(fiscal_year),
        results=results,
        best_scenario=best_scenario,
    )
