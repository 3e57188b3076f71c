"""
Planner HTTP routes — thin adapters from request models to the pure engine.

  GET  /api/tables/{fiscal_year}/{regime}
  POST /api/tax/calculate
  POST /api/deductions/aggregate
  POST /api/regimes/compare
  POST /api/capital-gains
  POST /api/advance-tax
  POST /api/projection/in-year
  POST /api/projection/multi-year
  POST /api/scenarios/compare
  POST /api/optimize

Engine errors (ValueError subclasses) propagate to the handlers in main.py,
which render them in the standard error envelope.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taxplanner.api.schemas import (
    AdvanceTaxRequest,
    CapitalGainsRequest,
    DeductionAggregateRequest,
    InYearProjectionRequest,
    MultiYearProjectionRequest,
    OptimizeRequest,
    OptimizeResponse,
    RegimeCompareRequest,
    ScenarioCompareRequest,
    TableResponse,
    TaxCalculateRequest,
)
from taxplanner.config import settings
from taxplanner.engine.advance_tax import schedule_advance_tax, summarize_tds
from taxplanner.engine.capital_gains import calculate_capital_gains
from taxplanner.engine.deductions import aggregate_deductions, cap_section_amounts
from taxplanner.engine.fiscal import fiscal_year_label
from taxplanner.engine.optimizer import optimize_tax_strategy, suggest_deduction_headroom
from taxplanner.engine.projection import (
    compare_scenarios,
    preset_scenarios,
    project_in_year,
    project_multi_year,
)
from taxplanner.engine.regimes import calculate_regime, compare_regimes
from taxplanner.engine.schemas import Regime
from taxplanner.engine.tables import get_brackets, get_regime_rules
from taxplanner.engine.tax_engine import calculate_income_tax

router = APIRouter(prefix="/api", tags=["planner"])
logger = logging.getLogger(__name__)


def _fiscal_year(requested: str | None) -> str:
    return requested or settings.default_fiscal_year


def _ok(model) -> JSONResponse:
    return JSONResponse(status_code=200, content=model.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Statutory tables
# ---------------------------------------------------------------------------

@router.get("/tables/{fiscal_year}/{regime}")
async def get_table(fiscal_year: str, regime: Regime) -> JSONResponse:
    """Bracket table and standard deduction for one regime in one fiscal year."""
    rules = get_regime_rules(regime, fiscal_year)
    return _ok(TableResponse(
        fiscal_year=rules.fiscal_year,
        regime=rules.regime,
        standard_deduction=rules.standard_deduction,
        allows_chapter_deductions=rules.allows_chapter_deductions,
        brackets=list(rules.brackets),
    ))


# ---------------------------------------------------------------------------
# Slab tax, deductions, regimes
# ---------------------------------------------------------------------------

@router.post("/tax/calculate")
async def calculate_tax(request: TaxCalculateRequest) -> JSONResponse:
    """
    Slab tax plus cess. Deductions are applied exactly as given; no standard
    deduction is added here (use /regimes/compare for that).
    """
    if request.brackets:
        brackets = request.brackets
        table = "custom"
    else:
        fiscal_year = _fiscal_year(request.fiscal_year)
        brackets = get_brackets(request.regime, fiscal_year)
        table = f"{request.regime.value}/{fiscal_year}"

    result = calculate_income_tax(request.gross_income, request.total_deductions, brackets)
    logger.info(
        "Tax calculated table=%s taxable=%.2f total_tax=%.2f",
        table, result.taxable_income, result.total_tax,
    )
    return _ok(result)


@router.post("/deductions/aggregate")
async def aggregate(request: DeductionAggregateRequest) -> JSONResponse:
    fiscal_year = _fiscal_year(request.fiscal_year)
    totals = aggregate_deductions(request.entries, fiscal_year, request.senior_citizen)
    logger.info(
        "Deductions aggregated fiscal_year=%s entries=%d total=%.2f",
        totals.fiscal_year, len(request.entries), totals.total,
    )
    return _ok(totals)


@router.post("/regimes/compare")
async def compare(request: RegimeCompareRequest) -> JSONResponse:
    fiscal_year = _fiscal_year(request.fiscal_year)
    eligible = request.eligible_deductions
    if request.entries is not None:
        eligible = aggregate_deductions(request.entries, fiscal_year, request.senior_citizen).total

    comparison = compare_regimes(request.gross_income, eligible, fiscal_year)
    logger.info(
        "Regimes compared fiscal_year=%s recommended=%s savings=%.2f",
        comparison.fiscal_year, comparison.recommended_regime.value, comparison.savings,
    )
    return _ok(comparison)


# ---------------------------------------------------------------------------
# Capital gains, advance tax
# ---------------------------------------------------------------------------

@router.post("/capital-gains")
async def capital_gains(request: CapitalGainsRequest) -> JSONResponse:
    result = calculate_capital_gains(
        request.asset_class,
        request.acquisition_price,
        request.disposal_price,
        request.acquisition_date,
        request.disposal_date,
    )
    logger.info(
        "Capital gain classified asset_class=%s long_term=%s tax=%.2f",
        result.asset_class.value, result.is_long_term, result.tax_amount,
    )
    return _ok(result)


@router.post("/advance-tax")
async def advance_tax(request: AdvanceTaxRequest) -> JSONResponse:
    fiscal_year = request.fiscal_year
    if fiscal_year is None and request.as_of is None:
        fiscal_year = settings.default_fiscal_year

    tds = request.tds_already_paid
    if request.tds_records is not None:
        tds_year = fiscal_year or fiscal_year_label(request.as_of)
        tds = summarize_tds(request.tds_records, tds_year).total_tds

    schedule = schedule_advance_tax(
        request.estimated_income,
        request.estimated_deductions,
        tds,
        regime=request.regime,
        fiscal_year=fiscal_year,
        as_of=request.as_of,
    )
    logger.info(
        "Advance tax scheduled fiscal_year=%s net_payable=%.2f required=%s",
        schedule.fiscal_year, schedule.net_payable, schedule.required,
    )
    return _ok(schedule)


# ---------------------------------------------------------------------------
# Projections and scenarios
# ---------------------------------------------------------------------------

@router.post("/projection/in-year")
async def in_year_projection(request: InYearProjectionRequest) -> JSONResponse:
    projection = project_in_year(
        request.income_to_date,
        request.current_deductions,
        months_elapsed=request.months_elapsed,
        as_of=request.as_of,
        deduction_headroom=request.deduction_headroom,
        regime=request.regime,
        fiscal_year=_fiscal_year(request.fiscal_year),
    )
    logger.info(
        "In-year projection months_elapsed=%d projected_income=%.2f",
        projection.months_elapsed, projection.projected_income,
    )
    return _ok(projection)


@router.post("/projection/multi-year")
async def multi_year_projection(request: MultiYearProjectionRequest) -> JSONResponse:
    projection = project_multi_year(
        request.base_income,
        request.base_deductions,
        request.years,
        annual_growth_rate=request.annual_growth_rate,
        start_fiscal_year=_fiscal_year(request.start_fiscal_year),
        regime=request.regime,
    )
    logger.info(
        "Multi-year projection regime=%s periods=%d total_tax=%.2f",
        projection.regime.value, len(projection.periods), projection.total_tax,
    )
    return _ok(projection)


@router.post("/scenarios/compare")
async def scenarios(request: ScenarioCompareRequest) -> JSONResponse:
    scenario_list = request.scenarios or preset_scenarios(
        request.current_income, request.current_deductions,
    )
    comparison = compare_scenarios(
        scenario_list, _fiscal_year(request.fiscal_year), request.senior_citizen,
    )
    logger.info(
        "Scenarios compared count=%d best=%s",
        len(comparison.results), comparison.best_scenario,
    )
    return _ok(comparison)


@router.post("/optimize")
async def optimize(request: OptimizeRequest) -> JSONResponse:
    fiscal_year = _fiscal_year(request.fiscal_year)
    strategy = optimize_tax_strategy(
        request.income,
        request.deductions,
        risk_appetite=request.risk_appetite,
        time_horizon_years=request.time_horizon_years,
        fiscal_year=fiscal_year,
        senior_citizen=request.senior_citizen,
    )
    rules = get_regime_rules(Regime.old, fiscal_year)
    totals = cap_section_amounts(request.deductions, rules.fiscal_year, request.senior_citizen)
    old_regime = calculate_regime(request.income, totals.total, rules)
    suggestions = suggest_deduction_headroom(old_regime.taxable_income, totals, rules.brackets)
    logger.info(
        "Strategy built strategies=%d suggestions=%d potential_saving=%.2f",
        len(strategy.strategies), len(suggestions), strategy.total_potential_saving,
    )
    return _ok(OptimizeResponse(strategy=strategy, suggestions=suggestions))
