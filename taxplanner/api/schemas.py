"""
schemas.py — HTTP request/response contracts for the /api surface.

Defines:
  - One request model per engine operation (monetary fields use Money, so
    negative or non-numeric amounts are clamped to 0 rather than rejected)
  - TableResponse, OptimizeResponse
  - ErrorDetail, ErrorBody, ErrorResponse  (standard error envelope)

fiscal_year is optional everywhere; routes fall back to
settings.default_fiscal_year.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from taxplanner.engine.money import Money
from taxplanner.engine.schemas import (
    DeductionEntry,
    DeductionSection,
    HeadroomSuggestion,
    Regime,
    RiskAppetite,
    TaxBracket,
    TaxScenario,
    TaxStrategy,
    TDSRecord,
)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class TaxCalculateRequest(BaseModel):
    """
    Slab calculation. Supply `brackets` to run a custom table; otherwise the
    static table for (fiscal_year, regime) is used.
    """
    model_config = ConfigDict(extra="forbid")

    gross_income: Money = 0.0
    total_deductions: Money = 0.0
    regime: Regime = Regime.new
    fiscal_year: Optional[str] = None
    brackets: Optional[List[TaxBracket]] = None


class DeductionAggregateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entries: List[DeductionEntry] = Field(default_factory=list)
    fiscal_year: Optional[str] = None
    senior_citizen: bool = False


class RegimeCompareRequest(BaseModel):
    """
    Either pass eligible_deductions as a total, or pass raw entries to be
    aggregated (and capped) first. entries wins when both are present.
    """
    model_config = ConfigDict(extra="forbid")

    gross_income: Money = 0.0
    eligible_deductions: Money = 0.0
    entries: Optional[List[DeductionEntry]] = None
    fiscal_year: Optional[str] = None
    senior_citizen: bool = False


class CapitalGainsRequest(BaseModel):
    """asset_class is a plain string so an unknown class maps to UNSUPPORTED_ASSET_CLASS."""
    model_config = ConfigDict(extra="forbid")

    asset_class: str
    acquisition_price: Money = 0.0
    disposal_price: Money = 0.0
    acquisition_date: date
    disposal_date: date


class AdvanceTaxRequest(BaseModel):
    """
    TDS may be given as a total or as records; records win when both are
    present. The fiscal year comes from fiscal_year, then as_of, then the
    configured default.
    """
    model_config = ConfigDict(extra="forbid")

    estimated_income: Money = 0.0
    estimated_deductions: Money = 0.0
    tds_already_paid: Money = 0.0
    tds_records: Optional[List[TDSRecord]] = None
    regime: Regime = Regime.new
    fiscal_year: Optional[str] = None
    as_of: Optional[date] = None


class InYearProjectionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    income_to_date: Money = 0.0
    current_deductions: Money = 0.0
    months_elapsed: Optional[int] = None
    as_of: Optional[date] = None
    deduction_headroom: Optional[float] = None   # None → unused 80C room
    regime: Regime = Regime.old
    fiscal_year: Optional[str] = None


class MultiYearProjectionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_income: Money = 0.0
    base_deductions: Money = 0.0
    years: int = Field(5, ge=0, le=50)
    annual_growth_rate: float = 0.0       # percent
    start_fiscal_year: Optional[str] = None
    regime: Regime = Regime.new


class ScenarioCompareRequest(BaseModel):
    """
    Explicit scenarios, or — when none are given — the five preset scenarios
    built from current_income and current_deductions.
    """
    model_config = ConfigDict(extra="forbid")

    scenarios: List[TaxScenario] = Field(default_factory=list)
    current_income: Money = 0.0
    current_deductions: Money = 0.0
    fiscal_year: Optional[str] = None
    senior_citizen: bool = False


class OptimizeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    income: Money = 0.0
    deductions: Dict[DeductionSection, Money] = Field(default_factory=dict)
    risk_appetite: RiskAppetite = RiskAppetite.medium
    time_horizon_years: int = Field(0, ge=0)
    fiscal_year: Optional[str] = None
    senior_citizen: bool = False


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TableResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fiscal_year: str
    regime: Regime
    standard_deduction: float
    allows_chapter_deductions: bool
    brackets: List[TaxBracket]


class OptimizeResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    strategy: TaxStrategy
    suggestions: List[HeadroomSuggestion] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Single field-level validation or business-rule error."""
    model_config = ConfigDict(extra="forbid")

    field: Optional[str] = None   # Dot-notation field path, e.g. "entries.0.amount"
    issue: str


class ErrorBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str                     # VALIDATION_ERROR, UNKNOWN_TAX_TABLE, etc.
    message: str
    details: List[ErrorDetail] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """
    Standard error response format for all endpoints.

    Structure: {"error": {"code": "...", "message": "...", "details": [...]}}
    """
    model_config = ConfigDict(extra="forbid")

    error: ErrorBody


__all__ = [
    "TaxCalculateRequest",
    "DeductionAggregateRequest",
    "RegimeCompareRequest",
    "CapitalGainsRequest",
    "AdvanceTaxRequest",
    "InYearProjectionRequest",
    "MultiYearProjectionRequest",
    "ScenarioCompareRequest",
    "OptimizeRequest",
    "TableResponse",
    "OptimizeResponse",
    "ErrorDetail",
    "ErrorBody",
    "ErrorResponse",
]
