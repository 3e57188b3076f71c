"""
schemas.py — engine Pydantic v2 data contracts.

Defines:
  - Regime, DeductionSection, AssetClass, TDSSource, RiskAppetite enums
  - TaxBracket, BracketBreakdown, TaxResult          (slab calculation)
  - DeductionEntry, DeductionTotals                 (deduction aggregation)
  - RegimeResult, RegimeComparison                  (dual-regime comparison)
  - DisposalEvent, CapitalGainResult                (capital gains)
  - TDSRecord, TDSSummary, AdvanceTaxInstallment, AdvanceTaxSchedule
  - InYearProjection, ProjectionPeriod, MultiPeriodProjection
  - TaxScenario, ScenarioResult, ScenarioComparison
  - HeadroomSuggestion, Strategy, TaxStrategy       (optimizer output)

Input models clamp monetary fields through the Money type. Result models are
frozen: the engine builds a fresh value per call and never mutates one.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from taxplanner.engine.money import Money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Regime(str, Enum):
    old = "old"    # Regime A: full-deduction regime
    new = "new"    # Regime B: simplified, standard deduction only


class DeductionSection(str, Enum):
    section_80c = "80C"
    section_80d = "80D"               # health insurance premium
    section_80ccd1b = "80CCD1B"       # employee NPS
    section_24b = "24B"               # home loan interest
    section_80tta = "80TTA"           # savings account interest
    hra = "HRA"
    other = "OTHER"


class AssetClass(str, Enum):
    equity = "EQUITY"                 # listed equity shares
    mutual_fund = "MUTUAL_FUND"       # equity-oriented funds
    property = "PROPERTY"             # real estate
    bond = "BOND"
    gold = "GOLD"
    other = "OTHER"


class TDSSource(str, Enum):
    salary = "SALARY"
    bank_interest = "BANK_INTEREST"
    fd = "FD"
    professional = "PROFESSIONAL"
    other = "OTHER"


class RiskAppetite(str, Enum):
    low = "LOW"
    medium = "MEDIUM"
    high = "HIGH"


# ---------------------------------------------------------------------------
# Slab calculation
# ---------------------------------------------------------------------------

class TaxBracket(BaseModel):
    """
    One contiguous income range taxed at a single marginal rate.

    upper_bound=None means the bracket is open-ended (extends to infinity).
    rate is a percentage: 5 means 5%.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    lower_bound: float = Field(..., ge=0)
    upper_bound: Optional[float] = None
    rate: float = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def validate_bounds(self) -> "TaxBracket":
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ValueError(
                f"upper_bound ({self.upper_bound:,.0f}) must exceed "
                f"lower_bound ({self.lower_bound:,.0f})"
            )
        return self

    @property
    def ceiling(self) -> float:
        return float("inf") if self.upper_bound is None else self.upper_bound


class BracketBreakdown(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    bracket: TaxBracket
    taxable_portion: float
    tax_in_bracket: float


class TaxResult(BaseModel):
    """
    Single-regime slab computation.

    Invariants:
      taxable_income = max(0, gross_income - total_deductions)
      base_tax       = sum(b.tax_in_bracket for b in bracket_breakdown)
      cess           = base_tax * 4%
      total_tax      = base_tax + cess
      effective_rate = total_tax / gross_income * 100  (0 when gross_income is 0)
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_income: float
    total_deductions: float
    taxable_income: float
    base_tax: float
    cess: float
    total_tax: float
    effective_rate: float
    bracket_breakdown: List[BracketBreakdown] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Deductions
# ---------------------------------------------------------------------------

class DeductionEntry(BaseModel):
    """One deduction claim, as read from the deduction store snapshot."""
    model_config = ConfigDict(extra="forbid")

    section: DeductionSection
    amount: Money = 0.0
    fiscal_year: str
    description: Optional[str] = None


class DeductionTotals(BaseModel):
    """
    Per-section deduction totals for one fiscal year.

    claimed:    raw sum per section
    by_section: amount allowed after statutory caps (uncapped sections pass through)
    headroom:   cap - allowed, for capped sections only
    total:      sum(by_section.values())
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: Optional[str] = None
    claimed: Dict[DeductionSection, float] = Field(default_factory=dict)
    by_section: Dict[DeductionSection, float] = Field(default_factory=dict)
    headroom: Dict[DeductionSection, float] = Field(default_factory=dict)
    total: float = 0.0


# ---------------------------------------------------------------------------
# Regime comparison
# ---------------------------------------------------------------------------

class RegimeResult(TaxResult):
    """TaxResult for one regime plus the deductions that regime allowed."""
    regime: Regime
    standard_deduction: float
    eligible_deductions: float


class RegimeComparison(BaseModel):
    """
    Output of compare_regimes().

    savings = |old_regime.total_tax - new_regime.total_tax|
    recommended_regime is the regime with strictly lower total_tax;
    equal tax resolves to TIE_BREAK_REGIME.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: str
    old_regime: RegimeResult
    new_regime: RegimeResult
    recommended_regime: Regime
    savings: float
    rationale: str


# ---------------------------------------------------------------------------
# Capital gains
# ---------------------------------------------------------------------------

class DisposalEvent(BaseModel):
    """Sale of one asset. acquisition_price is assumed already index-adjusted."""
    model_config = ConfigDict(extra="forbid")

    asset_class: AssetClass
    acquisition_price: Money = 0.0
    disposal_price: Money = 0.0
    acquisition_date: date
    disposal_date: date

    @property
    def gain(self) -> float:
        return self.disposal_price - self.acquisition_price


class CapitalGainResult(BaseModel):
    """
    Invariants:
      taxable_gain = max(0, gain - exemption_applied)
      tax_amount   = taxable_gain * rate / 100
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    asset_class: AssetClass
    holding_months: float
    gain: float
    is_long_term: bool
    exemption_applied: float
    taxable_gain: float
    rate: float
    tax_amount: float
    slab_rate_approximated: bool = False   # True when rate is the flat slab stand-in


# ---------------------------------------------------------------------------
# Advance tax and TDS
# ---------------------------------------------------------------------------

class TDSRecord(BaseModel):
    """Tax withheld at source on one income item."""
    model_config = ConfigDict(extra="forbid")

    source: TDSSource
    amount: Money = 0.0
    tds_deducted: Money = 0.0
    quarter: str
    fiscal_year: str
    deductor_name: Optional[str] = None


class TDSSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: Optional[str] = None
    total_income: float = 0.0
    total_tds: float = 0.0
    record_count: int = 0
    by_source: Dict[TDSSource, float] = Field(default_factory=dict)
    by_quarter: Dict[str, float] = Field(default_factory=dict)


class AdvanceTaxInstallment(BaseModel):
    """
    cumulative_amount_due is what must have been paid in total BY due_date —
    not the payment for this quarter. incremental_amount_due is the difference
    from the previous installment's cumulative figure.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    quarter_label: str
    due_date: date
    cumulative_percentage: float
    cumulative_amount_due: float
    incremental_amount_due: float


class AdvanceTaxSchedule(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: str
    total_liability: float
    tds_already_paid: float
    net_payable: float
    required: bool
    installments: List[AdvanceTaxInstallment] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

class InYearProjection(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    months_elapsed: int
    remaining_months: int
    income_to_date: float
    average_monthly_income: float
    projected_income: float
    current_deductions: float
    projected_tax: TaxResult
    deduction_headroom: float
    monthly_investment_recommendation: float
    optimized_tax: TaxResult
    potential_savings: float


class ProjectionPeriod(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    period_label: str
    income: float
    deductions: float
    tax: float
    effective_rate: float


class MultiPeriodProjection(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    regime: Regime
    annual_growth_rate: float
    deduction_growth_rate: float
    periods: List[ProjectionPeriod] = Field(default_factory=list)
    total_income: float = 0.0
    total_deductions: float = 0.0
    total_tax: float = 0.0
    average_effective_rate: float = 0.0


# ---------------------------------------------------------------------------
# What-if scenarios
# ---------------------------------------------------------------------------

class TaxScenario(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    income: Money = 0.0
    deductions: Dict[DeductionSection, Money] = Field(default_factory=dict)
    description: Optional[str] = None


class ScenarioResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    income: float
    total_deductions: float
    old_regime_tax: float
    new_regime_tax: float
    recommended_regime: Regime
    best_tax: float
    effective_rate: float


class ScenarioComparison(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: str
    results: List[ScenarioResult] = Field(default_factory=list)
    best_scenario: Optional[str] = None


# ---------------------------------------------------------------------------
# Optimizer output
# ---------------------------------------------------------------------------

class HeadroomSuggestion(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    section: DeductionSection
    headroom: float
    tax_saving: float
    text: str


class Strategy(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: str                  # e.g. "ELSS Investment"
    section: DeductionSection
    amount: float
    tax_saving: float
    expected_returns: float
    risk: str
    liquidity: str


class TaxStrategy(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    current_tax: float
    marginal_rate: float       # slab rate incl. cess, as a fraction (0.312 = 30% + cess)
    strategies: List[Strategy] = Field(default_factory=list)
    total_potential_saving: float = 0.0


__all__ = [
    "Regime",
    "DeductionSection",
    "AssetClass",
    "TDSSource",
    "RiskAppetite",
    "TaxBracket",
    "BracketBreakdown",
    "TaxResult",
    "DeductionEntry",
    "DeductionTotals",
    "RegimeResult",
    "RegimeComparison",
    "DisposalEvent",
    "CapitalGainResult",
    "TDSRecord",
    "TDSSummary",
    "AdvanceTaxInstallment",
    "AdvanceTaxSchedule",
    "InYearProjection",
    "ProjectionPeriod",
    "MultiPeriodProjection",
    "TaxScenario",
    "ScenarioResult",
    "ScenarioComparison",
    "HeadroomSuggestion",
    "Strategy",
    "TaxStrategy",
]
