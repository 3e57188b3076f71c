"""
Statutory tables — static, versioned, one bracket table per regime per fiscal year.

Values are module-level constants and are never mutated at runtime. Callers that
need a different table (a future budget, a what-if) pass their own
TaxBracket sequence to the calculator instead of patching these.

Budget 2025 (FY 2025-26) COMPLETELY REVISED the new regime breakpoints:
  FY 2024-25 new: 3L/7L/10L/12L/15L
  FY 2025-26 new: 4L/8L/12L/16L/20L/24L
Old regime breakpoints are unchanged across both years.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from taxplanner.engine.fiscal import normalize_fiscal_year
from taxplanner.engine.schemas import DeductionSection, Regime, TaxBracket

# ===========================================================================
# FISCAL YEARS
# ===========================================================================

FY_2024_25 = "2024-25"
FY_2025_26 = "2025-26"
LATEST_FISCAL_YEAR = FY_2025_26

# ===========================================================================
# SURCHARGES AND THRESHOLDS
# ===========================================================================

CESS_RATE = 0.04                      # Health & education cess on base tax

OLD_STD_DEDUCTION = 50_000
NEW_STD_DEDUCTION = 75_000

ADVANCE_TAX_THRESHOLD = 10_000        # net payable at/above this → schedule required
ADVANCE_TAX_CUMULATIVE_PERCENTAGES: Tuple[float, ...] = (15, 45, 75, 100)
# (month, day) of each installment; Q1-Q3 fall in the start year, Q4 in the next
ADVANCE_TAX_DUE_DAYS: Tuple[Tuple[int, int], ...] = ((6, 15), (9, 15), (12, 15), (3, 15))

# ===========================================================================
# DEDUCTION CAP CONSTANTS
# ===========================================================================

CAP_80C = 150_000
CAP_80D = 25_000
CAP_80D_SENIOR = 50_000               # filer aged 60+
CAP_80CCD1B = 50_000
CAP_24B = 200_000
CAP_80TTA = 10_000

# Sections absent from this mapping (HRA, OTHER) are uncapped.
DEDUCTION_CAPS: dict[DeductionSection, float] = {
    DeductionSection.section_80c: CAP_80C,
    DeductionSection.section_80d: CAP_80D,
    DeductionSection.section_80ccd1b: CAP_80CCD1B,
    DeductionSection.section_24b: CAP_24B,
    DeductionSection.section_80tta: CAP_80TTA,
}

# ===========================================================================
# SLAB TABLES
# ===========================================================================

OLD_REGIME_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(lower_bound=0,         upper_bound=250_000,   rate=0),    # 0–2.5L
    TaxBracket(lower_bound=250_000,   upper_bound=500_000,   rate=5),    # 2.5–5L
    TaxBracket(lower_bound=500_000,   upper_bound=1_000_000, rate=20),   # 5–10L
    TaxBracket(lower_bound=1_000_000, upper_bound=None,      rate=30),   # >10L
)

NEW_REGIME_BRACKETS_FY2024_25: Tuple[TaxBracket, ...] = (
    TaxBracket(lower_bound=0,         upper_bound=300_000,   rate=0),    # 0–3L
    TaxBracket(lower_bound=300_000,   upper_bound=700_000,   rate=5),    # 3–7L
    TaxBracket(lower_bound=700_000,   upper_bound=1_000_000, rate=10),   # 7–10L
    TaxBracket(lower_bound=1_000_000, upper_bound=1_200_000, rate=15),   # 10–12L
    TaxBracket(lower_bound=1_200_000, upper_bound=1_500_000, rate=20),   # 12–15L
    TaxBracket(lower_bound=1_500_000, upper_bound=None,      rate=30),   # >15L
)

NEW_REGIME_BRACKETS_FY2025_26: Tuple[TaxBracket, ...] = (
    TaxBracket(lower_bound=0,         upper_bound=400_000,   rate=0),    # 0–4L
    TaxBracket(lower_bound=400_000,   upper_bound=800_000,   rate=5),    # 4–8L
    TaxBracket(lower_bound=800_000,   upper_bound=1_200_000, rate=10),   # 8–12L
    TaxBracket(lower_bound=1_200_000, upper_bound=1_600_000, rate=15),   # 12–16L
    TaxBracket(lower_bound=1_600_000, upper_bound=2_000_000, rate=20),   # 16–20L
    TaxBracket(lower_bound=2_000_000, upper_bound=2_400_000, rate=25),   # 20–24L
    TaxBracket(lower_bound=2_400_000, upper_bound=None,      rate=30),   # >24L
)


@dataclass(frozen=True)
class RegimeRules:
    """Bracket table and standard deduction for one regime in one fiscal year."""
    regime: Regime
    fiscal_year: str
    brackets: Tuple[TaxBracket, ...]
    standard_deduction: float
    allows_chapter_deductions: bool


REGIME_RULES: dict[tuple[str, Regime], RegimeRules] = {
    (FY_2024_25, Regime.old): RegimeRules(
        Regime.old, FY_2024_25, OLD_REGIME_BRACKETS, OLD_STD_DEDUCTION, True,
    ),
    (FY_2024_25, Regime.new): RegimeRules(
        Regime.new, FY_2024_25, NEW_REGIME_BRACKETS_FY2024_25, NEW_STD_DEDUCTION, False,
    ),
    (FY_2025_26, Regime.old): RegimeRules(
        Regime.old, FY_2025_26, OLD_REGIME_BRACKETS, OLD_STD_DEDUCTION, True,
    ),
    (FY_2025_26, Regime.new): RegimeRules(
        Regime.new, FY_2025_26, NEW_REGIME_BRACKETS_FY2025_26, NEW_STD_DEDUCTION, False,
    ),
}


class UnknownTableError(ValueError):
    """No statutory table is registered for the requested fiscal year."""

    def __init__(self, fiscal_year: str, regime: Regime):
        self.fiscal_year = fiscal_year
        self.regime = regime
        known = ", ".join(sorted({fy for fy, _ in REGIME_RULES}))
        super().__init__(
            f"No {regime.value} regime table for fiscal year '{fiscal_year}'. "
            f"Known fiscal years: {known}"
        )


def get_regime_rules(regime: Regime | str, fiscal_year: str = LATEST_FISCAL_YEAR) -> RegimeRules:
    """Look up the static table for (fiscal_year, regime). Raises UnknownTableError."""
    regime = Regime(regime)
    key = (normalize_fiscal_year(fiscal_year), regime)
    try:
        return REGIME_RULES[key]
    except KeyError:
        raise UnknownTableError(fiscal_year, regime) from None


def get_brackets(regime: Regime | str, fiscal_year: str = LATEST_FISCAL_YEAR) -> Tuple[TaxBracket, ...]:
    return get_regime_rules(regime, fiscal_year).brackets
