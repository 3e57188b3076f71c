"""
Slab calculator test suite.
All expected values hand-computed from the bracket tables in engine/tables.py.

Groups:
  1. Named constant / table verification — exact equality
  2. Parametrised slab cases — approx
  3. Invariants and boundary handling
"""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from taxplanner.engine.schemas import Regime, TaxBracket
from taxplanner.engine.tables import (
    CESS_RATE,
    LATEST_FISCAL_YEAR,
    NEW_REGIME_BRACKETS_FY2024_25,
    NEW_REGIME_BRACKETS_FY2025_26,
    OLD_REGIME_BRACKETS,
    OLD_STD_DEDUCTION,
    NEW_STD_DEDUCTION,
    REGIME_RULES,
    UnknownTableError,
    get_brackets,
    get_regime_rules,
)
from taxplanner.engine.tax_engine import (
    calculate_income_tax,
    calculate_regime_tax,
    marginal_rate,
)


# ===========================================================================
# TEST GROUP 1: Constants and tables
# ===========================================================================

def test_cess_and_standard_deduction_constants() -> None:
    assert CESS_RATE == pytest.approx(0.04)
    assert OLD_STD_DEDUCTION == 50_000
    assert NEW_STD_DEDUCTION == 75_000
    assert LATEST_FISCAL_YEAR == "2025-26"


def test_new_regime_breakpoints_budget_2025() -> None:
    """FY 2025-26 new regime uses 4L/8L/12L/16L/20L/24L, not the FY 2024-25 3L/7L/10L/12L/15L."""
    assert [b.lower_bound for b in NEW_REGIME_BRACKETS_FY2025_26] == [
        0, 400_000, 800_000, 1_200_000, 1_600_000, 2_000_000, 2_400_000,
    ]
    assert [b.lower_bound for b in NEW_REGIME_BRACKETS_FY2024_25] == [
        0, 300_000, 700_000, 1_000_000, 1_200_000, 1_500_000,
    ]


@pytest.mark.parametrize("key", list(REGIME_RULES))
def test_every_table_is_contiguous_and_open_ended(key) -> None:
    brackets = REGIME_RULES[key].brackets
    assert brackets[0].lower_bound == 0
    for prev, nxt in zip(brackets, brackets[1:]):
        assert nxt.lower_bound == prev.upper_bound
    assert brackets[-1].upper_bound is None


def test_old_regime_table_unchanged_across_years() -> None:
    assert get_brackets(Regime.old, "2024-25") == get_brackets(Regime.old, "2025-26") == OLD_REGIME_BRACKETS


def test_get_regime_rules_accepts_long_label() -> None:
    rules = get_regime_rules("new", "2025-2026")
    assert rules.fiscal_year == "2025-26"
    assert rules.allows_chapter_deductions is False


def test_unknown_fiscal_year_raises() -> None:
    with pytest.raises(UnknownTableError) as excinfo:
        get_regime_rules(Regime.old, "2019-20")
    assert excinfo.value.fiscal_year == "2019-20"
    assert isinstance(excinfo.value, ValueError)


def test_bracket_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        TaxBracket(lower_bound=500_000, upper_bound=250_000, rate=5)


def test_bracket_rejects_rate_above_100() -> None:
    with pytest.raises(ValueError):
        TaxBracket(lower_bound=0, upper_bound=None, rate=120)


# ===========================================================================
# TEST GROUP 2: Parametrised slab cases
# ===========================================================================

@dataclass
class TaxCase:
    """Single parametrised case for calculate_income_tax()."""
    description: str
    gross_income: float
    total_deductions: float
    regime: str
    fiscal_year: str
    expected_base_tax: float
    expected_total_tax: float
    expected_brackets: int = field(default=0)


TAX_CASES: list[TaxCase] = [
    TaxCase(
        description="old_12L_with_2L_deductions",
        gross_income=1_200_000, total_deductions=200_000, regime="old", fiscal_year="2025-26",
        # taxable=1000000: 0 + 12500 + 100000 = 112500, cess=4500
        expected_base_tax=112_500, expected_total_tax=117_000, expected_brackets=3,
    ),
    TaxCase(
        description="new_12L_exactly_on_breakpoint",
        gross_income=1_200_000, total_deductions=0, regime="new", fiscal_year="2025-26",
        # 0 + 20000 + 40000 = 60000, cess=2400
        expected_base_tax=60_000, expected_total_tax=62_400, expected_brackets=3,
    ),
    TaxCase(
        description="new_5L_second_bracket",
        gross_income=500_000, total_deductions=0, regime="new", fiscal_year="2025-26",
        # 5% * 100000 = 5000, cess=200
        expected_base_tax=5_000, expected_total_tax=5_200, expected_brackets=2,
    ),
    TaxCase(
        description="new_30L_top_bracket",
        gross_income=3_000_000, total_deductions=0, regime="new", fiscal_year="2025-26",
        # 0+20000+40000+60000+80000+100000+180000 = 480000, cess=19200
        expected_base_tax=480_000, expected_total_tax=499_200, expected_brackets=7,
    ),
    TaxCase(
        description="old_3L_no_deductions",
        gross_income=300_000, total_deductions=0, regime="old", fiscal_year="2025-26",
        # 5% * 50000 = 2500, cess=100
        expected_base_tax=2_500, expected_total_tax=2_600, expected_brackets=2,
    ),
    TaxCase(
        description="new_fy2024_25_9_25L",
        gross_income=925_000, total_deductions=0, regime="new", fiscal_year="2024-25",
        # 0 + 20000 + 22500 = 42500, cess=1700
        expected_base_tax=42_500, expected_total_tax=44_200, expected_brackets=3,
    ),
    TaxCase(
        description="deductions_exceed_income",
        gross_income=400_000, total_deductions=900_000, regime="old", fiscal_year="2025-26",
        expected_base_tax=0, expected_total_tax=0, expected_brackets=0,
    ),
    TaxCase(
        description="zero_income",
        gross_income=0, total_deductions=0, regime="new", fiscal_year="2025-26",
        expected_base_tax=0, expected_total_tax=0, expected_brackets=0,
    ),
]


@pytest.mark.parametrize("case", TAX_CASES, ids=[c.description for c in TAX_CASES])
def test_slab_cases(case: TaxCase) -> None:
    result = calculate_regime_tax(
        case.gross_income, case.total_deductions, case.regime, case.fiscal_year,
    )
    assert result.base_tax == pytest.approx(case.expected_base_tax, abs=0.01)
    assert result.total_tax == pytest.approx(case.expected_total_tax, abs=0.01)
    assert len(result.bracket_breakdown) == case.expected_brackets


@pytest.mark.parametrize("case", TAX_CASES, ids=[c.description for c in TAX_CASES])
def test_result_invariants(case: TaxCase) -> None:
    result = calculate_regime_tax(
        case.gross_income, case.total_deductions, case.regime, case.fiscal_year,
    )
    assert result.taxable_income == max(0.0, result.gross_income - result.total_deductions)
    assert sum(b.tax_in_bracket for b in result.bracket_breakdown) == pytest.approx(result.base_tax)
    assert result.cess == pytest.approx(result.base_tax * CESS_RATE)
    assert result.total_tax == pytest.approx(result.base_tax + result.cess)
    assert all(b.taxable_portion > 0 for b in result.bracket_breakdown)


# ===========================================================================
# TEST GROUP 3: Details and boundaries
# ===========================================================================

def test_breakdown_portions_for_old_regime() -> None:
    result = calculate_regime_tax(1_200_000, 200_000, Regime.old, "2025-26")
    portions = [(b.taxable_portion, b.tax_in_bracket) for b in result.bracket_breakdown]
    assert portions == [
        (pytest.approx(250_000), pytest.approx(0)),
        (pytest.approx(250_000), pytest.approx(12_500)),
        (pytest.approx(500_000), pytest.approx(100_000)),
    ]
    assert result.effective_rate == pytest.approx(9.75)


def test_default_table_is_latest_new_regime() -> None:
    assert calculate_income_tax(1_200_000).total_tax == pytest.approx(62_400)


def test_custom_bracket_table() -> None:
    brackets = [
        TaxBracket(lower_bound=0, upper_bound=100_000, rate=10),
        TaxBracket(lower_bound=100_000, upper_bound=None, rate=20),
    ]
    result = calculate_income_tax(80_000, 0, brackets)
    assert result.base_tax == pytest.approx(8_000)
    assert result.total_tax == pytest.approx(8_320)
    assert len(result.bracket_breakdown) == 1


def test_effective_rate_zero_for_zero_income() -> None:
    assert calculate_income_tax(0, 0).effective_rate == 0.0


@pytest.mark.parametrize("bad", [-500_000, "abc", float("nan"), float("inf"), None])
def test_invalid_income_clamped_to_zero(bad) -> None:
    result = calculate_income_tax(bad, 0)
    assert result.gross_income == 0.0
    assert result.total_tax == 0.0


def test_negative_deductions_clamped() -> None:
    result = calculate_regime_tax(1_200_000, -200_000, Regime.old, "2025-26")
    assert result.total_deductions == 0.0
    assert result.taxable_income == 1_200_000


def test_indian_grouped_string_income_parsed() -> None:
    assert calculate_income_tax("12,00,000").gross_income == 1_200_000


def test_monotonic_in_taxable_income() -> None:
    brackets = get_brackets(Regime.new, "2025-26")
    previous = -1.0
    for income in range(0, 3_000_001, 50_000):
        tax = calculate_income_tax(income, 0, brackets).total_tax
        assert tax >= previous
        previous = tax


def test_malformed_overlapping_table_never_negative() -> None:
    brackets = [
        TaxBracket(lower_bound=0, upper_bound=500_000, rate=10),
        TaxBracket(lower_bound=100_000, upper_bound=200_000, rate=50),
    ]
    result = calculate_income_tax(1_000_000, 0, brackets)
    assert result.base_tax >= 0
    assert all(b.taxable_portion > 0 for b in result.bracket_breakdown)


@pytest.mark.parametrize("taxable,expected", [
    (0, 0),
    (249_999, 0),
    (250_000, 5),
    (999_999, 20),
    (1_000_000, 30),
])
def test_marginal_rate_old_regime(taxable, expected) -> None:
    assert marginal_rate(taxable, OLD_REGIME_BRACKETS) == expected
