"""Deduction aggregation, statutory caps and HRA exemption."""
from __future__ import annotations

import pytest

from taxplanner.engine.deductions import (
    aggregate_deductions,
    calculate_hra_exemption,
    cap_section_amounts,
    section_caps,
)
from taxplanner.engine.schemas import DeductionEntry, DeductionSection as S


def _entry(section: S, amount, fiscal_year: str = "2025-26") -> DeductionEntry:
    return DeductionEntry(section=section, amount=amount, fiscal_year=fiscal_year)


def test_80c_capped_at_150000() -> None:
    totals = aggregate_deductions([
        _entry(S.section_80c, 100_000),
        _entry(S.section_80c, 80_000),
    ])
    assert totals.claimed[S.section_80c] == 180_000
    assert totals.by_section[S.section_80c] == 150_000
    assert totals.headroom[S.section_80c] == 0
    assert totals.total == 150_000


def test_uncapped_sections_pass_through() -> None:
    totals = aggregate_deductions([
        _entry(S.hra, 400_000),
        _entry(S.other, 900_000),
    ])
    assert totals.by_section[S.hra] == 400_000
    assert totals.by_section[S.other] == 900_000
    assert S.hra not in totals.headroom
    assert S.other not in totals.headroom
    assert totals.total == 1_300_000


def test_headroom_reported_for_unclaimed_capped_sections() -> None:
    totals = aggregate_deductions([_entry(S.section_80c, 50_000)])
    assert totals.headroom == {
        S.section_80c: 100_000,
        S.section_80d: 25_000,
        S.section_80ccd1b: 50_000,
        S.section_24b: 200_000,
        S.section_80tta: 10_000,
    }


def test_all_caps_applied() -> None:
    totals = aggregate_deductions([
        _entry(S.section_80c, 500_000),
        _entry(S.section_80d, 500_000),
        _entry(S.section_80ccd1b, 500_000),
        _entry(S.section_24b, 500_000),
        _entry(S.section_80tta, 500_000),
    ])
    assert totals.total == 150_000 + 25_000 + 50_000 + 200_000 + 10_000


def test_senior_citizen_80d_cap() -> None:
    assert section_caps(senior_citizen=True)[S.section_80d] == 50_000
    totals = aggregate_deductions([_entry(S.section_80d, 60_000)], senior_citizen=True)
    assert totals.by_section[S.section_80d] == 50_000


def test_fiscal_year_filter_ignores_other_years() -> None:
    totals = aggregate_deductions(
        [
            _entry(S.section_80c, 100_000, "2025-26"),
            _entry(S.section_80c, 100_000, "2024-25"),
            _entry(S.other, 5_000, "2025-2026"),
        ],
        fiscal_year="2025-26",
    )
    assert totals.fiscal_year == "2025-26"
    assert totals.by_section[S.section_80c] == 100_000
    assert totals.by_section[S.other] == 5_000


def test_negative_amount_clamped_at_entry() -> None:
    entry = _entry(S.section_80c, -40_000)
    assert entry.amount == 0.0
    assert aggregate_deductions([entry]).total == 0.0


def test_empty_snapshot() -> None:
    totals = aggregate_deductions([])
    assert totals.total == 0.0
    assert totals.by_section == {}


def test_entries_not_mutated() -> None:
    entries = [_entry(S.section_80c, 200_000)]
    aggregate_deductions(entries)
    assert entries[0].amount == 200_000


def test_cap_section_amounts_accepts_string_keys() -> None:
    totals = cap_section_amounts({"80C": 170_000, "24B": 50_000})
    assert totals.by_section[S.section_80c] == 150_000
    assert totals.by_section[S.section_24b] == 50_000
    assert totals.total == 200_000


# ---------------------------------------------------------------------------
# HRA exemption
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("basic,hra,rent,metro,expected", [
    # min(300000, 600000, 180000-120000=60000) = 60000
    (1_200_000, 300_000, 180_000, True, 60_000),
    # min(100000, 40%*500000=200000, 300000-50000=250000) = 100000
    (500_000, 100_000, 300_000, False, 100_000),
    # rent below 10% of basic → third limb clips at 0
    (1_000_000, 200_000, 50_000, True, 0),
    # no HRA received
    (1_000_000, 0, 300_000, True, 0),
    # no rent paid
    (1_000_000, 200_000, 0, False, 0),
])
def test_hra_exemption(basic, hra, rent, metro, expected) -> None:
    assert calculate_hra_exemption(basic, hra, rent, metro) == pytest.approx(expected)
