"""
Deduction aggregation — group a snapshot of DeductionEntry by section and apply
statutory caps. Pure functions. No I/O.

Capped sections (80C, 80D, 80CCD1B, 24B, 80TTA) contribute min(sum, cap).
Uncapped sections (HRA, OTHER) pass through unmodified.
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from taxplanner.engine.fiscal import normalize_fiscal_year
from taxplanner.engine.money import clamp_money
from taxplanner.engine.schemas import DeductionEntry, DeductionSection, DeductionTotals
from taxplanner.engine.tables import CAP_80D_SENIOR, DEDUCTION_CAPS

logger = logging.getLogger(__name__)


def section_caps(senior_citizen: bool = False) -> dict[DeductionSection, float]:
    """Statutory caps for a filer; a senior citizen gets the higher 80D cap."""
    caps = dict(DEDUCTION_CAPS)
    if senior_citizen:
        caps[DeductionSection.section_80d] = CAP_80D_SENIOR
    return caps


def cap_section_amounts(
    claimed: Mapping[DeductionSection, float],
    fiscal_year: Optional[str] = None,
    senior_citizen: bool = False,
) -> DeductionTotals:
    """Apply caps to per-section raw sums."""
    caps = section_caps(senior_citizen)
    raw: dict[DeductionSection, float] = {}
    allowed: dict[DeductionSection, float] = {}
    headroom: dict[DeductionSection, float] = {}

    for section, amount in claimed.items():
        section = DeductionSection(section)
        raw[section] = raw.get(section, 0.0) + clamp_money(amount)

    for section, amount in raw.items():
        cap = caps.get(section)
        allowed[section] = amount if cap is None else min(amount, cap)

    # Headroom is reported for every capped section, claimed or not
    for section, cap in caps.items():
        headroom[section] = max(0.0, cap - allowed.get(section, 0.0))

    return DeductionTotals(
        fiscal_year=fiscal_year,
        claimed=raw,
        by_section=allowed,
        headroom=headroom,
        total=sum(allowed.values()),
    )


def aggregate_deductions(
    entries: Iterable[DeductionEntry],
    fiscal_year: Optional[str] = None,
    senior_citizen: bool = False,
) -> DeductionTotals:
    """
    Sum entries by section and cap them.

    When fiscal_year is given, entries recorded against any other fiscal year
    are ignored. The entries are only read, never modified.
    """
    target = normalize_fiscal_year(fiscal_year) if fiscal_year else None
    sums: dict[DeductionSection, float] = {}
    skipped = 0
    for entry in entries:
        if target is not None and normalize_fiscal_year(entry.fiscal_year) != target:
            skipped += 1
            continue
        sums[entry.section] = sums.get(entry.section, 0.0) + clamp_money(entry.amount)

    totals = cap_section_amounts(sums, fiscal_year=target, senior_citizen=senior_citizen)
    logger.debug(
        "Aggregated deductions fiscal_year=%s sections=%d skipped=%d total=%.2f",
        target, len(sums), skipped, totals.total,
    )
    return totals


def calculate_hra_exemption(
    basic_salary: float,
    hra_received: float,
    annual_rent_paid: float,
    metro: bool = False,
) -> float:
    """
    HRA exemption under Section 10(13A), Rule 2A — minimum of:
      1. HRA received from employer
      2. 50% of basic (metro) or 40% (non-metro)
      3. max(0, annual rent - 10% of basic)   ← MUST clip at 0
    Returns 0 if no HRA received or no rent paid.
    """
    basic = clamp_money(basic_salary)
    hra = clamp_money(hra_received)
    rent = clamp_money(annual_rent_paid)
    if hra == 0 or rent == 0:
        return 0.0
    salary_pct = 0.50 if metro else 0.40
    return min(hra, salary_pct * basic, max(0.0, rent - 0.10 * basic))
