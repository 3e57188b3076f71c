"""
Advance tax scheduling and TDS summaries.

Installments are CUMULATIVE: installment k states how much of the net payable
must have been paid in total by its due date (15/45/75/100%). The amount to
pay in a given quarter is incremental_amount_due, i.e. this cumulative figure
minus the previous one.

No schedule is required when net payable is below ADVANCE_TAX_THRESHOLD.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from taxplanner.engine.fiscal import (
    fiscal_year_label,
    fiscal_year_start_year,
    normalize_fiscal_year,
)
from taxplanner.engine.money import clamp_money
from taxplanner.engine.schemas import (
    AdvanceTaxInstallment,
    AdvanceTaxSchedule,
    Regime,
    TDSRecord,
    TDSSource,
    TDSSummary,
)
from taxplanner.engine.tables import (
    ADVANCE_TAX_CUMULATIVE_PERCENTAGES,
    ADVANCE_TAX_DUE_DAYS,
    ADVANCE_TAX_THRESHOLD,
    LATEST_FISCAL_YEAR,
)
from taxplanner.engine.tax_engine import calculate_regime_tax

logger = logging.getLogger(__name__)


def installment_due_dates(fiscal_year: str) -> list[date]:
    """Statutory due dates: 15 Jun, 15 Sep, 15 Dec of the start year, 15 Mar of the next."""
    start = fiscal_year_start_year(fiscal_year)
    return [
        date(start if month >= 4 else start + 1, month, day)
        for month, day in ADVANCE_TAX_DUE_DAYS
    ]


def build_advance_tax_schedule(
    total_liability: float,
    tds_already_paid: float = 0.0,
    fiscal_year: str = LATEST_FISCAL_YEAR,
) -> AdvanceTaxSchedule:
    """Schedule from a known full-year liability."""
    fiscal_year = normalize_fiscal_year(fiscal_year)
    liability = clamp_money(total_liability)
    tds = clamp_money(tds_already_paid)
    net_payable = max(0.0, liability - tds)
    required = net_payable >= ADVANCE_TAX_THRESHOLD

    installments: list[AdvanceTaxInstallment] = []
    if required:
        previous = 0.0
        due_dates = installment_due_dates(fiscal_year)
        for index, (due, pct) in enumerate(zip(due_dates, ADVANCE_TAX_CUMULATIVE_PERCENTAGES), start=1):
            cumulative = net_payable * pct / 100
            installments.append(AdvanceTaxInstallment(
                quarter_label=f"Q{index}",
                due_date=due,
                cumulative_percentage=pct,
                cumulative_amount_due=cumulative,
                incremental_amount_due=cumulative - previous,
            ))
            previous = cumulative

    logger.debug(
        "Advance tax fiscal_year=%s net_payable=%.2f required=%s",
        fiscal_year, net_payable, required,
    )
    return AdvanceTaxSchedule(
        fiscal_year=fiscal_year,
        total_liability=liability,
        tds_already_paid=tds,
        net_payable=net_payable,
        required=required,
        installments=installments,
    )


def schedule_advance_tax(
    estimated_income: float,
    estimated_deductions: float = 0.0,
    tds_already_paid: float = 0.0,
    regime: Regime | str = Regime.new,
    fiscal_year: Optional[str] = None,
    as_of: Optional[date] = None,
) -> AdvanceTaxSchedule:
    """
    Estimate full-year liability via the slab calculator, then schedule it.

    The fiscal year comes from fiscal_year, or else from the explicit as_of
    date. One of the two is required.
    """
    if fiscal_year is None:
        if as_of is None:
            raise ValueError("schedule_advance_tax needs either fiscal_year or as_of")
        fiscal_year = fiscal_year_label(as_of)

    liability = calculate_regime_tax(estimated_income, estimated_deductions, regime, fiscal_year)
    return build_advance_tax_schedule(liability.total_tax, tds_already_paid, fiscal_year)


def summarize_tds(
    records: Iterable[TDSRecord],
    fiscal_year: Optional[str] = None,
) -> TDSSummary:
    """Total withheld tax by source and by quarter, optionally for one fiscal year."""
    target = normalize_fiscal_year(fiscal_year) if fiscal_year else None
    total_income = 0.0
    total_tds = 0.0
    count = 0
    by_source: dict[TDSSource, float] = {}
    by_quarter: dict[str, float] = {}

    for record in records:
        if target is not None and normalize_fiscal_year(record.fiscal_year) != target:
            continue
        tds = clamp_money(record.tds_deducted)
        total_income += clamp_money(record.amount)
        total_tds += tds
        count += 1
        by_source[record.source] = by_source.get(record.source, 0.0) + tds
        by_quarter[record.quarter] = by_quarter.get(record.quarter, 0.0) + tds

    return TDSSummary(
        fiscal_year=target,
        total_income=total_income,
        total_tds=total_tds,
        record_count=count,
        by_source=by_source,
        by_quarter=by_quarter,
    )
