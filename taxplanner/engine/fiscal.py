"""
Fiscal-year helpers. Indian fiscal year: 1 April – 31 March, labelled "2025-26".

Nothing here reads the wall clock: every helper takes the reference date as an
argument so callers (and tests) decide what "today" is.
"""
from __future__ import annotations

import re
from datetime import date

FISCAL_YEAR_START_MONTH = 4

_LABEL_RE = re.compile(r"^\s*(\d{4})\s*-\s*(\d{2}|\d{4})\s*$")


def fiscal_year_start_year(label: str) -> int:
    """
    Parse "2025-26" or "2025-2026" and return the start year (2025).
    Raises ValueError for anything else, including a non-consecutive end year.
    """
    match = _LABEL_RE.match(label or "")
    if match is None:
        raise ValueError(f"Invalid fiscal year '{label}'. Expected a label like '2025-26'.")
    start = int(match.group(1))
    end = match.group(2)
    expected_end = str(start + 1) if len(end) == 4 else f"{(start + 1) % 100:02d}"
    if end != expected_end:
        raise ValueError(
            f"Invalid fiscal year '{label}': end year must follow start year {start}."
        )
    return start


def fiscal_year_label_for_start(start_year: int) -> str:
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def normalize_fiscal_year(label: str) -> str:
    """Canonical "YYYY-YY" form of any accepted label."""
    return fiscal_year_label_for_start(fiscal_year_start_year(label))


def fiscal_year_label(as_of: date) -> str:
    """Fiscal year containing as_of."""
    start = as_of.year if as_of.month >= FISCAL_YEAR_START_MONTH else as_of.year - 1
    return fiscal_year_label_for_start(start)


def fiscal_year_bounds(label: str) -> tuple[date, date]:
    """(first day, last day) of the fiscal year."""
    start = fiscal_year_start_year(label)
    return date(start, FISCAL_YEAR_START_MONTH, 1), date(start + 1, 3, 31)


def months_elapsed(as_of: date) -> int:
    """Whole calendar months from the fiscal-year start to as_of, clamped to [0, 12]."""
    fy_start, _ = fiscal_year_bounds(fiscal_year_label(as_of))
    diff = (as_of.year - fy_start.year) * 12 + (as_of.month - fy_start.month)
    return max(0, min(12, diff))
