"""
Capital gains classification and tax.

Holding period uses a 30-day month: holding_months = days_held / 30. The
long-term boundary is inclusive (holding_months >= threshold).

Rate table by asset class and term:
  EQUITY / MUTUAL_FUND  long-term   10% on gain above ₹1,00,000 exemption
  EQUITY / MUTUAL_FUND  short-term  15%
  PROPERTY              long-term   20% (acquisition_price already indexed by caller)
  BOND / GOLD / OTHER   long-term   20%
  any non-equity        short-term  SHORT_TERM_SLAB_APPROXIMATION_RATE

Short-term non-equity gains are really taxed at the filer's marginal slab rate.
This module does not have the filer's other income, so it applies a flat 30%
and marks the result with slab_rate_approximated=True.

Losses are not set off or carried forward: a negative gain yields
taxable_gain = 0 and tax_amount = 0.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from taxplanner.engine.money import clamp_money
from taxplanner.engine.schemas import AssetClass, CapitalGainResult, DisposalEvent

logger = logging.getLogger(__name__)

DAYS_PER_HOLDING_MONTH = 30
SHORT_TERM_SLAB_APPROXIMATION_RATE = 30.0
EQUITY_LTCG_EXEMPTION = 100_000


@dataclass(frozen=True)
class _AssetRule:
    long_term_months: int
    long_term_rate: float
    long_term_exemption: float
    short_term_rate: float | None    # None → slab approximation


_EQUITY_RULE = _AssetRule(12, 10.0, EQUITY_LTCG_EXEMPTION, 15.0)
_OTHER_RULE = _AssetRule(12, 20.0, 0.0, None)

ASSET_RULES: dict[AssetClass, _AssetRule] = {
    AssetClass.equity: _EQUITY_RULE,
    AssetClass.mutual_fund: _EQUITY_RULE,
    AssetClass.property: _AssetRule(24, 20.0, 0.0, None),
    AssetClass.bond: _OTHER_RULE,
    AssetClass.gold: _OTHER_RULE,
    AssetClass.other: _OTHER_RULE,
}


class UnsupportedAssetClassError(ValueError):
    """The asset class has no rate table. Never defaulted, to avoid mis-taxation."""

    def __init__(self, asset_class: object):
        self.asset_class = asset_class
        supported = ", ".join(a.value for a in ASSET_RULES)
        super().__init__(
            f"Unsupported asset class '{asset_class}'. Supported classes: {supported}"
        )


def holding_months(acquisition_date: date, disposal_date: date) -> float:
    """Holding period in 30-day months. Disposal before acquisition counts as 0."""
    days = (disposal_date - acquisition_date).days
    return max(0, days) / DAYS_PER_HOLDING_MONTH


def _resolve_asset_class(asset_class: AssetClass | str) -> AssetClass:
    try:
        resolved = AssetClass(asset_class)
    except ValueError:
        raise UnsupportedAssetClassError(asset_class) from None
    if resolved not in ASSET_RULES:
        raise UnsupportedAssetClassError(asset_class)
    return resolved


def classify_disposal(event: DisposalEvent) -> CapitalGainResult:
    """Classify a disposal as short/long term and compute the tax on the gain."""
    asset_class = _resolve_asset_class(event.asset_class)
    rule = ASSET_RULES[asset_class]

    months = holding_months(event.acquisition_date, event.disposal_date)
    is_long_term = months >= rule.long_term_months
    gain = clamp_money(event.disposal_price) - clamp_money(event.acquisition_price)

    approximated = False
    if is_long_term:
        rate = rule.long_term_rate
        exemption = min(max(gain, 0.0), rule.long_term_exemption)
    else:
        exemption = 0.0
        if rule.short_term_rate is None:
            rate = SHORT_TERM_SLAB_APPROXIMATION_RATE
            approximated = True
        else:
            rate = rule.short_term_rate

    taxable_gain = max(0.0, gain - exemption)
    tax_amount = taxable_gain * rate / 100

    logger.debug(
        "Capital gain classified asset_class=%s months=%.2f long_term=%s taxable=%.2f",
        asset_class.value, months, is_long_term, taxable_gain,
    )
    return CapitalGainResult(
        asset_class=asset_class,
        holding_months=months,
        gain=gain,
        is_long_term=is_long_term,
        exemption_applied=exemption,
        taxable_gain=taxable_gain,
        rate=rate,
        tax_amount=tax_amount,
        slab_rate_approximated=approximated,
    )


def calculate_capital_gains(
    asset_class: AssetClass | str,
    acquisition_price: float,
    disposal_price: float,
    acquisition_date: date,
    disposal_date: date,
) -> CapitalGainResult:
    """
    Flat-argument entry point. Raises UnsupportedAssetClassError for an
    unknown asset class before any DisposalEvent is built.
    """
    resolved = _resolve_asset_class(asset_class)
    event = DisposalEvent(
        asset_class=resolved,
        acquisition_price=acquisition_price,
        disposal_price=disposal_price,
        acquisition_date=acquisition_date,
        disposal_date=disposal_date,
    )
    return classify_disposal(event)
