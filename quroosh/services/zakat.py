"""Zakat calculation service.

Implements the Saudi zakat rules for an investment portfolio:

- Zakat rate: 2.5%
- Gold Nisab: value of 85 grams of 24k gold
- Nisab test: liquid assets (crypto + gold) must reach the Gold Nisab value

The calculator is pure: it never fetches prices, logs or touches shared
state. Values are carried unrounded; rounding is left to presentation.
"""
import math
from datetime import datetime
from typing import Iterable, Optional

from quroosh.constants import (
    CATEGORY_CRYPTO,
    CATEGORY_GOLD,
    CATEGORY_REAL_ESTATE,
    CATEGORY_STOCK,
    DOMESTIC_STOCK_MARKERS,
    INVESTOR_HOLDING_DAYS,
    NISAB_GOLD_GRAMS,
    ZAKAT_RATE,
)
from quroosh.errors import InvalidInputError
from quroosh.services.investments import InvestmentRecord
from quroosh.services.time_provider import get_now

# category -> breakdown key
BREAKDOWN_KEYS = {
    CATEGORY_REAL_ESTATE: 'real_estate',
    CATEGORY_STOCK: 'stocks',
    CATEGORY_CRYPTO: 'crypto',
    CATEGORY_GOLD: 'gold',
}

REASON_REAL_ESTATE = 'Trading property (Urud al-Tijarah)'
REASON_INTERNATIONAL_STOCK = 'International stock'
REASON_DOMESTIC_SPECULATOR = 'Saudi stock - Speculator (held < 1 year)'
REASON_DOMESTIC_INVESTOR = 'Saudi stock - Investor (held >= 1 year, company pays Zakat)'
REASON_CRYPTO = 'Cryptocurrency'


def gold_nisab_value(gold_price_per_gram: float) -> float:
    return NISAB_GOLD_GRAMS * gold_price_per_gram


def is_domestic_stock(name: str) -> bool:
    """Saudi-listed (Tadawul) stocks are recognised by name."""
    lowered = name.lower()
    return any(marker in lowered for marker in DOMESTIC_STOCK_MARKERS)


def holding_period_days(purchase_date: Optional[datetime], now: datetime) -> float:
    """Fractional days held; an unknown purchase date counts as a full year."""
    if purchase_date is None:
        return float(INVESTOR_HOLDING_DAYS)
    return (now - purchase_date).total_seconds() / 86400


def classify_stock(record: InvestmentRecord, now: datetime) -> tuple[bool, str]:
    """Return (fully_zakatable, reason) for a stock holding."""
    if not is_domestic_stock(record.name):
        return (True, REASON_INTERNATIONAL_STOCK)
    if holding_period_days(record.purchase_date, now) < INVESTOR_HOLDING_DAYS:
        return (True, REASON_DOMESTIC_SPECULATOR)
    return (False, REASON_DOMESTIC_INVESTOR)


def classify_gold(record: InvestmentRecord, nisab_value: float) -> tuple[bool, str]:
    """Gold below the Nisab value is exempt; at or above it is fully zakatable."""
    value = record.current_value
    if value < nisab_value:
        return (False, f'Below Nisab threshold (value {value:,.2f} < Nisab {nisab_value:,.2f})')
    return (True, f'Above Nisab threshold (value {value:,.2f} >= Nisab {nisab_value:,.2f})')


def _empty_breakdown() -> dict:
    return {'total': 0.0, 'zakatable': 0.0, 'zakat': 0.0, 'items': []}


def _add_item(breakdown: dict, record: InvestmentRecord, zakatable: bool, reason: str) -> dict:
    value = record.current_value
    zakatable_value = value if zakatable else 0.0
    zakat = zakatable_value * ZAKAT_RATE
    item = {
        'name': record.name,
        'value': value,
        'zakatable': zakatable_value,
        'zakat': zakat,
        'reason': reason,
    }
    breakdown['total'] += value
    breakdown['zakatable'] += zakatable_value
    breakdown['zakat'] += zakat
    breakdown['items'].append(item)
    return item


def format_nisab_status(meets_nisab: bool, total_liquid_assets: float, nisab_value: float) -> str:
    percent = total_liquid_assets / nisab_value * 100
    if meets_nisab:
        return f'Meets Nisab ({percent:.1f}% of threshold)'
    return f'Below Nisab ({percent:.1f}% of threshold)'


def calculate_zakat(
    investments: Iterable[InvestmentRecord],
    current_gold_price_per_gram: float,
    now: Optional[datetime] = None,
) -> dict:
    """Calculate zakat for an investment portfolio.

    Args:
        investments: InvestmentRecords in display order (may be empty)
        current_gold_price_per_gram: Gold price in the reporting currency,
            resolved by the caller
        now: Reference time for holding periods (default: current UTC time)

    Returns:
        Breakdown per category plus totals and the Nisab determination.
        ``total_zakat`` is the raw sum over every category; ``nisab_gated_zakat``
        is the amount actually due once the Nisab test is applied.

    Raises:
        InvalidInputError: If the gold price is not a finite positive number.
    """
    price = current_gold_price_per_gram
    if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price) or price <= 0:
        raise InvalidInputError(f'Gold price per gram must be a positive number, got {price!r}')

    if now is None:
        now = get_now()
    nisab_value = gold_nisab_value(price)

    breakdown = {key: _empty_breakdown() for key in BREAKDOWN_KEYS.values()}
    skipped = 0

    for record in investments:
        if record.category == CATEGORY_REAL_ESTATE:
            _add_item(breakdown['real_estate'], record, True, REASON_REAL_ESTATE)
        elif record.category == CATEGORY_STOCK:
            zakatable, reason = classify_stock(record, now)
            _add_item(breakdown['stocks'], record, zakatable, reason)
        elif record.category == CATEGORY_CRYPTO:
            _add_item(breakdown['crypto'], record, True, REASON_CRYPTO)
        elif record.category == CATEGORY_GOLD:
            zakatable, reason = classify_gold(record, nisab_value)
            item = _add_item(breakdown['gold'], record, zakatable, reason)
            item['weight'] = record.amount_owned
        else:
            # Unknown asset classes are not zakatable by default
            skipped += 1

    total_liquid_assets = breakdown['crypto']['total'] + breakdown['gold']['total']
    total_zakatable = sum(b['zakatable'] for b in breakdown.values())
    total_zakat = sum(b['zakat'] for b in breakdown.values())
    meets_nisab = total_liquid_assets >= nisab_value

    return {
        'gold_nisab_value': nisab_value,
        'gold_nisab_grams': NISAB_GOLD_GRAMS,
        'current_gold_price_per_gram': price,
        'zakat_rate': ZAKAT_RATE,
        'meets_nisab': meets_nisab,
        'nisab_status': format_nisab_status(meets_nisab, total_liquid_assets, nisab_value),
        'total_liquid_assets': total_liquid_assets,
        'total_zakatable': total_zakatable,
        'total_zakat': total_zakat,
        'nisab_gated_zakat': total_zakat if meets_nisab else 0.0,
        'skipped_items': skipped,
        'category_breakdown': breakdown,
        'timestamp': now.isoformat(),
    }
