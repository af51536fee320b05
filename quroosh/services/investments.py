"""Investment records: parsing, validation and the SQLite-backed store."""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from quroosh.constants import CATEGORY_ALIASES
from quroosh.errors import InvalidInputError
from quroosh.services.time_provider import parse_datetime


@dataclass(frozen=True)
class InvestmentRecord:
    """One holding as supplied by the investment store."""
    name: str
    category: str
    amount_owned: float
    current_price: float
    buy_price: Optional[float] = None
    purchase_date: Optional[datetime] = None   # UTC

    def __post_init__(self):
        # Naive purchase dates are UTC, as in parse_datetime
        if self.purchase_date is not None:
            object.__setattr__(self, 'purchase_date', parse_datetime(self.purchase_date))

    @property
    def current_value(self) -> float:
        return self.current_price * self.amount_owned

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'category': self.category,
            'amount_owned': self.amount_owned,
            'buy_price': self.buy_price,
            'current_price': self.current_price,
            'purchase_date': self.purchase_date.isoformat() if self.purchase_date else None,
        }


def normalize_category(category: str) -> str:
    """Map accepted spellings ('Real Estate', 'stock', ...) to the canonical name.

    Unknown categories are returned unchanged so the calculator can skip them.
    """
    return CATEGORY_ALIASES.get(category.strip().lower(), category.strip())


def _number(item: dict, *keys: str, required: bool = True) -> Optional[float]:
    for key in keys:
        if item.get(key) is not None:
            value = item[key]
            break
    else:
        if required:
            raise InvalidInputError(f'Investment requires {keys[0]}')
        return None

    if isinstance(value, bool):
        raise InvalidInputError(f'{keys[0]} must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f'{keys[0]} must be a number')
    if not math.isfinite(number) or number < 0:
        raise InvalidInputError(f'{keys[0]} must be a non-negative number')
    return number


def parse_investment(item: dict) -> InvestmentRecord:
    """Build an InvestmentRecord from a JSON/CSV row.

    Accepts snake_case keys as well as the camelCase keys sent by JSON
    clients (amountOwned, currentPrice, buyPrice, purchaseDate).

    Raises:
        InvalidInputError: On missing/invalid fields.
    """
    if not isinstance(item, dict):
        raise InvalidInputError('Investment must be an object')

    name = item.get('name')
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError('Investment requires a name')
    category = item.get('category')
    if not isinstance(category, str) or not category.strip():
        raise InvalidInputError(f'Investment {name!r} requires a category')

    purchase_raw = item.get('purchase_date', item.get('purchaseDate'))
    purchase_date = parse_datetime(purchase_raw) if purchase_raw not in (None, '') else None

    return InvestmentRecord(
        name=name.strip(),
        category=normalize_category(category),
        amount_owned=_number(item, 'amount_owned', 'amountOwned'),
        current_price=_number(item, 'current_price', 'currentPrice'),
        buy_price=_number(item, 'buy_price', 'buyPrice', required=False),
        purchase_date=purchase_date,
    )


def parse_investments(items: Iterable[dict]) -> list[InvestmentRecord]:
    return [parse_investment(item) for item in items]


# ============================================================
# Store
# ============================================================

def get_portfolio(db, portfolio_id: str) -> list[InvestmentRecord]:
    """Load a portfolio's investments in insertion order."""
    rows = db.execute(
        '''
        SELECT name, category, amount_owned, buy_price, current_price, purchase_date
        FROM investments
        WHERE portfolio_id = ?
        ORDER BY id
        ''',
        (portfolio_id,)
    ).fetchall()
    return [parse_investment(dict(row)) for row in rows]


def add_investment(db, portfolio_id: str, record: InvestmentRecord) -> None:
    db.execute(
        '''
        INSERT INTO investments (portfolio_id, name, category, amount_owned, buy_price, current_price, purchase_date)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ''',
        (
            portfolio_id,
            record.name,
            record.category,
            record.amount_owned,
            record.buy_price,
            record.current_price,
            record.purchase_date.isoformat() if record.purchase_date else None,
        )
    )


def list_portfolios(db) -> list[dict]:
    rows = db.execute(
        '''
        SELECT portfolio_id, COUNT(*) AS investments
        FROM investments
        GROUP BY portfolio_id
        ORDER BY portfolio_id
        '''
    ).fetchall()
    return [{'portfolio_id': row['portfolio_id'], 'investments': row['investments']} for row in rows]
