"""Currency and unit conversion for gold prices."""
from decimal import Decimal, ROUND_HALF_UP

from quroosh.constants import GRAMS_PER_TROY_OUNCE


def round_half_up(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals, halves away from zero (2.345 -> 2.35).

    Goes through the decimal repr of the float so that values like 2.675 are
    rounded as written rather than by their binary approximation.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def ounce_to_gram(price_per_ounce: float) -> float:
    """Convert a price per troy ounce to a price per gram."""
    return price_per_ounce / GRAMS_PER_TROY_OUNCE


def convert_usd_to_local(amount_usd: float, usd_to_local_rate: float) -> float:
    """Convert a USD amount at a fixed rate (1 USD = rate local units)."""
    return amount_usd * usd_to_local_rate


def usd_per_gram_to_local(price_per_gram_usd: float, usd_to_local_rate: float) -> float:
    """Convert USD/gram to reporting currency/gram, rounded to 2 dp."""
    return round_half_up(convert_usd_to_local(price_per_gram_usd, usd_to_local_rate))
