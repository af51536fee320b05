"""Shared constants for zakat calculation and gold pricing."""

# Nisab threshold (value of 85 grams of 24k gold)
NISAB_GOLD_GRAMS = 85

# Zakat rate (2.5%)
ZAKAT_RATE = 0.025

# Investment categories as stored by the investment store
CATEGORY_REAL_ESTATE = 'RealEstate'
CATEGORY_STOCK = 'Stock'
CATEGORY_CRYPTO = 'Crypto'
CATEGORY_GOLD = 'Gold'
CATEGORY_OTHER = 'Other'

# Spellings accepted on input, mapped to the canonical category
CATEGORY_ALIASES = {
    'realestate': CATEGORY_REAL_ESTATE,
    'real estate': CATEGORY_REAL_ESTATE,
    'real_estate': CATEGORY_REAL_ESTATE,
    'stock': CATEGORY_STOCK,
    'crypto': CATEGORY_CRYPTO,
    'gold': CATEGORY_GOLD,
    'other': CATEGORY_OTHER,
}

# Name fragments that mark a stock as listed on the Saudi market (Tadawul)
DOMESTIC_STOCK_MARKERS = ('tadawul', 'saudi', '.sr', 'tasi')

# Holding period separating speculators from long-term investors
INVESTOR_HOLDING_DAYS = 365

# ============================================================
# Gold pricing
# ============================================================

GRAMS_PER_TROY_OUNCE = 31.1034768

# 1 USD = 3.75 SAR (pegged)
DEFAULT_USD_TO_LOCAL_RATE = 3.75
DEFAULT_REPORTING_CURRENCY = 'SAR'

# Cached quotes are served without an upstream call for this long
DEFAULT_GOLD_CACHE_SECONDS = 600

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 6

# Random fallback band, USD per troy ounce
FALLBACK_USD_PER_OUNCE_MIN = 2600.0
FALLBACK_USD_PER_OUNCE_MAX = 2650.0

# Historical back-estimation
ANNUAL_GOLD_APPRECIATION_RATE = 0.08
DAYS_PER_YEAR = 365.25
HISTORICAL_WINDOW_DAYS = 3

# Quote provenance
SOURCE_LIVE = 'live'
SOURCE_CACHED = 'cached'
SOURCE_FALLBACK = 'fallback'
SOURCE_MANUAL = 'manual'
