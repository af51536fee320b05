"""SQLite database connection management for the investment store."""
import os
import sqlite3
from flask import current_app, g


def get_db_path() -> str:
    """Get the path to the SQLite database file."""
    data_dir = current_app.config.get('DATA_DIR', os.path.join(os.path.dirname(__file__), '..', 'data'))
    os.makedirs(data_dir, exist_ok=True)
    return os.path.join(data_dir, 'investments.sqlite')


def get_db() -> sqlite3.Connection:
    """Get a database connection, creating one if needed for this request."""
    if 'db' not in g:
        g.db = sqlite3.connect(get_db_path())
        g.db.row_factory = sqlite3.Row
    return g.db


def close_db(e=None):
    """Close the database connection at end of request."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db():
    """Initialize the database with schema."""
    db = get_db()
    db.executescript(get_schema())
    db.commit()


def get_schema() -> str:
    """Return the database schema SQL."""
    return '''
-- Investments grouped by portfolio; id preserves insertion order
-- category: RealEstate, Stock, Crypto, Gold, Other
-- purchase_date: ISO-8601 UTC, NULL when unknown
CREATE TABLE IF NOT EXISTS investments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    portfolio_id TEXT NOT NULL,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    amount_owned REAL NOT NULL CHECK (amount_owned >= 0),
    buy_price REAL CHECK (buy_price IS NULL OR buy_price >= 0),
    current_price REAL NOT NULL CHECK (current_price >= 0),
    purchase_date TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_investments_portfolio ON investments(portfolio_id);
'''


def init_app(app):
    """Register database functions with Flask app and ensure database exists."""
    app.teardown_appcontext(close_db)

    # CREATE IF NOT EXISTS makes this idempotent
    with app.app_context():
        init_db()
