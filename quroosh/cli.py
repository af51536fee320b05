"""Flask CLI commands for the investment store and gold pricing."""
import csv
import json
import click
from flask.cli import with_appcontext

from quroosh import get_gold_price_resolver
from quroosh.db import get_db, init_db, get_db_path
from quroosh.errors import InvalidInputError
from quroosh.services.investments import add_investment, get_portfolio, list_portfolios, parse_investment
from quroosh.services.zakat import calculate_zakat


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Initialize the SQLite database with schema."""
    init_db()
    click.echo(f'Initialized database at {get_db_path()}')


@click.command('import-investments-csv')
@click.argument('csv_path', type=click.Path(exists=True))
@with_appcontext
def import_investments_csv_command(csv_path):
    """Import investments from CSV file.

    CSV format: portfolio_id,name,category,amount_owned,buy_price,current_price,purchase_date
    Example: user-1,Saudi Aramco 2222.SR,Stock,100,28.5,27.9,2024-05-01
    """
    try:
        count = import_investments_csv(csv_path)
    except InvalidInputError as e:
        raise click.ClickException(str(e))
    click.echo(f'Imported {count} investment records from {csv_path}')


def import_investments_csv(csv_path: str) -> int:
    """Import investments from CSV file. Returns count of records imported.

    The whole file is rejected if any row is invalid.
    """
    db = get_db()
    count = 0

    with open(csv_path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        rows = []
        for line_no, row in enumerate(reader, start=2):
            portfolio_id = (row.get('portfolio_id') or '').strip()
            if not portfolio_id:
                raise InvalidInputError(f'Line {line_no}: portfolio_id is required')
            cleaned = {key: value for key, value in row.items() if value not in (None, '')}
            try:
                rows.append((portfolio_id, parse_investment(cleaned)))
            except InvalidInputError as e:
                raise InvalidInputError(f'Line {line_no}: {e}')

    for portfolio_id, record in rows:
        add_investment(db, portfolio_id, record)
        count += 1

    db.commit()
    return count


@click.command('list-portfolios')
@with_appcontext
def list_portfolios_command():
    """List portfolios in the investment store."""
    portfolios = list_portfolios(get_db())
    if not portfolios:
        click.echo('No portfolios found')
        return
    for portfolio in portfolios:
        click.echo(f"{portfolio['portfolio_id']}: {portfolio['investments']} investments")


@click.command('gold-price')
@with_appcontext
def gold_price_command():
    """Print the current gold price per gram."""
    quote = get_gold_price_resolver().get_current_price()
    click.echo(f'{quote.price_per_gram:.2f} {quote.currency}/g ({quote.source}, {quote.provider})')


@click.command('historical-gold-price')
@click.argument('date_str')
@with_appcontext
def historical_gold_price_command(date_str):
    """Print the gold price per gram on DATE_STR (YYYY-MM-DD)."""
    resolver = get_gold_price_resolver()
    try:
        price = resolver.get_historical_price(date_str)
    except InvalidInputError as e:
        raise click.BadParameter(str(e), param_hint='DATE_STR')
    click.echo(f'{price:.2f} {resolver.currency}/g on {date_str}')


@click.command('calculate-zakat')
@click.argument('portfolio_id')
@with_appcontext
def calculate_zakat_command(portfolio_id):
    """Calculate zakat for a stored portfolio and print the result as JSON."""
    investments = get_portfolio(get_db(), portfolio_id)
    if not investments:
        raise click.ClickException(f'No investments found for portfolio {portfolio_id}')

    quote = get_gold_price_resolver().get_current_price()
    result = calculate_zakat(investments, quote.price_per_gram)
    click.echo(json.dumps(result, indent=2))


def register_cli(app):
    """Register CLI commands with the Flask app."""
    app.cli.add_command(init_db_command)
    app.cli.add_command(import_investments_csv_command)
    app.cli.add_command(list_portfolios_command)
    app.cli.add_command(gold_price_command)
    app.cli.add_command(historical_gold_price_command)
    app.cli.add_command(calculate_zakat_command)
