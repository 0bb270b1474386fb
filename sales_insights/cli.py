# sales_insights/cli.py
import json
import logging

import anyio
import click
from dotenv import load_dotenv

from sales_insights.config import load_config
from sales_insights.core.filters import ValidationError
from sales_insights.database import TransactionStore
from sales_insights.reports import (
    category_breakdown,
    combined_report,
    list_transactions,
    price_range_histogram,
    sales_statistics,
)
from sales_insights.seed import fetch_seed, initialize_store, load_seed_file
from sales_insights.web import serve


def _echo_json(payload):
    click.echo(json.dumps(payload, indent=2))


def _report(ctx, compute):
    with TransactionStore(ctx.obj['db_path']) as store:
        try:
            payload = compute(store)
        except ValidationError as e:
            raise click.UsageError(str(e), ctx=ctx)
    _echo_json(payload)


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with SALES_INSIGHTS_* overrides'
)
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite database file (overrides config)'
)
@click.pass_context
def main(ctx, config_path, env_file, db_path):
    """
    Report on product sales transactions: paginated search, monthly
    statistics, price-range histogram, category breakdown and a combined
    month view.
    """
    if env_file:
        load_dotenv(env_file)

    cfg = load_config(config_path)
    logging.basicConfig(level=str(cfg['log_level']).upper())
    cfg['db_path'] = db_path or cfg['db_path']
    ctx.obj = cfg


@main.command()
@click.option('--url', default=None, help='Seed feed URL (overrides config)')
@click.option(
    '--file', 'seed_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Load the seed feed from a local JSON file instead of the URL'
)
@click.pass_context
def init(ctx, url, seed_file):
    """Replace the database contents with the seed feed."""
    if seed_file:
        entries = load_seed_file(seed_file)
    else:
        entries = fetch_seed(url or ctx.obj['seed_url'])
    with TransactionStore(ctx.obj['db_path']) as store:
        stored = initialize_store(store, entries)
    click.echo(f"Stored {stored} transaction(s) in {ctx.obj['db_path']}.")


@main.command()
@click.option('--page', default=1, help='1-based page number')
@click.option('--per-page', 'per_page', default=None, help='Records per page')
@click.option('--search', default='', help='Case-insensitive text to match title, description or price')
@click.option('--month', default=None, help='Month name or number (any year)')
@click.pass_context
def transactions(ctx, page, per_page, search, month):
    """List one page of matching transactions."""
    _report(ctx, lambda store: list_transactions(
        store, page, per_page or ctx.obj['per_page'], search, month
    ))


@main.command()
@click.option('--month', default=None, help='Month name or number (any year)')
@click.pass_context
def statistics(ctx, month):
    """Total sales and sold / not sold item counts for a month."""
    _report(ctx, lambda store: sales_statistics(store, month))


@main.command('bar-chart')
@click.option('--month', default=None, help='Month name or number (any year)')
@click.pass_context
def bar_chart(ctx, month):
    """Item counts per price range for a month."""
    _report(ctx, lambda store: price_range_histogram(store, month))


@main.command('pie-chart')
@click.option('--month', default=None, help='Month name or number (any year)')
@click.pass_context
def pie_chart(ctx, month):
    """Item counts per category for a month."""
    _report(ctx, lambda store: category_breakdown(store, month))


@main.command()
@click.option('--month', default=None, help='Month name or number (any year)')
@click.pass_context
def combined(ctx, month):
    """Every report for a month in one payload."""
    _report(ctx, lambda store: anyio.run(combined_report, store, month))


@main.command('serve')
@click.option('--host', default=None, help='Host to bind (overrides config)')
@click.option('--port', default=None, type=int, help='Port to bind (overrides config)')
@click.pass_context
def serve_command(ctx, host, port):
    """Serve the JSON API."""
    cfg = ctx.obj
    store = TransactionStore(cfg['db_path']).open()
    serve(
        store,
        host or cfg['host'],
        port or int(cfg['port']),
        cfg['seed_url'],
        int(cfg['per_page']),
    )
