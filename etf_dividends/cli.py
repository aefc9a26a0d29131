"""Command‑line interface for etf_dividends.

Provides sub‑commands to scrape a single ticker's dividend history, run a
batch over a manifest of tickers (or one of the built-in presets), and query
the Finnhub dividend calendar.
"""

import json
import logging
import sys

import click
import pandas as pd
from dotenv import load_dotenv
from tabulate import tabulate
from tqdm import tqdm

from . import fetch
from .models import DividendError
from .service import DividendHistoryService

__version__ = "1.0.0"

BATCH_PRESETS = {
    "yieldmax-other": (
        "data/yieldMax_Weekly_Dividend_ETFs-Other.csv",
        "data/yieldmax/other",
    ),
    "yieldmax-single-stock": (
        "data/yieldMax_Weekly_Dividend_ETFs-Single_Stock_Option_Income.csv",
        "data/yieldmax/single_stock_option",
    ),
    "yieldmax-short-single-stock": (
        "data/yieldMax_Weekly_Dividend_ETFs-Short_Single_Stock_Option_Income.csv",
        "data/yieldmax/short_single_stock_option",
    ),
}


def _fail(error: DividendError):
    click.echo(f"Error: {error.message}", err=True)
    sys.exit(1 if error.kind.http_status < 500 else 2)


@click.group()
@click.version_option(version=__version__, prog_name="etf-dividends")
@click.option("--verbose", "-v", is_flag=True, help="Enable informational logging.")
@click.pass_context
def main(ctx, verbose):
    """ETF dividend history scraper (stockanalysis.com)."""
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if ctx.obj is None:
        ctx.obj = DividendHistoryService()


@main.command()
@click.argument("ticker")
@click.option("--output-dir", default=None, help="Directory for the ticker CSV (default: data).")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
@click.pass_obj
def history(service, ticker, output_dir, as_json):
    """Scrape, merge and save the dividend history for TICKER."""
    try:
        records = service.get_dividend_history(ticker, output_dir)
    except DividendError as e:
        _fail(e)

    rows = [r.to_dict() for r in records]
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    df = pd.DataFrame(rows, columns=["exDividendDate", "cashAmount", "recordDate", "payDate"])
    click.echo(f"--- {ticker.upper()} Dividend History ({len(df)} payments) ---")
    click.echo(tabulate(df, headers=["Ex‑Date", "Amount", "Record Date", "Pay Date"],
                        tablefmt="simple", showindex=False))


def _run_batch(service, manifest, output_dir, as_json):
    try:
        outcomes = service.process_tickers(
            manifest, output_dir, progress=lambda t: tqdm(t, desc="Scraping tickers"))
    except DividendError as e:
        _fail(e)

    rows = [o.to_dict() for o in outcomes]
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    df = pd.DataFrame(rows, columns=["ticker", "success", "error"]).fillna("")
    click.echo(tabulate(df, headers=["Ticker", "OK", "Error"], tablefmt="simple", showindex=False))
    failed = sum(1 for o in outcomes if not o.success)
    click.echo(f"\n{len(df) - failed} succeeded, {failed} failed.")


@main.command()
@click.argument("manifest", type=click.Path())
@click.argument("output_dir", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
@click.pass_obj
def batch(service, manifest, output_dir, as_json):
    """Scrape every ticker listed in the first column of MANIFEST."""
    _run_batch(service, manifest, output_dir, as_json)


@main.command()
@click.argument("name", type=click.Choice(sorted(BATCH_PRESETS)))
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
@click.pass_obj
def preset(service, name, as_json):
    """Run one of the built-in YieldMax batch manifests."""
    manifest, output_dir = BATCH_PRESETS[name]
    _run_batch(service, manifest, output_dir, as_json)


@main.command()
@click.argument("ticker")
@click.option("--from", "from_date", default=None, help="Start date YYYY-MM-DD (default: five years ago).")
@click.option("--to", "to_date", default=None, help="End date YYYY-MM-DD (default: today).")
def calendar(ticker, from_date, to_date):
    """Show Finnhub's dividend calendar for TICKER (needs FINNHUB_API_KEY)."""
    try:
        data = fetch.fetch_calendar_dividends(ticker, from_date, to_date)
    except DividendError as e:
        _fail(e)
    click.echo(json.dumps(data, indent=2))


if __name__ == "__main__":
    main()
