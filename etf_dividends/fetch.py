"""Data fetching utilities for etf_dividends.

Scrapes the dividend history table from stockanalysis.com and, separately,
proxies Finnhub's dividend calendar endpoint.
"""

import logging
import os
import re
from datetime import date
from typing import Any, List, Optional

import requests
from bs4 import BeautifulSoup
from dateutil.relativedelta import relativedelta

from .cache import TimedCache
from .models import DividendError, DividendRecord, ErrorKind
from .utils import normalize_record

logger = logging.getLogger(__name__)

STOCKANALYSIS_URL = "https://stockanalysis.com/etf/{ticker}/dividend/"
CALENDAR_URL = "https://finnhub.io/api/v1/calendar/dividends"

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
}

REQUEST_TIMEOUT = 15
CALENDAR_TIMEOUT = 10
CALENDAR_TTL = 10 * 60

TABLE_SELECTOR = 'div[class*="table-wrap"] table, .table-wrap table'
# "Oct 31, 2025" and "$0.1234" shaped cells, used when no table wrapper exists.
DATE_PATTERN = re.compile(r"[A-Za-z]{3}\s+\d{1,2},\s+\d{4}")
AMOUNT_PATTERN = re.compile(r"\$?\d+\.\d+")

_calendar_cache = TimedCache(CALENDAR_TTL)


def fetch_document(ticker: str) -> str:
    """Download the dividend page for ``ticker`` and return its HTML."""
    url = STOCKANALYSIS_URL.format(ticker=ticker.lower())
    try:
        response = requests.get(url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise DividendError(ErrorKind.UPSTREAM_ERROR, str(e) or "Failed to fetch dividend history from stockanalysis.com") from e

    if response.status_code == 404:
        raise DividendError(ErrorKind.NOT_FOUND, f'ETF ticker "{ticker}" not found on stockanalysis.com')
    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        raise DividendError(ErrorKind.UPSTREAM_ERROR, str(e)) from e
    return response.text


def _cell_texts(row) -> List[str]:
    return [cell.get_text().strip() for cell in row.find_all("td")]


def extract_dividends(html: str) -> List[DividendRecord]:
    """Pull dividend rows out of a stockanalysis.com page.

    Tables inside a ``table-wrap`` container are read first; a row is kept
    when it has at least four cells and non-empty ex‑date and amount.  If
    that finds nothing, every ``table tbody tr`` on the page is scanned and
    rows are kept only when the first two cells look like a date and an
    amount.
    """
    soup = BeautifulSoup(html, "html.parser")
    dividends = []

    for table in soup.select(TABLE_SELECTOR):
        for row in table.select("tbody tr"):
            cells = _cell_texts(row)
            if len(cells) >= 4 and cells[0] and cells[1]:
                dividends.append(normalize_record(*cells[:4]))

    if dividends:
        return dividends

    for row in soup.select("table tbody tr"):
        cells = _cell_texts(row)
        if len(cells) < 4:
            continue
        if DATE_PATTERN.search(cells[0]) and AMOUNT_PATTERN.search(cells[1]):
            dividends.append(normalize_record(*cells[:4]))
    if dividends:
        logger.info("No table-wrap container found, used fallback extraction (%d rows)", len(dividends))
    return dividends


def harvest(ticker: str) -> List[DividendRecord]:
    """Fetch and parse the full visible dividend history for ``ticker``."""
    logger.info("Fetching dividend history for %s", ticker)
    dividends = extract_dividends(fetch_document(ticker))
    if not dividends:
        raise DividendError(ErrorKind.EXTRACTION_FAILED, "Could not find dividend history table on the page")
    logger.info("Extracted %d dividend rows for %s", len(dividends), ticker)
    return dividends


def fetch_calendar_dividends(ticker: str, from_date: Optional[str] = None,
                             to_date: Optional[str] = None,
                             cache: Optional[TimedCache] = None,
                             today: Optional[date] = None) -> Any:
    """Return Finnhub's dividend calendar for ``ticker`` as decoded JSON.

    The range defaults to the last five years.  Responses are cached for
    ten minutes per ``ticker|from|to``.
    """
    if not ticker:
        raise DividendError(ErrorKind.INVALID_INPUT, "ticker is required")
    api_key = os.environ.get("FINNHUB_API_KEY")
    if not api_key:
        raise DividendError(ErrorKind.INVALID_INPUT, "FINNHUB_API_KEY env var is not set")

    today = today or date.today()
    to_date = to_date or today.isoformat()
    from_date = from_date or (today - relativedelta(years=5)).isoformat()

    if cache is None:
        cache = _calendar_cache
    key = f"{ticker}|{from_date}|{to_date}"
    cached = cache.get(key)
    if cached is not None:
        return cached

    params = {"token": api_key, "symbol": ticker, "from": from_date, "to": to_date}
    try:
        response = requests.get(CALENDAR_URL, params=params, timeout=CALENDAR_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise DividendError(ErrorKind.UPSTREAM_ERROR, str(e) or "Failed to fetch dividends") from e

    cache.put(key, data)
    return data
