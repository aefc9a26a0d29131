"""Utility functions for dividend records.

Provides:
* parse_date – parse scraped date text, reporting whether it was understood.
* normalize_date – ``"Oct 31, 2025"`` -> ``"2025-10-31"``, passthrough otherwise.
* sort_dividends – newest ex‑dividend date first.
* merge_dividends – append-only merge of freshly scraped rows into the
  persisted history.
"""

from datetime import datetime
from typing import Iterable, List, NamedTuple, Sequence

from dateutil import parser as date_parser

from .models import DividendRecord

# Text is parsed against two unrelated defaults; any year, month or day the
# text leaves out shows up as a difference between the two results.
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


class DateResult(NamedTuple):
    value: str
    parsed: bool


def parse_date(text: str) -> DateResult:
    """Parse free-form date text into ``YYYY-MM-DD``.

    Empty or whitespace-only input, anything ``dateutil`` cannot read, and
    partial dates missing a year, month or day (``"May"``, ``"10"``,
    ``"Oct 31"``) are returned unchanged with ``parsed=False``.
    """
    if not text or not text.strip():
        return DateResult(text, False)
    try:
        first, second = (date_parser.parse(text.strip(), default=d).date()
                         for d in _PARSE_DEFAULTS)
    except (ValueError, OverflowError, TypeError):
        return DateResult(text, False)
    if first != second:
        return DateResult(text, False)
    return DateResult(first.isoformat(), True)


def normalize_date(text: str) -> str:
    """Return ``text`` as an ISO date, or unchanged when it cannot be parsed."""
    return parse_date(text).value


def normalize_record(ex_dividend_date: str, cash_amount: str,
                     record_date: str, pay_date: str) -> DividendRecord:
    """Build a record from scraped cell text, normalising the three dates."""
    return DividendRecord(
        ex_dividend_date=normalize_date(ex_dividend_date),
        cash_amount=cash_amount,
        record_date=normalize_date(record_date),
        pay_date=normalize_date(pay_date),
    )


def sort_dividends(records: Iterable[DividendRecord]) -> List[DividendRecord]:
    """Sort by ex‑dividend date, newest first.

    The comparison is plain string ordering, which matches calendar order
    only for ``YYYY-MM-DD`` values.  Dates that failed normalisation sort
    wherever their raw text lands.
    """
    return sorted(records, key=lambda r: r.ex_dividend_date, reverse=True)


def merge_dividends(existing: Sequence[DividendRecord],
                    harvested: Iterable[DividendRecord]) -> List[DividendRecord]:
    """Merge freshly scraped records into the persisted history.

    ``existing`` must already be sorted newest first.  Its first ex‑date is
    the cutoff: only harvested records strictly newer than it are added, the
    persisted rows are kept as they are.  With no existing history the
    harvested records are simply sorted.
    """
    if not existing:
        return sort_dividends(harvested)

    cutoff = existing[0].ex_dividend_date
    newer = [r for r in harvested if r.ex_dividend_date > cutoff]
    return sort_dividends(newer + list(existing))
