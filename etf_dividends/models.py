"""Data types shared across etf_dividends.

* DividendRecord – one distribution event as scraped from stockanalysis.com.
* BatchOutcome – result of running the pipeline for one manifest ticker.
* ErrorKind / DividendError – the closed set of failures the pipeline raises.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

CSV_HEADER = ("Ex-Dividend Date", "Cash Amount", "Record Date", "Pay Date")


@dataclass(frozen=True)
class DividendRecord:
    """A single dividend distribution.

    Dates are ``YYYY-MM-DD`` once normalised, or the text exactly as it was
    scraped when it could not be parsed.  ``cash_amount`` is kept verbatim
    (currency symbol and precision included).
    """

    ex_dividend_date: str
    cash_amount: str
    record_date: str = ""
    pay_date: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "exDividendDate": self.ex_dividend_date,
            "cashAmount": self.cash_amount,
            "recordDate": self.record_date,
            "payDate": self.pay_date,
        }

    def as_row(self):
        return (self.ex_dividend_date, self.cash_amount, self.record_date, self.pay_date)


@dataclass(frozen=True)
class BatchOutcome:
    ticker: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"ticker": self.ticker, "success": self.success}
        if self.error is not None:
            result["error"] = self.error
        return result


class ErrorKind(Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    UPSTREAM_ERROR = "upstream_error"
    EXTRACTION_FAILED = "extraction_failed"

    @property
    def http_status(self) -> int:
        """HTTP status class an outer layer should answer with."""
        if self in (ErrorKind.INVALID_INPUT, ErrorKind.NOT_FOUND):
            return 400
        return 500


class DividendError(Exception):
    """Raised by the pipeline; ``kind`` tells the caller what went wrong."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"DividendError({self.kind.name}, {self.message!r})"
