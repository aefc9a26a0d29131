"""Flat-file persistence for dividend histories.

Each ticker's history lives in ``{output_dir}/{ticker}_dividends.csv`` with a
four column header.  Nothing is kept in memory between calls; a missing or
unreadable file is treated as "no history yet".
"""

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Union

from .models import CSV_HEADER, DividendError, DividendRecord, ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("data")

PathLike = Union[str, Path]


def _escape(value: str) -> str:
    if "," in value or '"' in value or "\n" in value or "\r" in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_csv(records: Iterable[DividendRecord]) -> str:
    """Render records as CSV text in the order given, without a trailing newline."""
    lines = [",".join(CSV_HEADER)]
    for record in records:
        lines.append(",".join(_escape(v) for v in record.as_row()))
    return "\n".join(lines)


def decode_csv(text: str) -> List[DividendRecord]:
    """Parse CSV text written by :func:`encode_csv`.

    Blank rows are ignored and the first non-blank row is the header.  Values
    are stripped and rows with fewer than four columns are skipped.
    """
    records = []
    header_seen = False
    for row in csv.reader(io.StringIO(text, newline="")):
        values = [v.strip() for v in row]
        if not any(values):
            continue
        if not header_seen:
            header_seen = True
            continue
        if len(values) < 4:
            continue
        records.append(DividendRecord(*values[:4]))
    return records


def history_path(ticker: str, output_dir: PathLike = DEFAULT_OUTPUT_DIR) -> Path:
    return Path(output_dir) / f"{ticker.lower()}_dividends.csv"


def read_history(ticker: str, output_dir: PathLike = DEFAULT_OUTPUT_DIR) -> List[DividendRecord]:
    """Load the persisted history for ``ticker``; empty if there is none."""
    path = history_path(ticker, output_dir)
    if not path.exists():
        return []
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return decode_csv(f.read())
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.warning("Ignoring unreadable history file %s: %s", path, e)
        return []


def save_history(ticker: str, records: Iterable[DividendRecord],
                 output_dir: PathLike = DEFAULT_OUTPUT_DIR) -> bool:
    """Write the history for ``ticker``, creating ``output_dir`` if needed.

    Returns False when the write failed.  The failure is logged, not raised.
    """
    path = history_path(ticker, output_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(encode_csv(records))
    except OSError as e:
        logger.error("Failed to save CSV file for %s: %s", ticker, e)
        return False
    return True


def read_tickers(manifest_path: PathLike) -> List[str]:
    """Read the ticker list from the first column of a manifest CSV.

    Raises DividendError(INVALID_INPUT) when the file cannot be read or has
    no data rows.
    """
    try:
        text = Path(manifest_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DividendError(ErrorKind.INVALID_INPUT, f"Failed to read CSV file: {e}") from e

    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise DividendError(
            ErrorKind.INVALID_INPUT,
            "CSV file must have at least a header and one data row",
        )

    tickers = []
    for row in csv.reader(lines[1:]):
        if not row:
            continue
        ticker = row[0].strip()
        if ticker:
            tickers.append(ticker)
    return tickers
