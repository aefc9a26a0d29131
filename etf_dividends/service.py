"""Scrape, merge and persist dividend histories, one ticker or a manifest of them."""

import logging
import threading
import weakref
from pathlib import Path
from typing import Callable, List, Optional

from . import fetch
from . import store
from .cache import TimedCache
from .models import BatchOutcome, DividendError, DividendRecord, ErrorKind
from .utils import merge_dividends

logger = logging.getLogger(__name__)

HISTORY_TTL = 60 * 60


class DividendHistoryService:
    """Single-ticker pipeline plus the batch loop over a manifest.

    ``harvester`` and ``cache`` are injectable so tests can run without the
    network or the wall clock.
    """

    def __init__(self, cache: Optional[TimedCache] = None,
                 harvester: Callable[[str], List[DividendRecord]] = fetch.harvest,
                 default_output_dir: store.PathLike = store.DEFAULT_OUTPUT_DIR):
        self.cache = cache if cache is not None else TimedCache(HISTORY_TTL)
        self.harvester = harvester
        self.default_output_dir = Path(default_output_dir)
        # Weak values: a ticker's lock lives only while some request holds it.
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def get_dividend_history(self, ticker: str,
                             output_dir: Optional[store.PathLike] = None) -> List[DividendRecord]:
        """Return the merged history for ``ticker``, newest first.

        Served from the cache while fresh.  Otherwise the page is scraped,
        merged with the file in ``output_dir`` (or the default directory) and
        written back.  A failed write is logged and the result still returned.
        """
        if not ticker or not ticker.strip():
            raise DividendError(ErrorKind.INVALID_INPUT, "ticker is required")
        ticker = ticker.strip()
        key = ticker.upper()
        directory = Path(output_dir) if output_dir is not None else self.default_output_dir

        with self._lock_for(key):
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                if output_dir is not None:
                    store.save_history(key, cached, directory)
                return list(cached)

            harvested = self.harvester(ticker)
            existing = store.read_history(key, directory)
            final = merge_dividends(existing, harvested)
            store.save_history(key, final, directory)
            self.cache.put(key, tuple(final))
            return final

    def process_tickers(self, manifest_path: store.PathLike,
                        output_dir: store.PathLike,
                        progress: Optional[Callable] = None) -> List[BatchOutcome]:
        """Run the pipeline for every ticker in the manifest, in order.

        A failing ticker is recorded and the loop moves on.  Only an
        unreadable or empty manifest raises.  ``progress`` may wrap the ticker
        list (e.g. ``tqdm``).
        """
        tickers = store.read_tickers(manifest_path)
        iterable = progress(tickers) if progress else tickers

        results = []
        for ticker in iterable:
            try:
                self.get_dividend_history(ticker, output_dir)
                results.append(BatchOutcome(ticker, True))
            except Exception as e:
                message = str(e) or "Unknown error"
                logger.error("Failed to process ticker %s: %s", ticker, message)
                results.append(BatchOutcome(ticker, False, message))
        return results
