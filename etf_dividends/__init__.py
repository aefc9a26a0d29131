"""Top level package for etf_dividends.

The package scrapes ETF dividend history from stockanalysis.com, merges it
with the history previously saved as one CSV file per ticker and keeps the
result in a short-lived in-process cache.  Tickers can be processed one at a
time or in batches read from a manifest CSV.
"""

__all__ = ["cache", "cli", "fetch", "models", "service", "store", "utils"]
