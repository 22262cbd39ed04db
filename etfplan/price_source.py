"""
etfplan/price_source.py
-----------------------
Yahoo Finance adapter for current prices and ISIN → ticker search.

Prices are returned in the quote's major currency unit as floats; scaling
to the planner's integer unit happens in the pipeline.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

import yfinance as yf

from etfplan.config import (
    ISIN_SEARCH_MAX_RESULTS,
    PRICE_FETCH_WORKERS,
    PRICE_HISTORY_PERIOD,
)
from etfplan.errors import LookupNotFoundError, NetworkFailureError
from etfplan.models import EtfInfo

logger = logging.getLogger(__name__)


class YahooPriceSource:
    def __init__(
        self,
        history_period: str = PRICE_HISTORY_PERIOD,
        max_workers: int = PRICE_FETCH_WORKERS,
        max_search_results: int = ISIN_SEARCH_MAX_RESULTS,
    ) -> None:
        self.history_period = history_period
        self.max_workers = max_workers
        self.max_search_results = max_search_results

    def get_price(self, ticker: str) -> float:
        """Latest close for *ticker*."""
        try:
            history = yf.Ticker(ticker).history(period=self.history_period)
        except Exception as exc:
            logger.warning("Price request for %s failed: %s", ticker, exc)
            raise NetworkFailureError("Price request failed", ticker) from exc

        if history is None or history.empty or "Close" not in history.columns:
            raise LookupNotFoundError("No price history", ticker)

        closes = history["Close"].dropna()
        if closes.empty:
            raise LookupNotFoundError("No closing price", ticker)

        price = float(closes.iloc[-1])
        if not price > 0:
            raise LookupNotFoundError(f"Unusable closing price {price}", ticker)
        return price

    def get_prices(self, tickers: Sequence[str]) -> List[float]:
        """
        Fetch prices for all *tickers* concurrently, preserving order.

        All-or-nothing: the first failing lookup (in input order) is
        re-raised and no partial list is returned.
        """
        if not tickers:
            return []
        workers = max(1, min(self.max_workers, len(tickers)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.get_price, tickers))

    def search_by_isin(self, isin: str) -> List[EtfInfo]:
        """Every quote Yahoo returns for *isin*, possibly none."""
        try:
            quotes = yf.Search(
                isin,
                max_results=self.max_search_results,
                news_count=0,
            ).quotes
        except Exception as exc:
            logger.warning("ISIN search for %s failed: %s", isin, exc)
            raise NetworkFailureError("ISIN search failed", isin) from exc

        hits: List[EtfInfo] = []
        for quote in quotes or []:
            symbol = quote.get("symbol")
            if not symbol:
                continue
            name = quote.get("longname") or quote.get("shortname") or symbol
            hits.append(EtfInfo(ticker=str(symbol), name=str(name), isin=isin))
        return hits
