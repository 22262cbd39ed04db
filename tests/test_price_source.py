"""
tests/test_price_source.py
--------------------------
Unit tests for YahooPriceSource.

yfinance is patched at module level so no network access occurs.
"""

import unittest
from unittest.mock import MagicMock, patch

import numpy as np
import pandas as pd

from etfplan.enums import ErrorKind
from etfplan.errors import LookupNotFoundError, NetworkFailureError
from etfplan.models import EtfInfo
from etfplan.price_source import YahooPriceSource


def _history(*closes) -> pd.DataFrame:
    dates = pd.date_range("2024-05-01", periods=len(closes), freq="B")
    return pd.DataFrame({"Open": closes, "Close": closes}, index=dates)


def _ticker_returning(frame):
    ticker = MagicMock()
    ticker.history.return_value = frame
    return ticker


# ---------------------------------------------------------------------------
# get_price
# ---------------------------------------------------------------------------

@patch("etfplan.price_source.yf")
class TestGetPrice(unittest.TestCase):

    def test_latest_close(self, mock_yf):
        mock_yf.Ticker.return_value = _ticker_returning(_history(101.0, 102.5))
        self.assertEqual(YahooPriceSource().get_price("IWDA.L"), 102.5)
        mock_yf.Ticker.assert_called_once_with("IWDA.L")
        mock_yf.Ticker.return_value.history.assert_called_once_with(period="1d")

    def test_trailing_nan_is_skipped(self, mock_yf):
        mock_yf.Ticker.return_value = _ticker_returning(_history(99.0, np.nan))
        self.assertEqual(YahooPriceSource().get_price("X"), 99.0)

    def test_empty_history_is_not_found(self, mock_yf):
        mock_yf.Ticker.return_value = _ticker_returning(pd.DataFrame())
        with self.assertRaises(LookupNotFoundError) as ctx:
            YahooPriceSource().get_price("NOPE")
        self.assertEqual(ctx.exception.subject, "NOPE")

    def test_zero_close_is_not_found(self, mock_yf):
        mock_yf.Ticker.return_value = _ticker_returning(_history(0.0))
        with self.assertRaises(LookupNotFoundError):
            YahooPriceSource().get_price("X")

    def test_provider_exception_is_network_failure(self, mock_yf):
        mock_yf.Ticker.return_value.history.side_effect = ConnectionError("offline")
        with self.assertRaises(NetworkFailureError) as ctx:
            YahooPriceSource().get_price("X")
        self.assertEqual(ctx.exception.kind, ErrorKind.NETWORK_FAILURE)
        self.assertIsInstance(ctx.exception.__cause__, ConnectionError)


# ---------------------------------------------------------------------------
# get_prices
# ---------------------------------------------------------------------------

class TestGetPrices(unittest.TestCase):

    def test_preserves_order(self):
        source = YahooPriceSource(max_workers=4)
        quotes = {"A": 1.0, "B": 2.0, "C": 3.0, "D": 4.0}
        with patch.object(source, "get_price", side_effect=quotes.__getitem__):
            self.assertEqual(source.get_prices(["C", "A", "D", "B"]), [3.0, 1.0, 4.0, 2.0])

    def test_empty(self):
        self.assertEqual(YahooPriceSource().get_prices([]), [])

    def test_any_failure_aborts(self):
        source = YahooPriceSource()

        def fake(ticker):
            if ticker == "BAD":
                raise NetworkFailureError("Price request failed", ticker)
            return 1.0

        with patch.object(source, "get_price", side_effect=fake):
            with self.assertRaises(NetworkFailureError):
                source.get_prices(["A", "BAD", "C"])


# ---------------------------------------------------------------------------
# search_by_isin
# ---------------------------------------------------------------------------

@patch("etfplan.price_source.yf")
class TestSearchByIsin(unittest.TestCase):

    def test_maps_quotes(self, mock_yf):
        mock_yf.Search.return_value.quotes = [
            {"symbol": "IUSE.L", "longname": "iShares S&P 500 EUR Hedged UCITS ETF (Acc)"},
            {"symbol": "IUSE.AS", "shortname": "ISHARES S&P500 EUR-H"},
            {"longname": "no symbol, dropped"},
        ]
        hits = YahooPriceSource().search_by_isin("IE00B3ZW0K18")
        self.assertEqual(hits, [
            EtfInfo("IUSE.L", "iShares S&P 500 EUR Hedged UCITS ETF (Acc)", "IE00B3ZW0K18"),
            EtfInfo("IUSE.AS", "ISHARES S&P500 EUR-H", "IE00B3ZW0K18"),
        ])
        args, kwargs = mock_yf.Search.call_args
        self.assertEqual(args, ("IE00B3ZW0K18",))
        self.assertEqual(kwargs["news_count"], 0)

    def test_no_quotes(self, mock_yf):
        mock_yf.Search.return_value.quotes = []
        self.assertEqual(YahooPriceSource().search_by_isin("XX"), [])

    def test_provider_exception_is_network_failure(self, mock_yf):
        mock_yf.Search.side_effect = TimeoutError("slow")
        with self.assertRaises(NetworkFailureError):
            YahooPriceSource().search_by_isin("XX")


if __name__ == "__main__":
    unittest.main()
