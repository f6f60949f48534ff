"""Alpha Vantage TIME_SERIES_INTRADAY. Candles are keyed by timestamp under "Time Series (<interval>)"."""

from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional

import requests

from signal_bot.core.errors import ProviderError
from signal_bot.core.types import Candle
from signal_bot.providers.base import HttpAdapter
from signal_bot.utils.timeframes import ALPHA_VANTAGE_INTERVALS, provider_interval

QUERY_URL = "https://www.alphavantage.co/query"
ERROR_KEYS = ("Error Message", "Note", "Information")


class AlphaVantageAdapter(HttpAdapter):
    name = "alphavantage"

    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        super().__init__(session, timeout)
        self._api_key = api_key

    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        av_interval = provider_interval(interval, ALPHA_VANTAGE_INTERVALS, self.name)
        params = {
            "function": "TIME_SERIES_INTRADAY",
            "symbol": symbol,
            "interval": av_interval,
            "outputsize": "compact" if count <= 100 else "full",
            "apikey": self._api_key,
        }
        payload = self._get_json(QUERY_URL, params)
        if not isinstance(payload, dict):
            raise self._malformed("expected an object")
        for key in ERROR_KEYS:
            if key in payload:
                # "Note"/"Information" are rate-limit and plan messages
                raise ProviderError(self.name, str(payload[key])[:200])
        series = payload.get(f"Time Series ({av_interval})")
        if not isinstance(series, dict):
            raise self._malformed(f"missing 'Time Series ({av_interval})'")
        try:
            candles = [
                Candle(
                    open_time=datetime.strptime(ts, "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc),
                    open=float(bar["1. open"]),
                    high=float(bar["2. high"]),
                    low=float(bar["3. low"]),
                    close=float(bar["4. close"]),
                    volume=float(bar.get("5. volume", 0.0)),
                )
                for ts, bar in series.items()
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise self._malformed(str(e)) from e
        candles.sort(key=lambda c: c.open_time)
        return candles[-count:]
