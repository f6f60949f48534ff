"""
CoinGecko /coins/{id}/ohlc. Rows are [ts_ms, open, high, low, close] without volume.
Candle size follows `days` (1-2: 30m, 3-30: 4h, 31+: 4d), so the interval argument is ignored.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional

import requests

from signal_bot.core.types import Candle
from signal_bot.providers.base import HttpAdapter

OHLC_URL = "https://api.coingecko.com/api/v3/coins/{coin_id}/ohlc"


class CoinGeckoAdapter(HttpAdapter):
    name = "coingecko"

    def __init__(
        self,
        vs_currency: str = "usd",
        days: int = 1,
        api_key: str = "",
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        super().__init__(session, timeout)
        self.vs_currency = vs_currency
        self.days = days
        self._api_key = api_key

    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        headers = {"x-cg-demo-api-key": self._api_key} if self._api_key else None
        payload = self._get_json(
            OHLC_URL.format(coin_id=symbol.lower()),
            {"vs_currency": self.vs_currency, "days": self.days},
            headers=headers,
        )
        if not isinstance(payload, list):
            error = payload.get("error") if isinstance(payload, dict) else None
            raise self._malformed(str(error) if error else "expected a list of rows")
        try:
            candles = [
                Candle(
                    open_time=datetime.fromtimestamp(int(row[0]) / 1000, tz=timezone.utc),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                )
                for row in payload
            ]
        except (IndexError, TypeError, ValueError) as e:
            raise self._malformed(str(e)) from e
        candles.sort(key=lambda c: c.open_time)
        return candles[-count:]
