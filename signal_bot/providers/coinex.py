"""CoinEx v1 market/kline. Rows are [ts_s, open, close, high, low, volume, amount, market]."""

from __future__ import annotations
from datetime import datetime, timezone
from typing import List

from signal_bot.core.errors import ProviderError
from signal_bot.core.types import Candle
from signal_bot.providers.base import HttpAdapter
from signal_bot.utils.timeframes import COINEX_INTERVALS, provider_interval

KLINE_URL = "https://api.coinex.com/v1/market/kline"


class CoinExAdapter(HttpAdapter):
    name = "coinex"

    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        params = {
            "market": symbol,
            "type": provider_interval(interval, COINEX_INTERVALS, self.name),
            "limit": count,
        }
        payload = self._get_json(KLINE_URL, params)
        if not isinstance(payload, dict):
            raise self._malformed("expected an object")
        if payload.get("code", 0) != 0:
            raise ProviderError(self.name, f"API error {payload.get('code')}: {payload.get('message', '')}")
        rows = payload.get("data")
        if not isinstance(rows, list):
            raise self._malformed("missing data array")
        try:
            candles = [
                Candle(
                    open_time=datetime.fromtimestamp(int(row[0]), tz=timezone.utc),
                    open=float(row[1]),
                    close=float(row[2]),
                    high=float(row[3]),
                    low=float(row[4]),
                    volume=float(row[5]),
                )
                for row in rows
            ]
        except (IndexError, TypeError, ValueError) as e:
            raise self._malformed(str(e)) from e
        candles.sort(key=lambda c: c.open_time)
        return candles[-count:]
