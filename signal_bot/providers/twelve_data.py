"""Twelve Data time_series. Values come newest first, datetimes as 'YYYY-MM-DD HH:MM:SS'."""

from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional

import requests

from signal_bot.core.errors import ProviderError
from signal_bot.core.types import Candle
from signal_bot.providers.base import HttpAdapter
from signal_bot.utils.timeframes import TWELVE_DATA_INTERVALS, provider_interval

TIME_SERIES_URL = "https://api.twelvedata.com/time_series"


def _parse_datetime(value: str) -> datetime:
    fmt = "%Y-%m-%d %H:%M:%S" if " " in value else "%Y-%m-%d"
    return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)


class TwelveDataAdapter(HttpAdapter):
    name = "twelvedata"

    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        super().__init__(session, timeout)
        self._api_key = api_key

    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        params = {
            "symbol": symbol,
            "interval": provider_interval(interval, TWELVE_DATA_INTERVALS, self.name),
            "outputsize": count,
            "timezone": "UTC",
            "apikey": self._api_key,
        }
        payload = self._get_json(TIME_SERIES_URL, params)
        if not isinstance(payload, dict):
            raise self._malformed("expected an object")
        if payload.get("status") == "error":
            raise ProviderError(self.name, f"API error {payload.get('code', '')}: {payload.get('message', '')}")
        values = payload.get("values")
        if not isinstance(values, list):
            raise self._malformed("missing values array")
        try:
            candles = [
                Candle(
                    open_time=_parse_datetime(v["datetime"]),
                    open=float(v["open"]),
                    high=float(v["high"]),
                    low=float(v["low"]),
                    close=float(v["close"]),
                    volume=float(v.get("volume") or 0.0),  # forex pairs carry no volume
                )
                for v in values
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise self._malformed(str(e)) from e
        candles.sort(key=lambda c: c.open_time)
        return candles[-count:]
