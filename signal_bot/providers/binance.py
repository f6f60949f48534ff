"""
Binance klines (USDT-M futures or spot) via python-binance. Public endpoints,
so API keys are optional.
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import requests
from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceRequestException

from signal_bot.core.errors import ProviderError
from signal_bot.core.types import Candle
from signal_bot.providers.base import MarketDataAdapter

logger = logging.getLogger("signal_bot.providers.binance")


def parse_kline(row: List[Any]) -> Candle:
    """[open_time_ms, open, high, low, close, volume, close_time, ...] -> Candle."""
    return Candle(
        open_time=datetime.fromtimestamp(int(row[0]) / 1000, tz=timezone.utc),
        open=float(row[1]),
        high=float(row[2]),
        low=float(row[3]),
        close=float(row[4]),
        volume=float(row[5]),
    )


class BinanceAdapter(MarketDataAdapter):
    name = "binance"

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        market: str = "futures",
        client: Optional[Client] = None,
    ):
        self._api_key = api_key or None
        self._api_secret = api_secret or None
        self.market = market
        self._client = client

    @property
    def client(self) -> Client:
        # Client() pings the exchange, so build it on first use.
        if self._client is None:
            self._client = Client(self._api_key, self._api_secret)
            logger.info("Binance client ready (%s klines)", self.market)
        return self._client

    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        try:
            if self.market == "futures":
                raw = self.client.futures_klines(symbol=symbol, interval=interval, limit=count)
            else:
                raw = self.client.get_klines(symbol=symbol, interval=interval, limit=count)
        except (BinanceAPIException, BinanceRequestException, requests.RequestException) as e:
            raise ProviderError(self.name, str(e)) from e
        if not isinstance(raw, list):
            raise ProviderError(self.name, f"malformed payload: expected list, got {type(raw).__name__}")
        try:
            candles = [parse_kline(row) for row in raw]
        except (IndexError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed payload: {e}") from e
        candles.sort(key=lambda c: c.open_time)
        return candles[-count:]
