"""Abstract market data adapter, shared HTTP plumbing and the retry wrapper."""

from __future__ import annotations
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

import requests

from signal_bot.core.errors import ProviderError
from signal_bot.core.types import Candle

logger = logging.getLogger("signal_bot.providers")


class MarketDataAdapter(ABC):
    """fetch() returns chronological candles, at most `count`. Failures raise ProviderError."""

    name: str = "provider"

    @abstractmethod
    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        pass

    def latest_price(self, symbol: str, interval: str) -> float:
        """Close of the newest candle."""
        candles = self.fetch(symbol, interval, 2)
        if not candles:
            raise ProviderError(self.name, f"no candles returned for {symbol}")
        return candles[-1].close


class HttpAdapter(MarketDataAdapter):
    """Adapter backed by a JSON REST endpoint."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get_json(self, url: str, params: dict, headers: Optional[dict] = None) -> Any:
        try:
            r = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderError(self.name, f"request failed: {e}") from e
        if r.status_code != 200:
            raise ProviderError(self.name, f"HTTP {r.status_code}: {r.text[:200]}")
        try:
            return r.json()
        except ValueError as e:
            raise ProviderError(self.name, "response is not JSON") from e

    def _malformed(self, detail: str) -> ProviderError:
        return ProviderError(self.name, f"malformed payload: {detail}")


class RetryingAdapter(MarketDataAdapter):
    """Retry ProviderError up to `attempts` times with a fixed backoff, then re-raise."""

    def __init__(
        self,
        inner: MarketDataAdapter,
        attempts: int = 3,
        backoff_s: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self.inner = inner
        self.name = inner.name
        self.attempts = attempts
        self.backoff_s = backoff_s
        self._sleep = sleep

    def _call(self, f, *args):
        last_exc = None
        for attempt in range(self.attempts):
            try:
                return f(*args)
            except ProviderError as e:
                last_exc = e
                if attempt < self.attempts - 1:
                    logger.warning("%s (attempt %d/%d), retry in %.1fs", e, attempt + 1, self.attempts, self.backoff_s)
                    self._sleep(self.backoff_s)
        raise last_exc

    def fetch(self, symbol: str, interval: str, count: int) -> List[Candle]:
        return self._call(self.inner.fetch, symbol, interval, count)

    def latest_price(self, symbol: str, interval: str) -> float:
        return self._call(self.inner.latest_price, symbol, interval)
