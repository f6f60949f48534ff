"""Telegram notifications and /reset, /status, /stats commands. Never log token or chat_id."""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

import requests

from signal_bot.core.errors import NotificationError

logger = logging.getLogger("signal_bot.utils.telegram")

API_URL = "https://api.telegram.org/bot{token}/{method}"


class Notifier(ABC):
    """Notification sink. send() raises NotificationError on delivery failure."""

    @abstractmethod
    def send(self, text: str) -> None:
        pass


class LogNotifier(Notifier):
    """Writes messages to the log instead of a chat."""

    def send(self, text: str) -> None:
        logger.info("Notification:\n%s", text)


class TelegramNotifier(Notifier):
    def __init__(self, bot_token: str, chat_id: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        if not bot_token or not chat_id:
            raise ValueError("bot_token and chat_id are required")
        self._token = bot_token
        self.chat_id = chat_id
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, text: str) -> None:
        url = API_URL.format(token=self._token, method="sendMessage")
        payload = {"chat_id": self.chat_id, "text": text}
        try:
            r = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationError(f"Telegram request failed: {type(e).__name__}") from e
        if r.status_code != 200:
            raise NotificationError(f"Telegram send failed: {r.status_code} {r.text[:200]}")


def create_notifier(config) -> Notifier:
    if config.notifier == "telegram":
        return TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id)
    return LogNotifier()


class TelegramCommandPoller:
    """
    Polls getUpdates and dispatches bot commands ("/reset", "/status", ...) sent
    from the configured chat. Each handler returns the reply text.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        handlers: Dict[str, Callable[[], str]],
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self._token = bot_token
        self.chat_id = str(chat_id)
        self.handlers = handlers
        self.session = session or requests.Session()
        self.timeout = timeout
        self._offset: Optional[int] = None

    def _call(self, method: str, **payload) -> dict:
        url = API_URL.format(token=self._token, method=method)
        try:
            r = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationError(f"Telegram {method} failed: {type(e).__name__}") from e
        if r.status_code != 200:
            raise NotificationError(f"Telegram {method} failed: {r.status_code} {r.text[:200]}")
        return r.json()

    def poll(self) -> int:
        """Handle pending updates once. Returns the number of commands executed."""
        payload = {"timeout": 0, "allowed_updates": ["message", "channel_post"]}
        if self._offset is not None:
            payload["offset"] = self._offset
        updates = self._call("getUpdates", **payload).get("result", [])
        handled = 0
        for update in updates:
            self._offset = int(update["update_id"]) + 1
            message = update.get("message") or update.get("channel_post") or {}
            if str(message.get("chat", {}).get("id", "")) != self.chat_id:
                continue
            text = (message.get("text") or "").strip()
            if not text.startswith("/"):
                continue
            # "/reset@MyBot arg" -> "/reset"
            command = text.split()[0].split("@")[0].lower()
            handler = self.handlers.get(command)
            if handler is None:
                logger.debug("Ignoring unknown command %s", command)
                continue
            logger.info("Telegram command %s", command)
            reply = handler()
            handled += 1
            if reply:
                self._call("sendMessage", chat_id=self.chat_id, text=reply)
        return handled
