"""Unit tests for utils.telegram."""

from unittest.mock import MagicMock

import pytest
import requests
from signal_bot.core.config import Config
from signal_bot.core.errors import NotificationError
from signal_bot.utils.telegram import LogNotifier, TelegramCommandPoller, TelegramNotifier, create_notifier


def response(status_code=200, payload=None):
    r = MagicMock(status_code=status_code, text="error body")
    r.json.return_value = payload or {"ok": True, "result": []}
    return r


def test_send_posts_message():
    session = MagicMock()
    session.post.return_value = response()
    TelegramNotifier("token", "42", session=session).send("hello")
    url = session.post.call_args.args[0]
    assert url.endswith("/bottoken/sendMessage")
    assert session.post.call_args.kwargs["json"] == {"chat_id": "42", "text": "hello"}


def test_send_failures_raise_notification_error():
    session = MagicMock()
    session.post.return_value = response(status_code=429)
    with pytest.raises(NotificationError):
        TelegramNotifier("token", "42", session=session).send("hello")
    session.post.side_effect = requests.ConnectionError("offline")
    with pytest.raises(NotificationError) as exc:
        TelegramNotifier("token", "42", session=session).send("hello")
    assert "token" not in str(exc.value)


def test_create_notifier():
    assert isinstance(create_notifier(Config(notifier="log")), LogNotifier)
    notifier = create_notifier(Config(notifier="telegram", telegram_bot_token="t", telegram_chat_id="1"))
    assert isinstance(notifier, TelegramNotifier)


def test_command_poller_dispatches_from_configured_chat():
    updates = {"ok": True, "result": [
        {"update_id": 10, "message": {"chat": {"id": 42}, "text": "/reset@SignalBot"}},
        {"update_id": 11, "message": {"chat": {"id": 7}, "text": "/reset"}},
        {"update_id": 12, "message": {"chat": {"id": 42}, "text": "hello"}},
        {"update_id": 13, "message": {"chat": {"id": 42}, "text": "/status"}},
    ]}
    session = MagicMock()
    session.post.return_value = response(payload=updates)
    reset = MagicMock(return_value="")
    status = MagicMock(return_value="no active signal")
    poller = TelegramCommandPoller("token", "42", {"/reset": reset, "/status": status}, session=session)
    assert poller.poll() == 2
    reset.assert_called_once_with()
    status.assert_called_once_with()
    sent = [c for c in session.post.call_args_list if c.args[0].endswith("/sendMessage")]
    assert len(sent) == 1
    assert sent[0].kwargs["json"]["text"] == "no active signal"

    session.post.return_value = response(payload={"ok": True, "result": []})
    poller.poll()
    assert session.post.call_args.kwargs["json"]["offset"] == 14
