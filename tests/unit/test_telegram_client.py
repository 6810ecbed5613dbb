"""Unit tests for the Telegram Bot API client."""

from __future__ import annotations

from typing import Any

import pytest

from blogvoice.bot import telegram_client as telegram_http
from blogvoice.bot.telegram_client import TelegramApiError, TelegramBotClient

_TOKEN = "123456:secret-token"


class _MockJsonResponse:
    """Minimal requests response mock exposing `json()` and `status_code`."""

    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _patch_post(
    monkeypatch: pytest.MonkeyPatch, responses: list[Any]
) -> list[tuple[str, dict[str, Any]]]:
    """Patch `requests.post` to return queued responses and record calls."""

    calls: list[tuple[str, dict[str, Any]]] = []

    def _mock_post(url: str, **kwargs: Any) -> _MockJsonResponse:
        calls.append((url, kwargs))
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr("blogvoice.bot.telegram_client.requests.post", _mock_post)
    return calls


def test_get_updates_long_polls_with_offset(monkeypatch: pytest.MonkeyPatch) -> None:
    """Update polling should send offset and poll timeout and return dict updates."""

    calls = _patch_post(
        monkeypatch,
        [_MockJsonResponse({"ok": True, "result": [{"update_id": 7}, "junk"]})],
    )

    updates = TelegramBotClient(_TOKEN, timeout_seconds=10.0).get_updates(
        offset=5, timeout_seconds=25
    )

    assert updates == [{"update_id": 7}]
    url, kwargs = calls[0]
    assert url == f"https://api.telegram.org/bot{_TOKEN}/getUpdates"
    assert kwargs["data"] == {"timeout": 25, "allowed_updates": '["message"]', "offset": 5}
    assert kwargs["timeout"] == 35.0


def test_send_message_truncates_to_platform_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    """Messages over the platform limit should be truncated with an ellipsis."""

    calls = _patch_post(monkeypatch, [_MockJsonResponse({"ok": True, "result": {}})])

    TelegramBotClient(_TOKEN).send_message("42", "x" * 5000)

    data = calls[0][1]["data"]
    assert data["chat_id"] == "42"
    assert len(data["text"]) == 4096
    assert data["text"].endswith("...")


def test_send_audio_uploads_attachment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Audio should be uploaded as a multipart `audio` file."""

    calls = _patch_post(monkeypatch, [_MockJsonResponse({"ok": True, "result": {}})])

    TelegramBotClient(_TOKEN).send_audio(
        "42", b"ID3-audio", file_name="speech.mp3", mime_type="audio/mpeg"
    )

    url, kwargs = calls[0]
    assert url.endswith("/sendAudio")
    assert kwargs["data"] == {"chat_id": "42"}
    assert kwargs["files"] == {"audio": ("speech.mp3", b"ID3-audio", "audio/mpeg")}


def test_api_errors_carry_status_and_retry_after(monkeypatch: pytest.MonkeyPatch) -> None:
    """`ok: false` payloads should raise with status and retry hint."""

    _patch_post(
        monkeypatch,
        [
            _MockJsonResponse(
                {
                    "ok": False,
                    "description": "Too Many Requests: retry after 3",
                    "parameters": {"retry_after": 3},
                },
                status_code=429,
            )
        ],
    )

    with pytest.raises(TelegramApiError) as exc_info:
        TelegramBotClient(_TOKEN).send_message("42", "hi")

    assert exc_info.value.status_code == 429
    assert exc_info.value.retry_after_seconds == 3
    assert "Too Many Requests" in str(exc_info.value)


def test_transport_and_non_json_failures_redact_token(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Transport errors must not leak the bot token; non-JSON bodies are errors."""

    _patch_post(
        monkeypatch,
        [
            telegram_http.requests.ConnectionError(
                f"Max retries exceeded with url: /bot{_TOKEN}/sendMessage"
            ),
            _MockJsonResponse(ValueError("no json"), status_code=502),
        ],
    )
    client = TelegramBotClient(_TOKEN)

    with pytest.raises(TelegramApiError) as exc_info:
        client.send_message("42", "hi")
    assert _TOKEN not in str(exc_info.value)
    assert "[redacted-token]" in str(exc_info.value)

    with pytest.raises(TelegramApiError) as exc_info:
        client.send_message("42", "hi")
    assert exc_info.value.status_code == 502


def test_blank_token_is_rejected() -> None:
    """A bot client cannot be built without a token."""

    with pytest.raises(ValueError, match="non-empty"):
        TelegramBotClient("  ")
