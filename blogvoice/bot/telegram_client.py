"""Telegram Bot API HTTP client.

Responsibilities:
- Call `getUpdates`, `sendMessage`, and `sendAudio` over HTTPS with `requests`.
- Raise `TelegramApiError` for transport, HTTP, and `ok: false` failures with
  the bot token redacted from every message.
"""

from __future__ import annotations

from typing import Any

import requests


class TelegramApiError(RuntimeError):
    """Raised when a Telegram Bot API call fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after_seconds: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retry_after_seconds = retry_after_seconds


class TelegramBotClient:
    """Minimal requests-based Telegram Bot API client."""

    _MAX_MESSAGE_CHARS = 4096

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.telegram.org",
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize bot token, API base URL, and default request timeout."""

        if not token or not token.strip():
            raise ValueError("Telegram bot token must be a non-empty string.")
        self._token = token.strip()
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def get_updates(self, offset: int | None = None, timeout_seconds: int = 30) -> list[dict[str, Any]]:
        """Long-poll for new updates after `offset`."""

        data: dict[str, Any] = {
            "timeout": timeout_seconds,
            "allowed_updates": '["message"]',
        }
        if offset is not None:
            data["offset"] = offset
        result = self._call(
            "getUpdates",
            data=data,
            timeout=timeout_seconds + self.timeout_seconds,
        )
        if not isinstance(result, list):
            raise TelegramApiError("Telegram `getUpdates` returned a non-list result.")
        return [update for update in result if isinstance(update, dict)]

    def send_message(self, chat_id: str, text: str) -> None:
        """Send a plain-text message, truncated to the platform limit."""

        if len(text) > self._MAX_MESSAGE_CHARS:
            text = f"{text[: self._MAX_MESSAGE_CHARS - 3]}..."
        self._call("sendMessage", data={"chat_id": chat_id, "text": text})

    def send_audio(
        self,
        chat_id: str,
        audio: bytes,
        *,
        file_name: str,
        mime_type: str,
        caption: str | None = None,
    ) -> None:
        """Upload audio bytes as a playable attachment."""

        data: dict[str, Any] = {"chat_id": chat_id}
        if caption:
            data["caption"] = caption
        self._call(
            "sendAudio",
            data=data,
            files={"audio": (file_name, audio, mime_type)},
        )

    def _call(
        self,
        method: str,
        *,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST one Bot API method and return its `result` payload."""

        endpoint = f"{self.base_url}/bot{self._token}/{method}"
        try:
            response = requests.post(
                endpoint,
                data=data,
                files=files,
                timeout=timeout if timeout is not None else self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise TelegramApiError(
                f"Telegram `{method}` transport error: {self._redact(str(exc))}"
            ) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            raise TelegramApiError(
                f"Telegram `{method}` returned HTTP {response.status_code} without JSON body.",
                status_code=response.status_code,
            )
        if not payload.get("ok"):
            description = str(payload.get("description") or "unknown error")
            parameters = payload.get("parameters")
            retry_after = (
                parameters.get("retry_after") if isinstance(parameters, dict) else None
            )
            raise TelegramApiError(
                f"Telegram `{method}` failed (HTTP {response.status_code}): "
                f"{self._redact(description)}",
                status_code=response.status_code,
                retry_after_seconds=retry_after if isinstance(retry_after, int) else None,
            )
        return payload.get("result")

    def _redact(self, text: str) -> str:
        """Remove the bot token from diagnostic text."""

        return text.replace(self._token, "[redacted-token]")
