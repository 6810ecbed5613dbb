"""OpenAI HTTP clients for the sanitize and speech stages.

Responsibilities:
- POST chat-completions and speech requests to OpenAI's REST API.
- Classify HTTP and transport failures into `failure_kind` strings that the
  sanitize and synthesize stages map onto their own error kinds.
"""

from __future__ import annotations

import json
import re
from typing import Any

import requests

_MAX_DETAIL_CHARS = 180
_KEY_PATTERN = re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b")

_HEADLINES = {
    "invalid_api_key": "OpenAI authentication failed",
    "insufficient_quota": "OpenAI quota is insufficient for this request",
    "rate_limited": "OpenAI rate limit reached",
    "timeout": "OpenAI request timed out",
    "server_error": "OpenAI service error",
    "bad_request": "OpenAI rejected the request",
}


class OpenAIProviderError(RuntimeError):
    """Raised when an OpenAI request fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code


def _compact(text: str) -> str:
    """Redact key material, collapse whitespace, and cap the length."""

    compact = " ".join(_KEY_PATTERN.sub("[redacted-key]", text).split())
    if len(compact) <= _MAX_DETAIL_CHARS:
        return compact
    return f"{compact[: _MAX_DETAIL_CHARS - 1]}..."


def classify_http_failure(status_code: int, error_code: str, message: str) -> str:
    """Return the failure kind for an OpenAI HTTP error status."""

    if status_code == 401:
        return "invalid_api_key"
    if status_code == 429:
        if error_code == "insufficient_quota" or "quota" in message.lower():
            return "insufficient_quota"
        return "rate_limited"
    if status_code in {408, 504}:
        return "timeout"
    if status_code >= 500:
        return "server_error"
    if status_code == 400:
        return "bad_request"
    return "http_error"


def _http_failure(response: Any) -> OpenAIProviderError:
    """Build a provider error from a failed HTTP response."""

    status_code = int(getattr(response, "status_code", 0) or 0)
    body = bytes(getattr(response, "content", b"") or b"").decode("utf-8", errors="replace")
    error_code, message = "", body.strip()
    try:
        error = json.loads(body).get("error")
    except (ValueError, AttributeError):
        error = None
    if isinstance(error, dict):
        error_code = str(error.get("code") or "")
        message = str(error.get("message") or message).strip()

    failure_kind = classify_http_failure(status_code, error_code, message)
    headline = _HEADLINES.get(failure_kind, "OpenAI request failed")
    detail = f"{headline} (HTTP {status_code})"
    detail = f"{detail}: {_compact(message)}" if message else f"{detail}."
    return OpenAIProviderError(detail, failure_kind=failure_kind, status_code=status_code)


class _OpenAIBaseClient:
    """Shared API key, base URL, and request timeout for OpenAI clients."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 120.0,
    ) -> None:
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _post(self, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST `payload` as JSON and return the raw response body."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`, pass `--api-key`, or "
                "store one with `blogvoice credentials --set-openai-key`.",
                failure_kind="invalid_api_key",
            )
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise _http_failure(exc.response) from exc
        except requests.Timeout as exc:
            raise OpenAIProviderError("OpenAI request timed out.", failure_kind="timeout") from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"OpenAI request transport error: {_compact(str(exc))}",
                failure_kind="transport",
            ) from exc
        return bytes(response.content)


class OpenAIChatClient(_OpenAIBaseClient):
    """Chat-completions client returning the first assistant reply as text."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 1.0,
    ) -> str:
        body = self._post(
            "/chat/completions",
            {
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": temperature,
            },
        )
        return self._reply_text(body)

    @staticmethod
    def _reply_text(body: bytes) -> str:
        """Extract `choices[0].message.content`; anything unusable is `empty_response`."""

        try:
            payload = json.loads(body.decode("utf-8", errors="replace"))
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, LookupError, TypeError) as exc:
            raise OpenAIProviderError(
                "OpenAI returned no usable chat message.", failure_kind="empty_response"
            ) from exc

        if isinstance(content, list):
            content = "".join(
                part["text"]
                for part in content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            )
        text = content.strip() if isinstance(content, str) else ""
        if not text:
            raise OpenAIProviderError(
                "OpenAI response message content is empty.", failure_kind="empty_response"
            )
        return text


class OpenAISpeechClient(_OpenAIBaseClient):
    """Speech client returning encoded audio bytes from `/audio/speech`."""

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
        speed: float = 1.0,
    ) -> bytes:
        audio = self._post(
            "/audio/speech",
            {
                "model": model,
                "voice": voice,
                "input": text,
                "response_format": response_format,
                "speed": speed,
            },
        )
        if not audio:
            raise OpenAIProviderError(
                "OpenAI speech response is empty.", failure_kind="empty_response"
            )
        return audio
