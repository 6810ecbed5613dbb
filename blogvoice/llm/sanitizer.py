"""LLM-backed cleanup of scraped page text.

Responsibilities:
- Turn raw page text into readable prose through one chat-completions call.
- Map provider failures onto `SanitizeError` kinds without retrying.
"""

from __future__ import annotations

from typing import Protocol

from ..errors import SanitizeError, SanitizeErrorKind
from ..models.datatypes import CleanedText, RawPageText
from .openai_client import OpenAIChatClient, OpenAIProviderError
from .prompts import PromptLibrary

_RATE_LIMITED_KINDS = frozenset({"rate_limited", "insufficient_quota"})
_EMPTY_RESPONSE_KINDS = frozenset({"empty_response"})


class TextSanitizer(Protocol):
    """Protocol for text cleanup providers."""

    def sanitize(self, raw: RawPageText) -> CleanedText:
        """Return readable prose for raw page text."""


def sanitize_error_from_provider(exc: OpenAIProviderError) -> SanitizeError:
    """Translate an OpenAI client failure into a sanitize-stage error."""

    if exc.failure_kind in _RATE_LIMITED_KINDS:
        return SanitizeError(
            SanitizeErrorKind.RATE_LIMITED,
            str(exc),
            hint="Wait for the OpenAI rate limit window or check account quota.",
        )
    if exc.failure_kind in _EMPTY_RESPONSE_KINDS:
        return SanitizeError(SanitizeErrorKind.EMPTY_RESPONSE, str(exc))
    return SanitizeError(
        SanitizeErrorKind.UNREACHABLE,
        str(exc),
        hint="Check network access, the OpenAI API key, and the configured model.",
    )


class OpenAITextSanitizer:
    """Clean blog text with OpenAI chat-completions."""

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        client: OpenAIChatClient | None = None,
    ) -> None:
        """Initialize OpenAI-backed sanitize settings."""

        self.model = model
        self.client = (
            client
            if client is not None
            else OpenAIChatClient(api_key=api_key, base_url=base_url)
        )
        self.prompts = PromptLibrary()

    def sanitize(self, raw: RawPageText) -> CleanedText:
        """Send raw text with the cleanup instruction and return the model reply."""

        if not raw.text.strip():
            raise ValueError("Raw page text must be non-empty.")

        try:
            cleaned = self.client.chat_completion_text(
                model=self.model,
                system_prompt=self.prompts.sanitize_system_prompt(),
                user_prompt=self.prompts.sanitize_user_prompt(raw.text),
            )
        except OpenAIProviderError as exc:
            raise sanitize_error_from_provider(exc) from exc

        cleaned = cleaned.strip()
        if not cleaned:
            raise SanitizeError(
                SanitizeErrorKind.EMPTY_RESPONSE, "OpenAI returned no cleaned text."
            )
        return CleanedText(text=cleaned)
