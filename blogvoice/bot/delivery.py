"""Result delivery to the requesting conversation.

Responsibilities:
- Send successful audio as one playable attachment.
- Map failure reasons to plain-language messages naming the failed step.
- Surface platform failures as `DeliveryError` for the caller to log.
"""

from __future__ import annotations

from typing import Protocol

from ..errors import DeliveryError, DeliveryErrorKind
from ..models.datatypes import Failure, FailureReason, PipelineOutcome, Success
from .telegram_client import TelegramApiError, TelegramBotClient

_STAGE_LABELS = {
    "fetch": "reading the page",
    "sanitize": "cleaning up the text",
    "synthesize": "converting the text to speech",
    "pipeline": "processing your request",
}

_FAILURE_MESSAGES: dict[tuple[str, str], str] = {
    ("fetch", "timeout"): "Sorry, I couldn't read the page: it took too long to load.",
    ("fetch", "session_error"): (
        "Sorry, I couldn't read the page: the browser session failed. "
        "Please try again later."
    ),
    ("fetch", "invalid_url"): (
        "Sorry, I couldn't read the page: that doesn't look like a web link. "
        "Send a full URL such as https://example.com/post."
    ),
    ("fetch", "empty_content"): (
        "Sorry, I couldn't read the page: no readable text was found there."
    ),
    ("sanitize", "rate_limited"): (
        "The text clean-up service is busy right now. Please try again in a few minutes."
    ),
    ("sanitize", "empty_response"): (
        "Sorry, I couldn't clean up the text: the language model returned nothing."
    ),
    ("sanitize", "unreachable"): (
        "Sorry, I couldn't clean up the text: the language model service is unreachable."
    ),
    ("synthesize", "rate_limited"): (
        "The speech service is busy right now. Please try again in a few minutes."
    ),
    ("synthesize", "invalid_input"): (
        "Sorry, I couldn't convert the text to speech: the speech service rejected the text."
    ),
    ("synthesize", "unreachable"): (
        "Sorry, I couldn't convert the text to speech: the speech service is unreachable."
    ),
}


def failure_message(reason: FailureReason) -> str:
    """Return the user-facing message for a failure reason.

    Diagnostic `detail` text is never included.
    """

    label = _STAGE_LABELS.get(reason.stage, _STAGE_LABELS["pipeline"])
    if reason.kind == "cancelled":
        return "Your request was cancelled."
    if reason.kind == "timed_out":
        return f"Sorry, this post took too long to convert (stopped while {label})."

    message = _FAILURE_MESSAGES.get((reason.stage, reason.kind))
    if message is not None:
        return message
    return f"Sorry, something went wrong while {label}. Please try again later."


class ResultDelivery(Protocol):
    """Protocol for outcome delivery to a conversation."""

    def deliver(self, conversation_id: str, outcome: PipelineOutcome) -> None:
        """Send exactly one message for `outcome`."""


class TelegramResultDelivery:
    """Deliver pipeline outcomes through the Telegram Bot API."""

    def __init__(self, client: TelegramBotClient) -> None:
        self.client = client

    def deliver(self, conversation_id: str, outcome: PipelineOutcome) -> None:
        """Send audio on success or one failure explanation on failure."""

        try:
            if isinstance(outcome, Success):
                artifact = outcome.value
                self.client.send_audio(
                    conversation_id,
                    artifact.data,
                    file_name=artifact.file_name,
                    mime_type=artifact.mime_type,
                )
            elif isinstance(outcome, Failure):
                self.client.send_message(conversation_id, failure_message(outcome.reason))
            else:
                raise TypeError(f"Unsupported pipeline outcome `{type(outcome).__name__}`.")
        except TelegramApiError as exc:
            raise DeliveryError(DeliveryErrorKind.UNREACHABLE, str(exc)) from exc
