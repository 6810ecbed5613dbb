"""Unit tests for outcome delivery and user-facing failure messages."""

from __future__ import annotations

import pytest

from blogvoice.bot.delivery import TelegramResultDelivery, failure_message
from blogvoice.bot.telegram_client import TelegramApiError
from blogvoice.errors import DeliveryError, DeliveryErrorKind
from blogvoice.models.datatypes import AudioArtifact, Failure, FailureReason, Success


class _RecordingBotClient:
    """Bot client stub recording outbound messages."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, str, object]] = []

    def send_message(self, chat_id: str, text: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(("message", chat_id, text))

    def send_audio(self, chat_id: str, audio: bytes, **kwargs: object) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(("audio", chat_id, (audio, kwargs)))


def test_success_is_delivered_as_one_audio_attachment() -> None:
    """Successful outcomes should produce exactly one audio upload."""

    client = _RecordingBotClient()
    artifact = AudioArtifact(data=b"ID3-audio", mime_type="audio/mpeg")

    TelegramResultDelivery(client).deliver("42", Success(artifact))  # type: ignore[arg-type]

    assert client.sent == [
        (
            "audio",
            "42",
            (b"ID3-audio", {"file_name": "speech.mp3", "mime_type": "audio/mpeg"}),
        )
    ]


def test_failure_is_delivered_as_one_message_without_detail() -> None:
    """Failure outcomes should produce one explanatory message, hiding diagnostics."""

    client = _RecordingBotClient()
    reason = FailureReason("fetch", "empty_content", "Page returned HTTP 404.")

    TelegramResultDelivery(client).deliver("42", Failure(reason))  # type: ignore[arg-type]

    assert client.sent == [
        (
            "message",
            "42",
            "Sorry, I couldn't read the page: no readable text was found there.",
        )
    ]


def test_platform_failures_raise_delivery_error() -> None:
    """Bot API failures should surface as `DeliveryError(unreachable)`."""

    client = _RecordingBotClient(error=TelegramApiError("Bad Gateway", status_code=502))
    delivery = TelegramResultDelivery(client)  # type: ignore[arg-type]

    with pytest.raises(DeliveryError) as exc_info:
        delivery.deliver("42", Failure(FailureReason("fetch", "timeout")))

    assert exc_info.value.error_kind is DeliveryErrorKind.UNREACHABLE
    assert exc_info.value.stage == "deliver"


@pytest.mark.parametrize(
    ("reason", "expected_fragment"),
    [
        (FailureReason("sanitize", "rate_limited"), "clean-up service is busy"),
        (FailureReason("synthesize", "rate_limited"), "speech service is busy"),
        (FailureReason("fetch", "invalid_url"), "doesn't look like a web link"),
        (FailureReason("synthesize", "invalid_input"), "rejected the text"),
        (FailureReason("pipeline", "cancelled"), "Your request was cancelled."),
        (FailureReason("fetch", "timed_out"), "stopped while reading the page"),
        (FailureReason("pipeline", "timed_out"), "stopped while processing your request"),
        (FailureReason("sanitize", "mystery"), "something went wrong while cleaning up the text"),
    ],
)
def test_failure_messages_name_the_failed_step(
    reason: FailureReason, expected_fragment: str
) -> None:
    """Each failure should map to a plain-language message naming what failed."""

    assert expected_fragment in failure_message(reason)
