"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import pytest

from blogvoice.credentials import KeyringCredentialStore
from blogvoice.llm.openai_client import OpenAIChatClient, OpenAISpeechClient


class ProviderCallLog:
    """Record of mocked OpenAI calls made during one test."""

    def __init__(self) -> None:
        self.chat_calls: list[dict[str, object]] = []
        self.speech_calls: list[dict[str, object]] = []
        self.chat_reply = "Hello world. More text."


@pytest.fixture(autouse=True)
def provider_calls(monkeypatch: pytest.MonkeyPatch) -> ProviderCallLog:
    """Mock OpenAI calls in integration tests to avoid network/key requirements."""

    call_log = ProviderCallLog()

    def _mock_chat_completion(self, **kwargs: object) -> str:
        """Return the scripted cleanup reply."""

        _ = self
        call_log.chat_calls.append(kwargs)
        return call_log.chat_reply

    def _mock_synthesize_speech(self, **kwargs: object) -> bytes:
        """Return a deterministic MP3-like payload tagged with the chunk text."""

        _ = self
        call_log.speech_calls.append(kwargs)
        return b"ID3:" + str(kwargs["text"]).encode("utf-8")

    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _mock_chat_completion)
    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)
    return call_log


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host secrets, settings, and keyring out of integration tests."""

    for name in (
        "OPENAI_API_KEY",
        "OPENAI_BEARER_TOKEN",
        "BLOGVOICE_TTS_API_KEY",
        "TELEGRAM_BOT_TOKEN",
        "TELOXIDE_TOKEN",
        "BLOGVOICE_BROWSER",
        "BLOGVOICE_RUN_TIMEOUT_SECONDS",
        "BLOGVOICE_TTS_MAX_INPUT_CHARS",
        "BLOGVOICE_TTS_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(KeyringCredentialStore, "stored_secrets", lambda self: {})
