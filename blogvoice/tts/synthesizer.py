"""TTS synthesizer interfaces and OpenAI-backed implementation.

Responsibilities:
- Define protocol for whole-text speech synthesis.
- Split text over the provider input limit and synthesize chunks in order.
- Concatenate chunk audio into one artifact, failing without partial output.
"""

from __future__ import annotations

from typing import Callable, Protocol
import wave

from ..audio.merger import AudioConcatenator, mime_type_for_format
from ..errors import SynthesizeError, SynthesizeErrorKind
from ..llm.openai_client import OpenAIProviderError, OpenAISpeechClient
from ..models.datatypes import AudioArtifact, CleanedText
from ..text.chunking import TextChunker
from .voices import VoiceProfile

_RATE_LIMITED_KINDS = frozenset({"rate_limited", "insufficient_quota"})
_INVALID_INPUT_KINDS = frozenset({"bad_request", "empty_response"})


class SpeechSynthesizer(Protocol):
    """Protocol for TTS provider implementations."""

    def synthesize(self, cleaned: CleanedText) -> AudioArtifact:
        """Synthesize one audio artifact from cleaned text."""


def synthesize_error_from_provider(exc: OpenAIProviderError) -> SynthesizeError:
    """Translate an OpenAI client failure into a synthesize-stage error."""

    if exc.failure_kind in _RATE_LIMITED_KINDS:
        return SynthesizeError(
            SynthesizeErrorKind.RATE_LIMITED,
            str(exc),
            hint="Wait for the OpenAI rate limit window or check account quota.",
        )
    if exc.failure_kind in _INVALID_INPUT_KINDS:
        return SynthesizeError(SynthesizeErrorKind.INVALID_INPUT, str(exc))
    return SynthesizeError(
        SynthesizeErrorKind.UNREACHABLE,
        str(exc),
        hint="Check network access, the TTS API key, and the configured model.",
    )


class OpenAISpeechSynthesizer:
    """OpenAI-backed synthesizer producing one concatenated audio artifact."""

    def __init__(
        self,
        model: str = "tts-1",
        voice: VoiceProfile | None = None,
        api_key: str | None = None,
        max_input_chars: int = 4096,
        base_url: str = "https://api.openai.com/v1",
        client: OpenAISpeechClient | None = None,
        on_chunk: Callable[[int, int], None] | None = None,
    ) -> None:
        """Initialize OpenAI-backed TTS synthesizer settings.

        Args:
            on_chunk: Optional callback receiving 1-based chunk index and chunk count
                before each provider request.
        """

        self.model = model
        self.voice = voice if voice is not None else VoiceProfile()
        self.chunker = TextChunker(max_input_chars)
        self.concatenator = AudioConcatenator()
        self.client = (
            client
            if client is not None
            else OpenAISpeechClient(api_key=api_key, base_url=base_url)
        )
        self._on_chunk = on_chunk

    def synthesize(self, cleaned: CleanedText) -> AudioArtifact:
        """Synthesize all chunks in order and return the concatenated audio."""

        chunks = self.chunker.split(cleaned.text)
        if not chunks:
            raise SynthesizeError(SynthesizeErrorKind.INVALID_INPUT, "No text to synthesize.")

        segments: list[bytes] = []
        for index, chunk in enumerate(chunks, start=1):
            if self._on_chunk is not None:
                self._on_chunk(index, len(chunks))
            try:
                segments.append(
                    self.client.synthesize_speech(
                        model=self.model,
                        voice=self.voice.provider_voice_id,
                        text=chunk,
                        response_format=self.voice.audio_format,
                        speed=max(0.25, min(4.0, self.voice.speaking_rate)),
                    )
                )
            except OpenAIProviderError as exc:
                raise synthesize_error_from_provider(exc) from exc

        try:
            data = self.concatenator.concatenate(segments, self.voice.audio_format)
        except (ValueError, wave.Error, EOFError) as exc:
            raise SynthesizeError(
                SynthesizeErrorKind.INVALID_INPUT,
                f"Synthesized audio segments could not be joined: {exc}",
            ) from exc

        return AudioArtifact(
            data=data,
            mime_type=mime_type_for_format(self.voice.audio_format),
            file_name=f"speech.{self.voice.audio_format}",
            segment_count=len(segments),
        )
