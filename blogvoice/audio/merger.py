"""Audio segment concatenation.

Responsibilities:
- Join per-chunk audio payloads into one payload in original chunk order.
- Merge WAV segments frame-by-frame; join frame-based codecs byte-wise.
"""

from __future__ import annotations

import io
import wave

_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "opus": "audio/ogg",
    "aac": "audio/aac",
    "flac": "audio/flac",
}


def mime_type_for_format(audio_format: str) -> str:
    """Return the MIME type for a speech response format."""

    try:
        return _MIME_TYPES[audio_format]
    except KeyError as exc:
        raise ValueError(f"Unsupported audio format `{audio_format}`.") from exc


class AudioConcatenator:
    """Concatenate ordered audio segments into one payload."""

    def concatenate(self, segments: list[bytes], audio_format: str) -> bytes:
        """Concatenate segments in list order.

        Raises:
            ValueError: If there are no segments, or WAV segments disagree on
                channel count, sample width, or frame rate.
        """

        if not segments:
            raise ValueError("No audio segments to concatenate.")
        if len(segments) == 1:
            return segments[0]
        if audio_format == "wav":
            return self._merge_wav(segments)
        if audio_format == "flac":
            raise ValueError("FLAC segments cannot be concatenated; use mp3 or wav.")
        return b"".join(segments)

    def _merge_wav(self, segments: list[bytes]) -> bytes:
        """Merge WAV payloads sharing identical stream parameters."""

        with wave.open(io.BytesIO(segments[0]), "rb") as first:
            channels = first.getnchannels()
            sample_width = first.getsampwidth()
            framerate = first.getframerate()

        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as merged:
            merged.setnchannels(channels)
            merged.setsampwidth(sample_width)
            merged.setframerate(framerate)

            for position, segment in enumerate(segments):
                with wave.open(io.BytesIO(segment), "rb") as chunk:
                    if (
                        chunk.getnchannels() != channels
                        or chunk.getsampwidth() != sample_width
                        or chunk.getframerate() != framerate
                    ):
                        raise ValueError(
                            f"Incompatible WAV parameters for segment {position}."
                        )
                    merged.writeframes(chunk.readframes(chunk.getnframes()))

        return buffer.getvalue()
