"""Unit tests for audio segment concatenation."""

from __future__ import annotations

import io
from typing import Callable
import wave

import pytest

from blogvoice.audio.merger import AudioConcatenator, mime_type_for_format


def test_single_segment_is_returned_unchanged() -> None:
    """One segment needs no merging."""

    assert AudioConcatenator().concatenate([b"ID3abc"], "mp3") == b"ID3abc"


def test_mp3_segments_are_joined_in_order() -> None:
    """Frame-based formats should be joined byte-wise in list order."""

    merged = AudioConcatenator().concatenate([b"one-", b"two-", b"three"], "mp3")

    assert merged == b"one-two-three"


def test_wav_segments_are_merged_frame_by_frame(
    wav_bytes_factory: Callable[..., bytes],
) -> None:
    """WAV segments should merge into one valid WAV holding all frames."""

    merged = AudioConcatenator().concatenate(
        [wav_bytes_factory(frame_count=100), wav_bytes_factory(frame_count=150)], "wav"
    )

    with wave.open(io.BytesIO(merged), "rb") as wav_file:
        assert wav_file.getnframes() == 250
        assert wav_file.getnchannels() == 1
        assert wav_file.getframerate() == 24000


def test_wav_segments_with_different_parameters_are_rejected(
    wav_bytes_factory: Callable[..., bytes],
) -> None:
    """WAV merging should fail on mismatched stream parameters."""

    with pytest.raises(ValueError, match="Incompatible WAV parameters for segment 1"):
        AudioConcatenator().concatenate(
            [wav_bytes_factory(sample_rate=24000), wav_bytes_factory(sample_rate=16000)],
            "wav",
        )


def test_empty_and_flac_inputs_are_rejected() -> None:
    """No segments and multi-segment FLAC cannot be concatenated."""

    concatenator = AudioConcatenator()

    with pytest.raises(ValueError, match="No audio segments"):
        concatenator.concatenate([], "mp3")
    with pytest.raises(ValueError, match="FLAC"):
        concatenator.concatenate([b"a", b"b"], "flac")


def test_mime_types_follow_response_format() -> None:
    """MIME types should match speech response formats."""

    assert mime_type_for_format("mp3") == "audio/mpeg"
    assert mime_type_for_format("wav") == "audio/wav"
    assert mime_type_for_format("opus") == "audio/ogg"
    with pytest.raises(ValueError, match="Unsupported audio format `midi`"):
        mime_type_for_format("midi")
