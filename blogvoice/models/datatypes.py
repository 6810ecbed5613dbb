"""Core datatypes shared across Blogvoice modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Model stage results as an explicit `Success | Failure` tagged union.

Key types:
- `ConversionRequest`, `RawPageText`, `CleanedText`, `AudioArtifact`,
  `FailureReason`, `Success`, `Failure`, and `PipelineState`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

_Value = TypeVar("_Value")


@dataclass(frozen=True, slots=True)
class ConversionRequest:
    """One user request to convert a blog post into speech.

    Attributes:
        source_url: URL submitted by the user.
        conversation_id: Messaging-platform conversation (chat) identifier.
    """

    source_url: str
    conversation_id: str


@dataclass(frozen=True, slots=True)
class RawPageText:
    """Visible page text extracted by the fetch stage.

    Attributes:
        text: Extracted text, one paragraph per line.
        source_url: URL the text was read from.
    """

    text: str
    source_url: str


@dataclass(frozen=True, slots=True)
class CleanedText:
    """Readable prose returned by the sanitize stage."""

    text: str

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("Cleaned text must be non-empty.")


@dataclass(frozen=True, slots=True)
class AudioArtifact:
    """Synthesized audio ready for delivery.

    Attributes:
        data: Encoded audio payload.
        mime_type: MIME type matching the payload encoding.
        file_name: Attachment file name presented to the user.
        segment_count: Number of synthesized chunks concatenated into `data`.
    """

    data: bytes
    mime_type: str
    file_name: str = "speech.mp3"
    segment_count: int = 1

    @property
    def size_bytes(self) -> int:
        """Return payload length in bytes."""

        return len(self.data)


@dataclass(frozen=True, slots=True)
class FailureReason:
    """Why a run stopped before producing audio.

    Attributes:
        stage: Failed stage (`fetch`, `sanitize`, `synthesize`) or `pipeline`.
        kind: Error-kind value of the failed stage, `cancelled`, or `timed_out`.
        detail: Operator-facing diagnostic text; never shown to chat users.
    """

    stage: str
    kind: str
    detail: str = ""


@dataclass(frozen=True, slots=True)
class Success(Generic[_Value]):
    """Successful stage or pipeline result."""

    value: _Value


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed stage or pipeline result."""

    reason: FailureReason


StageResult = Union[Success[_Value], Failure]
PipelineOutcome = Union[Success[AudioArtifact], Failure]


class PipelineState(str, Enum):
    """Lifecycle states of one pipeline run."""

    IDLE = "idle"
    FETCHING = "fetching"
    SANITIZING = "sanitizing"
    SYNTHESIZING = "synthesizing"
    FAILED = "failed"
    DELIVERING = "delivering"
    DONE = "done"
