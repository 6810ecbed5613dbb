"""Domain exceptions for pipeline, delivery, and CLI diagnostics.

Key types:
- `PipelineStageError`: root error carrying stage, detail, and optional hint.
- `FetchError`, `SanitizeError`, `SynthesizeError`, `DeliveryError`: stage-scoped
  errors whose `kind` selects one member of the matching kind enum.
"""

from __future__ import annotations

from enum import Enum


class FetchErrorKind(str, Enum):
    """Failure kinds raised by page fetching."""

    TIMEOUT = "timeout"
    SESSION_ERROR = "session_error"
    EMPTY_CONTENT = "empty_content"
    INVALID_URL = "invalid_url"


class SanitizeErrorKind(str, Enum):
    """Failure kinds raised by LLM text sanitizing."""

    UNREACHABLE = "unreachable"
    RATE_LIMITED = "rate_limited"
    EMPTY_RESPONSE = "empty_response"


class SynthesizeErrorKind(str, Enum):
    """Failure kinds raised by speech synthesis."""

    UNREACHABLE = "unreachable"
    RATE_LIMITED = "rate_limited"
    INVALID_INPUT = "invalid_input"


class DeliveryErrorKind(str, Enum):
    """Failure kinds raised by result delivery."""

    UNREACHABLE = "unreachable"


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
        kind: str = "unknown",
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
        self.kind = kind


class FetchError(PipelineStageError):
    """Raised when a page cannot be loaded or yields no readable text."""

    def __init__(self, kind: FetchErrorKind, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="fetch", detail=detail, hint=hint, kind=kind.value)
        self.error_kind = kind


class SanitizeError(PipelineStageError):
    """Raised when the language-model cleanup request fails."""

    def __init__(
        self, kind: SanitizeErrorKind, detail: str, hint: str | None = None
    ) -> None:
        super().__init__(stage="sanitize", detail=detail, hint=hint, kind=kind.value)
        self.error_kind = kind


class SynthesizeError(PipelineStageError):
    """Raised when text-to-speech synthesis fails."""

    def __init__(
        self, kind: SynthesizeErrorKind, detail: str, hint: str | None = None
    ) -> None:
        super().__init__(stage="synthesize", detail=detail, hint=hint, kind=kind.value)
        self.error_kind = kind


class DeliveryError(PipelineStageError):
    """Raised when the messaging platform rejects or drops an outbound message."""

    def __init__(
        self, kind: DeliveryErrorKind, detail: str, hint: str | None = None
    ) -> None:
        super().__init__(stage="deliver", detail=detail, hint=hint, kind=kind.value)
        self.error_kind = kind
