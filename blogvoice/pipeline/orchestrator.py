"""Pipeline orchestration for Blogvoice.

Responsibilities:
- Run fetch, sanitize, and synthesize strictly in order for one request.
- Thread each stage result as `Success | Failure` and stop at the first failure.
- Enforce cancellation and the run deadline at stage boundaries and while
  waiting on an in-flight stage; an aborted fetch closes its browser before
  the run moves on.
- Hand exactly one outcome to result delivery.

Key types:
- `ConversionPipeline`: orchestration facade with injected collaborators.
- `RunTrace`: ordered record of the states one run passed through.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar
from uuid import uuid4

from ..bot.delivery import ResultDelivery
from ..errors import DeliveryError, PipelineStageError
from ..llm.sanitizer import TextSanitizer
from ..models.datatypes import (
    AudioArtifact,
    CleanedText,
    ConversionRequest,
    Failure,
    FailureReason,
    PipelineOutcome,
    PipelineState,
    RawPageText,
    StageResult,
    Success,
)
from ..scraper.fetcher import PageFetcher
from ..telemetry.logger import RunLogger
from ..tts.synthesizer import SpeechSynthesizer
from .runtime import RunControl, StageCancelled, StageDeadlineExceeded, call_with_deadline

_StageValue = TypeVar("_StageValue")

# Kind reported when a stage raises something outside the domain taxonomy.
_UNEXPECTED_FAILURE_KINDS = {
    "fetch": "session_error",
    "sanitize": "unreachable",
    "synthesize": "unreachable",
}


@dataclass(slots=True)
class RunTrace:
    """States visited by one pipeline run, in order.

    Attributes:
        run_id: Identifier used in log lines for this run.
        request: The request being processed.
        states: Visited states, starting at `idle`.
        outcome: Final outcome once the processing stages finished.
        delivery_error: Delivery failure kind, when delivery failed.
    """

    run_id: str
    request: ConversionRequest
    states: list[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    outcome: PipelineOutcome | None = None
    delivery_error: str | None = None

    def transition(self, state: PipelineState) -> None:
        """Move to `state`; states are never re-entered."""

        if state in self.states:
            raise RuntimeError(f"Run `{self.run_id}` cannot re-enter state `{state.value}`.")
        self.states.append(state)

    @property
    def state(self) -> PipelineState:
        return self.states[-1]


class ConversionPipeline:
    """Coordinate fetch, sanitize, synthesize, and delivery for single requests."""

    _PHASE_SEQUENCE = ("fetch", "sanitize", "synthesize", "deliver")

    def __init__(
        self,
        fetcher: PageFetcher,
        sanitizer: TextSanitizer,
        synthesizer: SpeechSynthesizer,
        delivery: ResultDelivery | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        session_release_timeout_seconds: float = 5.0,
    ) -> None:
        """Store collaborator handles; nothing is shared beyond what is passed in.

        `session_release_timeout_seconds` bounds how long an aborted fetch may
        take to close its browser before the run moves on.
        """

        self.fetcher = fetcher
        self.sanitizer = sanitizer
        self.synthesizer = synthesizer
        self.delivery = delivery
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self.session_release_timeout_seconds = session_release_timeout_seconds

    def new_trace(self, request: ConversionRequest) -> RunTrace:
        """Create an idle trace with a fresh run identifier."""

        return RunTrace(run_id=f"run-{uuid4().hex[:12]}", request=request)

    def run(
        self,
        request: ConversionRequest,
        control: RunControl | None = None,
        trace: RunTrace | None = None,
    ) -> PipelineOutcome:
        """Run the processing stages and return the outcome without delivering it."""

        control = control if control is not None else RunControl()
        trace = trace if trace is not None else self.new_trace(request)

        fetched: StageResult[RawPageText] = self._run_stage(
            "fetch",
            PipelineState.FETCHING,
            lambda: self.fetcher.fetch(request.source_url, control),
            control,
            trace,
            release_grace_seconds=self.session_release_timeout_seconds,
        )
        if isinstance(fetched, Failure):
            return self._fail(trace, fetched)

        cleaned: StageResult[CleanedText] = self._run_stage(
            "sanitize",
            PipelineState.SANITIZING,
            lambda: self.sanitizer.sanitize(fetched.value),
            control,
            trace,
        )
        if isinstance(cleaned, Failure):
            return self._fail(trace, cleaned)

        audio: StageResult[AudioArtifact] = self._run_stage(
            "synthesize",
            PipelineState.SYNTHESIZING,
            lambda: self.synthesizer.synthesize(cleaned.value),
            control,
            trace,
        )
        if isinstance(audio, Failure):
            return self._fail(trace, audio)

        if audio.value.size_bytes == 0:
            return self._fail(
                trace,
                Failure(FailureReason("synthesize", "invalid_input", "Synthesized audio is empty.")),
            )

        boundary = self._check_boundary("deliver", control)
        if boundary is not None:
            return self._fail(trace, boundary)

        trace.outcome = audio
        return audio

    def process(self, request: ConversionRequest, control: RunControl | None = None) -> RunTrace:
        """Run all stages and deliver exactly one response for `request`."""

        if self.delivery is None:
            raise ValueError("A result delivery collaborator is required to process requests.")

        trace = self.new_trace(request)
        self._log("pipeline", "accepted", run_id=trace.run_id, conversation=request.conversation_id)
        outcome = self.run(request, control, trace)

        trace.transition(PipelineState.DELIVERING)
        self._on_stage_start("deliver", trace)
        try:
            self.delivery.deliver(request.conversation_id, outcome)
        except DeliveryError as exc:
            trace.delivery_error = exc.kind
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(
                    "deliver", type(exc).__name__, kind=exc.kind, run_id=trace.run_id
                )
        else:
            self._on_stage_complete("deliver", trace)
        trace.transition(PipelineState.DONE)
        return trace

    def _run_stage(
        self,
        stage: str,
        state: PipelineState,
        action: Callable[[], _StageValue],
        control: RunControl,
        trace: RunTrace,
        release_grace_seconds: float = 0.0,
    ) -> StageResult[_StageValue]:
        """Execute one stage under the run deadline and wrap its result."""

        boundary = self._check_boundary(stage, control)
        if boundary is not None:
            return boundary

        trace.transition(state)
        self._on_stage_start(stage, trace)
        try:
            value = call_with_deadline(action, control, release_grace_seconds)
        except StageCancelled:
            self._on_stage_failure(stage, "StageCancelled", "cancelled", trace)
            return Failure(FailureReason(stage, "cancelled", f"Cancelled during `{stage}`."))
        except StageDeadlineExceeded:
            self._on_stage_failure(stage, "StageDeadlineExceeded", "timed_out", trace)
            return Failure(
                FailureReason(stage, "timed_out", f"Run deadline elapsed during `{stage}`.")
            )
        except PipelineStageError as exc:
            self._on_stage_failure(stage, type(exc).__name__, exc.kind, trace)
            return Failure(FailureReason(stage, exc.kind, exc.detail))
        except Exception as exc:
            kind = _UNEXPECTED_FAILURE_KINDS[stage]
            self._on_stage_failure(stage, type(exc).__name__, kind, trace)
            return Failure(
                FailureReason(stage, kind, f"Unexpected {type(exc).__name__} in `{stage}`.")
            )

        self._on_stage_complete(stage, trace)
        return Success(value)

    def _check_boundary(self, next_stage: str, control: RunControl) -> Failure | None:
        """Return a failure when the run was cancelled or its deadline passed."""

        if control.cancelled:
            return Failure(
                FailureReason("pipeline", "cancelled", f"Cancelled before `{next_stage}`.")
            )
        if control.expired():
            return Failure(
                FailureReason("pipeline", "timed_out", f"Run deadline elapsed before `{next_stage}`.")
            )
        return None

    def _fail(self, trace: RunTrace, failure: Failure) -> Failure:
        """Record a terminal failure on the trace."""

        trace.transition(PipelineState.FAILED)
        trace.outcome = failure
        self._log(
            "pipeline",
            "failed",
            run_id=trace.run_id,
            failed_stage=failure.reason.stage,
            kind=failure.reason.kind,
        )
        return failure

    def _stage_position(self, stage_name: str) -> tuple[int, int] | None:
        """Return 1-based stage index and total stage count for known stages."""

        try:
            index = self._PHASE_SEQUENCE.index(stage_name) + 1
        except ValueError:
            return None
        return index, len(self._PHASE_SEQUENCE)

    def _on_stage_start(self, stage: str, trace: RunTrace) -> None:
        """Emit start events to the progress callback and structured logger."""

        stage_position = self._stage_position(stage)
        if stage_position and self._stage_progress_callback is not None:
            self._stage_progress_callback(stage, stage_position[0], stage_position[1])
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, run_id=trace.run_id)

    def _on_stage_complete(self, stage: str, trace: RunTrace) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, run_id=trace.run_id)

    def _on_stage_failure(self, stage: str, error_type: str, kind: str, trace: RunTrace) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage, error_type, kind=kind, run_id=trace.run_id)

    def _log(self, stage: str, event: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_event(stage, event, **context)
