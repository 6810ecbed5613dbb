"""Pipeline orchestration package.

Exports the conversion pipeline facade and per-run control helpers.
"""

from .orchestrator import ConversionPipeline, RunTrace
from .runtime import RunControl, StageCancelled, StageDeadlineExceeded, call_with_deadline

__all__ = [
    "ConversionPipeline",
    "RunControl",
    "RunTrace",
    "StageCancelled",
    "StageDeadlineExceeded",
    "call_with_deadline",
]
