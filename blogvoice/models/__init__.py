"""Shared typed data models for Blogvoice.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
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

__all__ = [
    "AudioArtifact",
    "CleanedText",
    "ConversionRequest",
    "Failure",
    "FailureReason",
    "PipelineOutcome",
    "PipelineState",
    "RawPageText",
    "StageResult",
    "Success",
]
