"""Telemetry and observability helpers.

This package emits structured run events for pipeline and bot auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
