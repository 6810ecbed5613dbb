"""Audio helpers for joining synthesized speech segments."""

from .merger import AudioConcatenator, mime_type_for_format

__all__ = ["AudioConcatenator", "mime_type_for_format"]
