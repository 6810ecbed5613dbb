"""Text processing helpers used before speech synthesis."""

from .chunking import TextChunker

__all__ = ["TextChunker"]
