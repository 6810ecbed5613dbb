"""Bounded text segmentation for speech requests.

Responsibilities:
- Split cleaned text into ordered chunks no longer than a provider limit.
- Prefer line boundaries, then sentence boundaries, then whitespace, and only
  split inside a word when nothing else fits.
"""

from __future__ import annotations

import re


class TextChunker:
    """Split text into ordered chunks that each fit one speech request."""

    _COMMON_ABBREVIATIONS = frozenset(
        {
            "mr.",
            "mrs.",
            "ms.",
            "dr.",
            "prof.",
            "sr.",
            "jr.",
            "st.",
            "etc.",
            "e.g.",
            "i.e.",
            "vs.",
            "no.",
            "fig.",
            "al.",
        }
    )
    _SENTENCE_END = re.compile(r"[.!?…][\"')\]]*\s+")

    def __init__(self, max_chars: int) -> None:
        """Initialize chunker with the maximum characters allowed per chunk."""

        if max_chars <= 0:
            raise ValueError("`max_chars` must be a positive integer.")
        self.max_chars = max_chars

    def split(self, text: str) -> list[str]:
        """Return ordered non-empty chunks whose joined content preserves text order.

        Args:
            text: Cleaned prose, possibly multi-line.

        Returns:
            Chunks of at most `max_chars` characters. Whitespace at chunk
            boundaries is not preserved.
        """

        normalized = text.strip()
        if not normalized:
            return []
        return self._split_level(normalized, level=0)

    def _split_level(self, text: str, level: int) -> list[str]:
        """Split one text span using the boundary strategy of `level` and deeper."""

        if len(text) <= self.max_chars:
            return [text]

        if level == 0:
            parts, separator = text.splitlines(), "\n"
        elif level == 1:
            parts, separator = self._sentences(text), " "
        elif level == 2:
            parts, separator = text.split(), " "
        else:
            return self._hard_split(text)

        parts = [part.strip() for part in parts if part.strip()]
        if len(parts) <= 1:
            return self._split_level(text, level + 1)

        pieces: list[str] = []
        for part in parts:
            pieces.extend(self._split_level(part, level + 1))
        return self._pack(pieces, separator)

    def _pack(self, pieces: list[str], separator: str) -> list[str]:
        """Greedily join consecutive pieces while the joined text fits."""

        chunks: list[str] = []
        current = ""
        for piece in pieces:
            if not current:
                current = piece
                continue
            if len(current) + len(separator) + len(piece) <= self.max_chars:
                current = f"{current}{separator}{piece}"
                continue
            chunks.append(current)
            current = piece
        if current:
            chunks.append(current)
        return chunks

    def _sentences(self, text: str) -> list[str]:
        """Split text after sentence terminators, skipping common abbreviations."""

        sentences: list[str] = []
        start = 0
        for match in self._SENTENCE_END.finditer(text):
            end = match.end()
            candidate = text[start:end].strip()
            last_token = candidate.split()[-1].lower() if candidate else ""
            if last_token in self._COMMON_ABBREVIATIONS:
                continue
            sentences.append(candidate)
            start = end
        tail = text[start:].strip()
        if tail:
            sentences.append(tail)
        return sentences

    def _hard_split(self, text: str) -> list[str]:
        """Slice text at fixed offsets as the last-resort strategy."""

        return [
            text[offset : offset + self.max_chars]
            for offset in range(0, len(text), self.max_chars)
        ]
