"""Unit tests for bounded text chunking."""

from __future__ import annotations

import pytest

from blogvoice.text.chunking import TextChunker


def _words(chunks: list[str]) -> list[str]:
    return " ".join(chunks).split()


def test_short_text_is_one_chunk() -> None:
    """Text under the limit should be returned unchanged as one chunk."""

    assert TextChunker(100).split("  Hello world.\nMore text.  ") == [
        "Hello world.\nMore text."
    ]


def test_blank_text_yields_no_chunks() -> None:
    """Whitespace-only input should produce no chunks."""

    assert TextChunker(10).split(" \n\t ") == []


def test_invalid_limit_is_rejected() -> None:
    """The per-chunk limit must be positive."""

    with pytest.raises(ValueError, match="positive"):
        TextChunker(0)


def test_chunks_prefer_line_boundaries() -> None:
    """Lines that fit should be packed together and never split mid-line."""

    text = "\n".join(["a" * 30, "b" * 30, "c" * 30])

    chunks = TextChunker(65).split(text)

    assert chunks == [f"{'a' * 30}\n{'b' * 30}", "c" * 30]


def test_long_line_splits_on_sentence_boundaries() -> None:
    """A line over the limit should split after sentence terminators."""

    text = "First sentence is here. Second one follows! Third asks why? Fourth ends."

    chunks = TextChunker(45).split(text)

    assert chunks == [
        "First sentence is here. Second one follows!",
        "Third asks why? Fourth ends.",
    ]
    assert all(len(chunk) <= 45 for chunk in chunks)


def test_sentence_split_skips_common_abbreviations() -> None:
    """Abbreviations like `Dr.` should not end a sentence."""

    text = "Dr. Smith wrote this post. It is long."

    chunks = TextChunker(30).split(text)

    assert chunks == ["Dr. Smith wrote this post.", "It is long."]


def test_unbroken_text_is_hard_split() -> None:
    """Text without whitespace should be sliced at the limit."""

    chunks = TextChunker(4).split("abcdefghij")

    assert chunks == ["abcd", "efgh", "ij"]


def test_chunks_respect_limit_and_preserve_order_for_long_posts() -> None:
    """Every chunk should fit the limit and joined chunks keep the word order."""

    paragraphs = [
        " ".join(f"p{paragraph}w{word}." for word in range(120))
        for paragraph in range(12)
    ]
    text = "\n".join(paragraphs)

    chunks = TextChunker(300).split(text)

    assert len(chunks) > 1
    assert all(0 < len(chunk) <= 300 for chunk in chunks)
    assert _words(chunks) == text.split()
