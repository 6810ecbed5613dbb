"""Unit tests for shared config value parsing helpers."""

from __future__ import annotations

import pytest

from blogvoice.parsing import (
    normalize_optional_string,
    parse_positive_float,
    parse_positive_int,
)


def test_normalize_optional_string_strips_and_maps_blank_to_none() -> None:
    """Blank and missing values should normalize to `None`."""

    assert normalize_optional_string("  value ") == "value"
    assert normalize_optional_string(42) == "42"
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string(None) is None


def test_parse_positive_int_accepts_ints_and_numeric_strings() -> None:
    """Positive integers should parse from native ints and trimmed strings."""

    assert parse_positive_int(7, "field") == 7
    assert parse_positive_int(" 4096 ", "field") == 4096


@pytest.mark.parametrize("value", [0, -3, "abc", "", True, "1.5"])
def test_parse_positive_int_rejects_invalid_values(value: object) -> None:
    """Non-positive, boolean, and non-numeric inputs should be rejected."""

    with pytest.raises(ValueError, match="`field` must be a positive integer"):
        parse_positive_int(value, "field")


def test_parse_positive_float_accepts_numbers_and_strings() -> None:
    """Positive floats should parse from ints, floats, and strings."""

    assert parse_positive_float(3, "timeout") == 3.0
    assert parse_positive_float(0.5, "timeout") == 0.5
    assert parse_positive_float(" 12.25 ", "timeout") == 12.25


@pytest.mark.parametrize("value", [0, -1.0, "soon", None, False])
def test_parse_positive_float_rejects_invalid_values(value: object) -> None:
    """Non-positive, boolean, and non-numeric inputs should be rejected."""

    with pytest.raises(ValueError, match="`timeout` must be a positive number"):
        parse_positive_float(value, "timeout")
