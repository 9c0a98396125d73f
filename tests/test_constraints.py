"""Tests for field validation and price parsing rules."""

from __future__ import annotations

import pytest

from backend.domain.constraints import (
    format_price,
    load_stored_price,
    parse_price_per_hour,
    require_text,
)
from backend.domain.exceptions import ComputationError, ValidationError


# --- require_text ---

def test_require_text_strips_surrounding_whitespace() -> None:
    assert require_text("  A1 ", "parking_slot") == "A1"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_require_text_rejects_blank_values(value) -> None:
    with pytest.raises(ValidationError, match="parking_slot cannot be empty"):
        require_text(value, "parking_slot")


# --- parse_price_per_hour ---

def test_price_text_is_parsed() -> None:
    assert parse_price_per_hour("10") == 10.0


def test_fractional_price_is_kept() -> None:
    """Unlike integer truncation, 2.5 stays 2.5."""
    assert parse_price_per_hour("2.5") == 2.5


def test_numeric_price_passes_through() -> None:
    assert parse_price_per_hour(7) == 7.0


def test_zero_price_passes() -> None:
    assert parse_price_per_hour("0") == 0.0


def test_non_numeric_price_raises() -> None:
    with pytest.raises(ValidationError, match="price must be a number"):
        parse_price_per_hour("ten")


@pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
def test_non_finite_price_raises(value) -> None:
    with pytest.raises(ValidationError):
        parse_price_per_hour(value)


def test_negative_price_raises() -> None:
    with pytest.raises(ValidationError, match=">= 0"):
        parse_price_per_hour("-1")


def test_boolean_price_raises() -> None:
    with pytest.raises(ValidationError):
        parse_price_per_hour(True)


# --- stored prices ---

def test_stored_price_round_trips_through_text() -> None:
    assert load_stored_price(format_price(12.75)) == 12.75


def test_corrupt_stored_price_is_a_computation_error() -> None:
    with pytest.raises(ComputationError):
        load_stored_price("twelve")


def test_non_finite_stored_price_is_a_computation_error() -> None:
    with pytest.raises(ComputationError):
        load_stored_price("nan")
