"""Field-level validation rules applied before anything is written."""

from __future__ import annotations

import math

from backend.domain.exceptions import ComputationError, ValidationError


def require_text(value: str | None, field_name: str) -> str:
    """Return the stripped value, rejecting missing or blank input."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return str(value).strip()


def parse_price_per_hour(value: str | float | int | None) -> float:
    """Parse a client-supplied hourly price into a finite, non-negative number."""
    if isinstance(value, bool):
        raise ValidationError("price must be a number")
    if isinstance(value, (int, float)):
        price = float(value)
    else:
        text = require_text(value, "price")
        try:
            price = float(text)
        except ValueError as exc:
            raise ValidationError(f"price must be a number, got {text!r}") from exc
    if not math.isfinite(price):
        raise ValidationError("price must be a finite number")
    if price < 0:
        raise ValidationError("price must be >= 0")
    return price


def load_stored_price(value: object) -> float:
    """Parse a persisted price; a corrupt row is a billing failure, not bad input."""
    try:
        price = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ComputationError(f"Stored price {value!r} is not a number") from exc
    if not math.isfinite(price):
        raise ComputationError(f"Stored price {value!r} is not a finite number")
    return price


def format_price(price: float) -> str:
    """Canonical text form used for persistence."""
    return repr(float(price))
