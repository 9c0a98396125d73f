"""Time-based pricing for a finished allocation."""

from __future__ import annotations

import math

from backend.domain.exceptions import ComputationError
from backend.domain.models import Allocation, BillingQuote, Parking


NANOSECONDS_PER_HOUR = 3_600_000_000_000


def compute_price(allocation: Allocation, parking: Parking, now: int) -> BillingQuote:
    """Bill `price_per_hour` for the hours elapsed since the reservation.

    No rounding, minimum charge or clamping is applied: fractional hours are
    billed as-is and a clock that reads earlier than the reservation yields a
    negative duration and price.
    """
    if not math.isfinite(parking.price_per_hour):
        raise ComputationError(
            f"Parking slot {parking.id} has a non-numeric price: {parking.price_per_hour!r}"
        )
    duration_hours = (now - allocation.created_date) / NANOSECONDS_PER_HOUR
    price = parking.price_per_hour * duration_hours
    if not math.isfinite(price):
        raise ComputationError(
            f"Price for parking slot {parking.id} overflowed after {duration_hours} hours"
        )
    return BillingQuote(duration_hours=duration_hours, price=price)
