"""Domain records for the parking lot: owner, slots, allocations and valet bookings.

All timestamps are integer nanoseconds since the epoch. Records reference each
other only by id; related records are always re-read through the repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class AllocationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class Owner:
    id: str
    name: str
    owner: str
    created_date: int
    updated_at: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "created_date": self.created_date,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class Parking:
    """A single slot. `active_allocation_id` is set exactly while occupied."""

    id: str
    parking_slot: str
    is_occupied: bool
    price_per_hour: float
    created_date: int
    updated_at: Optional[int] = None
    active_allocation_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parking_slot": self.parking_slot,
            "is_occupied": self.is_occupied,
            "price_per_hour": self.price_per_hour,
            "created_date": self.created_date,
            "updated_at": self.updated_at,
            "active_allocation_id": self.active_allocation_id,
        }


@dataclass(frozen=True)
class Allocation:
    id: str
    parking_id: str
    client: str
    car_model: str
    created_date: int
    status: AllocationStatus = AllocationStatus.ACTIVE
    completed_date: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status is AllocationStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parking_id": self.parking_id,
            "client": self.client,
            "car_model": self.car_model,
            "created_date": self.created_date,
            "status": self.status.value,
            "completed_date": self.completed_date,
        }


@dataclass(frozen=True)
class Valet:
    id: str
    allocation: str
    client_location: str
    created_date: int
    updated_at: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "allocation": self.allocation,
            "client_location": self.client_location,
            "created_date": self.created_date,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class BillingQuote:
    duration_hours: float
    price: float


@dataclass(frozen=True)
class ReservationConfirmation:
    allocation_id: str
    parking_id: str
    message: str


@dataclass(frozen=True)
class PickupReceipt:
    allocation_id: str
    msg: str
    price: float
    duration_hours: float


@dataclass(frozen=True)
class ValetReceipt:
    valet_id: str
    allocation_id: str
    msg: str
    price: float
