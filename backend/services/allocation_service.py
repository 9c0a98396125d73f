"""Reservation and pickup of parking slots by clients."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from backend.domain.exceptions import (
    AllocationClosedError,
    NotFoundError,
    SlotOccupiedError,
    UnauthorizedError,
    ValidationError,
)
from backend.domain.models import (
    Allocation,
    AllocationStatus,
    Parking,
    PickupReceipt,
    ReservationConfirmation,
)
from backend.repository.data_repository import DataRepository, EntityKind, StoreTransaction
from backend.services.billing_service import compute_price
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger
from backend.utils.runtime import Clock, IdFactory, new_record_id, now_ns


logger = get_logger(__name__)


class AllocationService:
    """Binds a client's car to a slot and closes the binding on pickup.

    A slot's `is_occupied` flag and `active_allocation_id` are always written
    in the same transaction as the allocation that flips them.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        clock: Clock = now_ns,
        id_factory: IdFactory = new_record_id,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._clock = clock
        self._id_factory = id_factory

    def reserve(self, *, parking_id: str, car_model: str, caller: str) -> ReservationConfirmation:
        parking_id = (parking_id or "").strip()
        car_model = (car_model or "").strip()
        if not parking_id or not car_model:
            raise ValidationError("Incomplete input data!")

        with self._repository.transaction() as store:
            parking = store.get(EntityKind.PARKING, parking_id)
            if parking is None:
                raise NotFoundError("Parking slot not found")
            if parking.is_occupied:
                raise SlotOccupiedError(f"Parking slot {parking.parking_slot} is already occupied")

            allocation = Allocation(
                id=self._id_factory(),
                parking_id=parking_id,
                client=caller,
                car_model=car_model,
                created_date=self._clock(),
            )
            store.put(EntityKind.ALLOCATION, allocation)
            store.put(
                EntityKind.PARKING,
                replace(parking, is_occupied=True, active_allocation_id=allocation.id),
            )

        logger.info(
            "Allocation %s reserved slot %s for %s",
            allocation.id,
            parking_id,
            caller,
        )
        return ReservationConfirmation(
            allocation_id=allocation.id,
            parking_id=parking_id,
            message=f"Your Parking ID: {allocation.id} your Slot: {parking.parking_slot}",
        )

    def get_allocation(self, *, allocation_id: str, caller: str) -> Allocation:
        with self._repository.transaction() as store:
            return self._load_owned_allocation(store, allocation_id, caller)

    def pickup(self, *, allocation_id: str, caller: str) -> PickupReceipt:
        """Release the slot and bill the elapsed time; the allocation is marked completed."""
        with self._repository.transaction() as store:
            allocation = self._load_owned_allocation(store, allocation_id, caller)
            if not allocation.is_active:
                raise AllocationClosedError(f"Allocation {allocation.id} has already been picked up")

            parking = store.get(EntityKind.PARKING, allocation.parking_id)
            if parking is None:
                raise NotFoundError("Parking slot not found")

            now = self._clock()
            quote = compute_price(allocation, parking, now)

            store.put(EntityKind.PARKING, self._released(parking))
            store.put(
                EntityKind.ALLOCATION,
                replace(allocation, status=AllocationStatus.COMPLETED, completed_date=now),
            )

        logger.info(
            "Allocation %s picked up after %.4f h, billed %.2f",
            allocation.id,
            quote.duration_hours,
            quote.price,
        )
        return PickupReceipt(
            allocation_id=allocation.id,
            msg=f"You have parked for: {quote.duration_hours} Hrs. Final cost: ${quote.price}",
            price=quote.price,
            duration_hours=quote.duration_hours,
        )

    @staticmethod
    def _released(parking: Parking) -> Parking:
        return replace(parking, is_occupied=False, active_allocation_id=None)

    @staticmethod
    def _load_owned_allocation(
        store: StoreTransaction,
        allocation_id: str,
        caller: str,
    ) -> Allocation:
        if not allocation_id or not allocation_id.strip():
            raise ValidationError("Invalid ID")
        allocation = store.get(EntityKind.ALLOCATION, allocation_id.strip())
        if allocation is None:
            raise NotFoundError("Allocation not found")
        if allocation.client != caller:
            logger.warning("Caller %s refused access to allocation %s", caller, allocation.id)
            raise UnauthorizedError(
                "You are not the owner of the car in the slot. Re-check the slot number"
            )
        return allocation
