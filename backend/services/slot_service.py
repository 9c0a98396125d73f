"""Owner lifecycle and the slot registry.

The lot has exactly one owner, created by the first successful `init_owner`
call. Only that owner may add, edit, delete or enumerate slots.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from backend.domain.constraints import parse_price_per_hour, require_text
from backend.domain.exceptions import (
    NoAvailableSlotsError,
    NotFoundError,
    OwnerAlreadyInitializedError,
    OwnerNotInitializedError,
    UnauthorizedError,
    ValidationError,
)
from backend.domain.models import Owner, Parking
from backend.repository.data_repository import DataRepository, EntityKind, StoreTransaction
from backend.services.auth_service import is_owner
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger
from backend.utils.runtime import Clock, IdFactory, new_record_id, now_ns


logger = get_logger(__name__)


def _require_slot_fields(parking_slot: str, price: str | float | None) -> None:
    if not parking_slot or price is None or (isinstance(price, str) and not price.strip()):
        raise ValidationError("Incomplete input data!")


def find_owner(store: StoreTransaction) -> Optional[Owner]:
    owners = store.list(EntityKind.OWNER)
    return owners[0] if owners else None


def require_owner(store: StoreTransaction, caller: str) -> Owner:
    """Return the owner record when `caller` is the owner, otherwise raise."""
    owner = find_owner(store)
    if owner is None:
        raise OwnerNotInitializedError("Owner has not been initialized")
    if not is_owner(owner, caller):
        logger.warning("Owner-only action refused for caller %s", caller)
        raise UnauthorizedError("Action reserved for the contract owner")
    return owner


class SlotRegistryService:
    """Manages the owner record and the Parking collection."""

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

    def init_owner(self, *, name: str, caller: str) -> Owner:
        with self._repository.transaction() as store:
            if find_owner(store) is not None:
                raise OwnerAlreadyInitializedError("Owner has already been initialized")
            owner = Owner(
                id=self._id_factory(),
                name=require_text(name, "name"),
                owner=caller,
                created_date=self._clock(),
            )
            store.put(EntityKind.OWNER, owner)
        logger.info("Owner %s initialized for principal %s", owner.id, caller)
        return owner

    def get_owner(self) -> Owner:
        with self._repository.transaction() as store:
            owner = find_owner(store)
        if owner is None:
            raise OwnerNotInitializedError("Owner has not been initialized")
        return owner

    def update_owner_name(self, *, name: str, caller: str) -> Owner:
        with self._repository.transaction() as store:
            owner = require_owner(store, caller)
            updated = replace(
                owner,
                name=require_text(name, "name"),
                updated_at=self._clock(),
            )
            store.put(EntityKind.OWNER, updated)
        logger.info("Owner %s renamed", updated.id)
        return updated

    def add_slot(self, *, parking_slot: str, price: str | float, caller: str) -> str:
        with self._repository.transaction() as store:
            require_owner(store, caller)
            _require_slot_fields(parking_slot, price)
            parking = Parking(
                id=self._id_factory(),
                parking_slot=require_text(parking_slot, "parking_slot"),
                is_occupied=False,
                price_per_hour=parse_price_per_hour(price),
                created_date=self._clock(),
            )
            store.put(EntityKind.PARKING, parking)
        logger.info("Parking slot %s (%s) added", parking.id, parking.parking_slot)
        return parking.id

    def list_available(self) -> list[Parking]:
        with self._repository.transaction() as store:
            slots = [
                slot
                for slot in store.list(EntityKind.PARKING)
                if not slot.is_occupied
            ]
        if not slots:
            raise NoAvailableSlotsError("No available parking slots currently")
        return slots

    def list_slots(self, *, caller: str) -> list[Parking]:
        with self._repository.transaction() as store:
            require_owner(store, caller)
            return store.list(EntityKind.PARKING)

    def get_slot(self, slot_id: str) -> Parking:
        with self._repository.transaction() as store:
            parking = store.get(EntityKind.PARKING, require_text(slot_id, "id"))
        if parking is None:
            raise NotFoundError("Parking slot not found")
        return parking

    def update_slot(
        self,
        *,
        slot_id: str,
        parking_slot: str,
        price: str | float,
        caller: str,
    ) -> str:
        slot_id = require_text(slot_id, "id")
        with self._repository.transaction() as store:
            require_owner(store, caller)
            _require_slot_fields(parking_slot, price)
            label = require_text(parking_slot, "parking_slot")
            price_per_hour = parse_price_per_hour(price)
            parking = store.get(EntityKind.PARKING, slot_id)
            if parking is None:
                raise NotFoundError("Parking slot not found")
            updated = replace(
                parking,
                parking_slot=label,
                price_per_hour=price_per_hour,
                updated_at=self._clock(),
            )
            store.put(EntityKind.PARKING, updated)
        logger.info("Parking slot %s updated", slot_id)
        return slot_id

    def delete_slot(self, *, slot_id: str, caller: str) -> str:
        """Remove a slot even while occupied; its allocation can no longer be billed."""
        slot_id = require_text(slot_id, "id")
        with self._repository.transaction() as store:
            require_owner(store, caller)
            parking = store.get(EntityKind.PARKING, slot_id)
            if parking is None:
                raise NotFoundError("Parking slot not found")
            if parking.is_occupied:
                logger.warning(
                    "Deleting occupied parking slot %s; allocation %s is left dangling",
                    slot_id,
                    parking.active_allocation_id,
                )
            store.delete(EntityKind.PARKING, slot_id)
        logger.info("Parking slot %s deleted", slot_id)
        return f"Parking slot of ID: {slot_id} removed successfully"
