"""Valet delivery: a pickup plus a flat surcharge and a delivery location."""

from __future__ import annotations

from typing import Optional

from backend.domain.constraints import require_text
from backend.domain.exceptions import (
    NotFoundError,
    ParkingServiceError,
    UnauthorizedError,
    ValidationError,
)
from backend.domain.models import Valet, ValetReceipt
from backend.repository.data_repository import DataRepository, EntityKind
from backend.services.allocation_service import AllocationService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger
from backend.utils.runtime import Clock, IdFactory, new_record_id, now_ns


logger = get_logger(__name__)

VALET_ERROR_PREFIX = "Failed to handle valet delivery"


class ValetService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        allocation_service: Optional[AllocationService] = None,
        settings: Optional[Settings] = None,
        clock: Clock = now_ns,
        id_factory: IdFactory = new_record_id,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._allocation_service = allocation_service or AllocationService(
            repository=self._repository,
            settings=self._settings,
            clock=clock,
            id_factory=id_factory,
        )
        self._clock = clock
        self._id_factory = id_factory

    @property
    def surcharge(self) -> float:
        return float(self._settings.valet_surcharge)

    def request_delivery(
        self,
        *,
        allocation_id: str,
        client_location: str,
        caller: str,
    ) -> ValetReceipt:
        """Pick the car up and book its delivery in one transaction.

        Errors from the pickup keep their type; only the message gains the
        valet prefix.
        """
        location = (client_location or "").strip()
        if not allocation_id or not location:
            raise ValidationError("Incomplete input data!")

        with self._repository.transaction() as store:
            try:
                receipt = self._allocation_service.pickup(
                    allocation_id=allocation_id,
                    caller=caller,
                )
            except ParkingServiceError as exc:
                logger.warning("Valet delivery for allocation %s refused: %s", allocation_id, exc)
                raise type(exc)(f"{VALET_ERROR_PREFIX}: {exc}") from exc

            valet = Valet(
                id=self._id_factory(),
                allocation=receipt.allocation_id,
                client_location=location,
                created_date=self._clock(),
            )
            store.put(EntityKind.VALET, valet)

        total = receipt.price + self.surcharge
        logger.info("Valet %s booked for allocation %s, total %.2f", valet.id, valet.allocation, total)
        return ValetReceipt(
            valet_id=valet.id,
            allocation_id=valet.allocation,
            msg=f"Your car will be delivered to {valet.client_location} new total cost: ${total}",
            price=total,
        )

    def get_valet(self, *, valet_id: str, caller: str) -> Valet:
        with self._repository.transaction() as store:
            valet = store.get(EntityKind.VALET, require_text(valet_id, "id"))
            if valet is None:
                raise NotFoundError("Valet booking not found")
            allocation = store.get(EntityKind.ALLOCATION, valet.allocation)
        if allocation is None or allocation.client != caller:
            raise UnauthorizedError("Valet booking belongs to another client")
        return valet
