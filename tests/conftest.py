from __future__ import annotations

from dataclasses import replace

import pytest

from backend.repository.data_repository import DataRepository
from backend.services.allocation_service import AllocationService
from backend.services.auth_service import AuthService
from backend.services.billing_service import NANOSECONDS_PER_HOUR
from backend.services.slot_service import SlotRegistryService
from backend.services.valet_service import ValetService
from backend.utils.config import get_settings


START_NS = 1_700_000_000_000_000_000


class FakeClock:
    """Nanosecond clock advanced by hand."""

    def __init__(self, start: int = START_NS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, hours: float) -> None:
        self.now += int(hours * NANOSECONDS_PER_HOUR)


@pytest.fixture
def settings(tmp_path):
    return replace(get_settings(), database_path=tmp_path / "parking_test.db")


@pytest.fixture
def repository(settings) -> DataRepository:
    repository = DataRepository(settings)
    repository.initialize_database()
    return repository


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def slot_service(repository, settings, clock) -> SlotRegistryService:
    return SlotRegistryService(repository=repository, settings=settings, clock=clock)


@pytest.fixture
def allocation_service(repository, settings, clock) -> AllocationService:
    return AllocationService(repository=repository, settings=settings, clock=clock)


@pytest.fixture
def valet_service(repository, allocation_service, settings, clock) -> ValetService:
    return ValetService(
        repository=repository,
        allocation_service=allocation_service,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def principals() -> dict[str, str]:
    auth = AuthService()
    return {
        "owner": auth.resolve_caller("owner-token"),
        "alice": auth.resolve_caller("alice-token"),
        "bob": auth.resolve_caller("bob-token"),
    }


@pytest.fixture
def owned_lot(slot_service, principals) -> SlotRegistryService:
    slot_service.init_owner(name="Lot A", caller=principals["owner"])
    return slot_service
