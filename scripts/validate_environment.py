#!/usr/bin/env python3
"""Validate local parking service environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.repository.data_repository import DataRepository, EntityKind
from backend.services.allocation_service import AllocationService
from backend.services.auth_service import AuthService
from backend.services.billing_service import NANOSECONDS_PER_HOUR
from backend.services.slot_service import SlotRegistryService
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


class _SteppedClock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="parking-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    import_errors: list[str] = []
    for module_name in ("fastapi", "uvicorn", "pydantic", "httpx", "pytest"):
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "parking_validation.db",
        )
        repository = DataRepository(settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except RuntimeError as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Reserve, wait one hour, pick up
        try:
            clock = _SteppedClock()
            auth = AuthService()
            owner = auth.resolve_caller("validation-owner")
            client = auth.resolve_caller("validation-client")
            slots = SlotRegistryService(repository=repository, settings=settings, clock=clock)
            allocations = AllocationService(repository=repository, settings=settings, clock=clock)

            slots.init_owner(name="Validation Lot", caller=owner)
            slot_id = slots.add_slot(parking_slot="V1", price="10", caller=owner)
            confirmation = allocations.reserve(parking_id=slot_id, car_model="Test", caller=client)
            clock.now += NANOSECONDS_PER_HOUR
            receipt = allocations.pickup(allocation_id=confirmation.allocation_id, caller=client)
            if receipt.price != 10.0:
                raise RuntimeError(f"expected price 10.0, got {receipt.price}")
            if repository.count(EntityKind.ALLOCATION) != 1:
                raise RuntimeError("allocation was not persisted")
            ok, line = _print_result("Reservation and billing", True, f": price={receipt.price}")
        except Exception as exc:
            ok, line = _print_result("Reservation and billing", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Parking Service Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
