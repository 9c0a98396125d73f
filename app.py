"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn. It wires the
repository and services, registers the router, and creates the schema
before the first request.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.parking_controller import router as parking_router
from backend.repository.data_repository import DataRepository
from backend.services.allocation_service import AllocationService
from backend.services.auth_service import AuthService
from backend.services.slot_service import SlotRegistryService
from backend.services.valet_service import ValetService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger
from backend.utils.runtime import Clock, IdFactory, new_record_id, now_ns


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Clock = now_ns,
    id_factory: IdFactory = new_record_id,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    One repository instance backs every service so that a valet delivery and
    the pickup it wraps share a single store transaction.
    """
    settings = settings or get_settings()

    # --- Repository (store-wide lock + SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services ---
    slot_service = SlotRegistryService(
        repository=repository,
        settings=settings,
        clock=clock,
        id_factory=id_factory,
    )
    allocation_service = AllocationService(
        repository=repository,
        settings=settings,
        clock=clock,
        id_factory=id_factory,
    )
    valet_service = ValetService(
        repository=repository,
        allocation_service=allocation_service,
        settings=settings,
        clock=clock,
        id_factory=id_factory,
    )
    auth_service = AuthService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(parking_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.slot_service = slot_service
    app.state.allocation_service = allocation_service
    app.state.valet_service = valet_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI) -> None:
    """Idempotent: safe to re-run on server restarts."""
    repository: DataRepository = app.state.repository
    logger.info("Startup: initializing database schema")
    repository.initialize_database()
    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
