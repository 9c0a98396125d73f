"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.services.allocation_service import AllocationService
from backend.services.auth_service import AuthService, MissingCredentialsError
from backend.services.slot_service import SlotRegistryService
from backend.services.valet_service import ValetService


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name.replace('_', ' ').capitalize()} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService()
        request.app.state.auth_service = service
    return service


def get_slot_service(request: Request) -> SlotRegistryService:
    return _service_from_state(request, "slot_service")


def get_allocation_service(request: Request) -> AllocationService:
    return _service_from_state(request, "allocation_service")


def get_valet_service(request: Request) -> ValetService:
    return _service_from_state(request, "valet_service")


async def get_caller_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    try:
        return auth_service.resolve_caller(
            credentials.credentials if credentials is not None else None
        )
    except MissingCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
