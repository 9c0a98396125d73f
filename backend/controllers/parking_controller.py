"""HTTP controller layer for owner, slot, allocation and valet operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

from backend.controllers.dependencies import (
    get_allocation_service,
    get_caller_identity,
    get_slot_service,
    get_valet_service,
)
from backend.domain.exceptions import (
    ComputationError,
    NotFoundError,
    ParkingServiceError,
    PreconditionError,
    UnauthorizedError,
    ValidationError,
)
from backend.domain.models import Allocation, Owner, Parking, Valet
from backend.services.allocation_service import AllocationService
from backend.services.slot_service import SlotRegistryService
from backend.services.valet_service import ValetService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["parking"])


_STATUS_BY_ERROR: tuple[tuple[type[ParkingServiceError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PreconditionError, status.HTTP_409_CONFLICT),
    (ComputationError, 422),
)


def _to_http_error(exc: ParkingServiceError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _unexpected(operation: str) -> HTTPException:
    logger.exception("Unexpected failure during %s", operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {operation}",
    )


class OwnerRequest(BaseModel):
    name: str = ""


class OwnerResponse(BaseModel):
    id: str
    name: str
    owner: str
    created_date: int
    updated_at: Optional[int] = None

    @classmethod
    def from_domain(cls, owner: Owner) -> "OwnerResponse":
        return cls(**owner.to_dict())


class ParkingPayload(BaseModel):
    parking_slot: str = ""
    price: StrictStr | StrictFloat | StrictInt | None = None


class ParkingResponse(BaseModel):
    id: str
    parking_slot: str
    is_occupied: bool
    price_per_hour: float
    created_date: int
    updated_at: Optional[int] = None
    active_allocation_id: Optional[str] = None

    @classmethod
    def from_domain(cls, parking: Parking) -> "ParkingResponse":
        return cls(**parking.to_dict())


class IdResponse(BaseModel):
    id: str


class MessageResponse(BaseModel):
    message: str


class AllocationPayload(BaseModel):
    parking_id: str = ""
    car_model: str = ""


class ReservationResponse(BaseModel):
    allocation_id: str
    parking_id: str
    message: str


class AllocationResponse(BaseModel):
    id: str
    parking_id: str
    client: str
    car_model: str
    created_date: int
    status: str
    completed_date: Optional[int] = None

    @classmethod
    def from_domain(cls, allocation: Allocation) -> "AllocationResponse":
        return cls(**allocation.to_dict())


class CarResponse(BaseModel):
    msg: str
    price: float
    duration_hours: float


class ValetPayload(BaseModel):
    allocation_id: str = ""
    client_location: str = ""


class ValetReceiptResponse(BaseModel):
    valet_id: str
    msg: str
    price: float


class ValetResponse(BaseModel):
    id: str
    allocation: str
    client_location: str
    created_date: int
    updated_at: Optional[int] = None

    @classmethod
    def from_domain(cls, valet: Valet) -> "ValetResponse":
        return cls(**valet.to_dict())


class HealthResponse(BaseModel):
    status: str = Field(default="ok")


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.post("/owner", response_model=OwnerResponse, status_code=status.HTTP_201_CREATED)
async def init_owner(
    payload: OwnerRequest,
    caller: str = Depends(get_caller_identity),
    service: SlotRegistryService = Depends(get_slot_service),
) -> OwnerResponse:
    try:
        return OwnerResponse.from_domain(service.init_owner(name=payload.name, caller=caller))
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("initialize owner") from exc


@router.get("/owner", response_model=OwnerResponse)
async def get_owner(service: SlotRegistryService = Depends(get_slot_service)) -> OwnerResponse:
    try:
        return OwnerResponse.from_domain(service.get_owner())
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc


@router.patch("/owner", response_model=OwnerResponse)
async def update_owner(
    payload: OwnerRequest,
    caller: str = Depends(get_caller_identity),
    service: SlotRegistryService = Depends(get_slot_service),
) -> OwnerResponse:
    try:
        return OwnerResponse.from_domain(
            service.update_owner_name(name=payload.name, caller=caller)
        )
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("update owner") from exc


@router.post("/slots", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
async def add_parking_slot(
    payload: ParkingPayload,
    caller: str = Depends(get_caller_identity),
    service: SlotRegistryService = Depends(get_slot_service),
) -> IdResponse:
    try:
        slot_id = service.add_slot(
            parking_slot=payload.parking_slot,
            price=payload.price,
            caller=caller,
        )
        return IdResponse(id=slot_id)
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("add parking slot") from exc


@router.get("/slots", response_model=list[ParkingResponse])
async def list_parking_slots(
    caller: str = Depends(get_caller_identity),
    service: SlotRegistryService = Depends(get_slot_service),
) -> list[ParkingResponse]:
    try:
        return [ParkingResponse.from_domain(slot) for slot in service.list_slots(caller=caller)]
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc


@router.get("/slots/available", response_model=list[ParkingResponse])
async def get_available_slots(
    service: SlotRegistryService = Depends(get_slot_service),
) -> list[ParkingResponse]:
    try:
        return [ParkingResponse.from_domain(slot) for slot in service.list_available()]
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("get available parking slots") from exc


@router.get("/slots/{slot_id}", response_model=ParkingResponse)
async def get_parking_slot(
    slot_id: str,
    service: SlotRegistryService = Depends(get_slot_service),
) -> ParkingResponse:
    try:
        return ParkingResponse.from_domain(service.get_slot(slot_id))
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc


@router.put("/slots/{slot_id}", response_model=IdResponse)
async def update_parking_slot(
    slot_id: str,
    payload: ParkingPayload,
    caller: str = Depends(get_caller_identity),
    service: SlotRegistryService = Depends(get_slot_service),
) -> IdResponse:
    try:
        updated_id = service.update_slot(
            slot_id=slot_id,
            parking_slot=payload.parking_slot,
            price=payload.price,
            caller=caller,
        )
        return IdResponse(id=updated_id)
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("update parking slot") from exc


@router.delete("/slots/{slot_id}", response_model=MessageResponse)
async def delete_parking_slot(
    slot_id: str,
    caller: str = Depends(get_caller_identity),
    service: SlotRegistryService = Depends(get_slot_service),
) -> MessageResponse:
    try:
        return MessageResponse(message=service.delete_slot(slot_id=slot_id, caller=caller))
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("delete parking slot") from exc


@router.post(
    "/allocations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def get_parking_space(
    payload: AllocationPayload,
    caller: str = Depends(get_caller_identity),
    service: AllocationService = Depends(get_allocation_service),
) -> ReservationResponse:
    try:
        confirmation = service.reserve(
            parking_id=payload.parking_id,
            car_model=payload.car_model,
            caller=caller,
        )
        return ReservationResponse(
            allocation_id=confirmation.allocation_id,
            parking_id=confirmation.parking_id,
            message=confirmation.message,
        )
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("allocate parking space") from exc


@router.get("/allocations/{allocation_id}", response_model=AllocationResponse)
async def get_allocation(
    allocation_id: str,
    caller: str = Depends(get_caller_identity),
    service: AllocationService = Depends(get_allocation_service),
) -> AllocationResponse:
    try:
        return AllocationResponse.from_domain(
            service.get_allocation(allocation_id=allocation_id, caller=caller)
        )
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc


@router.post("/allocations/{allocation_id}/pickup", response_model=CarResponse)
async def pickup_car(
    allocation_id: str,
    caller: str = Depends(get_caller_identity),
    service: AllocationService = Depends(get_allocation_service),
) -> CarResponse:
    try:
        receipt = service.pickup(allocation_id=allocation_id, caller=caller)
        return CarResponse(
            msg=receipt.msg,
            price=receipt.price,
            duration_hours=receipt.duration_hours,
        )
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("pick up car") from exc


@router.post(
    "/valet",
    response_model=ValetReceiptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def valet_delivery(
    payload: ValetPayload,
    caller: str = Depends(get_caller_identity),
    service: ValetService = Depends(get_valet_service),
) -> ValetReceiptResponse:
    try:
        receipt = service.request_delivery(
            allocation_id=payload.allocation_id,
            client_location=payload.client_location,
            caller=caller,
        )
        return ValetReceiptResponse(valet_id=receipt.valet_id, msg=receipt.msg, price=receipt.price)
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("handle valet delivery") from exc


@router.get("/valets/{valet_id}", response_model=ValetResponse)
async def get_valet(
    valet_id: str,
    caller: str = Depends(get_caller_identity),
    service: ValetService = Depends(get_valet_service),
) -> ValetResponse:
    try:
        return ValetResponse.from_domain(service.get_valet(valet_id=valet_id, caller=caller))
    except ParkingServiceError as exc:
        raise _to_http_error(exc) from exc
