"""Error taxonomy shared by the parking services.

Controllers map each family to one HTTP status; services never return error
values, they raise one of these.
"""


class ParkingServiceError(Exception):
    """Base class for every per-call failure raised by the service layer."""


class ValidationError(ParkingServiceError):
    """Raised when a required field is missing, empty or malformed."""


class UnauthorizedError(ParkingServiceError):
    """Raised when the caller may not perform the requested action."""


class NotFoundError(ParkingServiceError):
    """Raised when a referenced record does not exist."""


class NoAvailableSlotsError(NotFoundError):
    """Raised instead of returning an empty availability listing."""


class PreconditionError(ParkingServiceError):
    """Raised when the store is not in a state that allows the action."""


class OwnerNotInitializedError(PreconditionError):
    """Raised when an owner-gated action runs before initOwner."""


class OwnerAlreadyInitializedError(PreconditionError):
    """Raised on any second initOwner attempt."""


class SlotOccupiedError(PreconditionError):
    """Raised when reserving a slot that already holds an active allocation."""


class AllocationClosedError(PreconditionError):
    """Raised when picking up an allocation that was already billed."""


class ComputationError(ParkingServiceError):
    """Raised when a stored numeric field cannot be used for billing."""
