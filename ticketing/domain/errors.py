"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    USER_NOT_FOUND = "USER_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    ORDER_NOT_CANCELLABLE = "ORDER_NOT_CANCELLABLE"
    EVENT_CANCELLED = "EVENT_CANCELLED"
    EVENT_ALREADY_CANCELLED = "EVENT_ALREADY_CANCELLED"
    NOT_EVENT_ORGANIZER = "NOT_EVENT_ORGANIZER"
    PARTICIPANT_MISMATCH = "PARTICIPANT_MISMATCH"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_EVENT = "INVALID_EVENT"
    INVALID_REGISTRATION = "INVALID_REGISTRATION"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """A lookup by id missed."""


class InsufficientInventoryError(DomainError):
    """Raised when an order asks for more tickets than remain."""

    def __init__(self, event_id: int, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f"Not enough tickets available. Available: {available}",
        )
        self.event_id = event_id
        self.requested = requested
        self.available = available


class InvalidStateError(DomainError):
    """The entity is not in a state that allows the operation."""


class ForbiddenError(DomainError):
    """The requester may not act on the entity."""


class ValidationError(DomainError):
    """Input rejected before touching any state."""


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        super().__init__(code=ErrorCode.USER_NOT_FOUND, message="User not found")
        self.user_id = user_id


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int) -> None:
        super().__init__(code=ErrorCode.ORDER_NOT_FOUND, message="Order not found")
        self.order_id = order_id


class OrderNotCancellableError(InvalidStateError):
    """Raised when cancelling an order that is not CONCLUDED."""

    def __init__(self, order_id: int, status: str) -> None:
        super().__init__(
            code=ErrorCode.ORDER_NOT_CANCELLABLE,
            message="Only concluded orders can be cancelled",
        )
        self.order_id = order_id
        self.status = status


class EventCancelledError(InvalidStateError):
    """Raised when an operation targets an event the organizer cancelled."""

    def __init__(self, event_id: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_CANCELLED,
            message="Event was cancelled by the organizer",
        )
        self.event_id = event_id


class EventAlreadyCancelledError(InvalidStateError):
    def __init__(self, event_id: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_ALREADY_CANCELLED,
            message="Event has already been cancelled",
        )
        self.event_id = event_id


class NotEventOrganizerError(ForbiddenError):
    """Raised when a user acts on an event they do not organize."""

    def __init__(self, user_id: int, event_id: int | None = None) -> None:
        super().__init__(
            code=ErrorCode.NOT_EVENT_ORGANIZER,
            message="You do not have permission to manage this event",
        )
        self.user_id = user_id
        self.event_id = event_id


class ParticipantMismatchError(ValidationError):
    def __init__(self, names: int, emails: int) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_MISMATCH,
            message="Each ticket needs exactly one participant name and email",
        )
        self.names = names
        self.emails = emails


class InvalidQuantityError(ValidationError):
    def __init__(self, quantity: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message="Quantity must be at least one ticket",
        )
        self.quantity = quantity


class InvalidEventError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_EVENT, message=message)


class InvalidRegistrationError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_REGISTRATION, message=message)


class EmailAlreadyRegisteredError(ValidationError):
    def __init__(self, email: str) -> None:
        super().__init__(
            code=ErrorCode.EMAIL_ALREADY_REGISTERED,
            message="Email is already registered",
        )
        self.email = email
