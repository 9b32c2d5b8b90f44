"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Error families surfaced to callers."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_ID = "INVALID_ID"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    MISSING_CODE = "MISSING_CODE"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    EVENT_NOT_OPEN = "EVENT_NOT_OPEN"
    WAITLISTED = "WAITLISTED"
    TICKET_CANCELLED = "TICKET_CANCELLED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    REGISTRATION_CANCELLED = "REGISTRATION_CANCELLED"
    QUANTITY_EXCEEDS = "QUANTITY_EXCEEDS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    QUANTITY_BELOW_ISSUED = "QUANTITY_BELOW_ISSUED"
    TICKET_ALREADY_USED = "TICKET_ALREADY_USED"
    TICKET_USED = "TICKET_USED"
    TICKET_NOT_VALID = "TICKET_NOT_VALID"
    ATOMIC_OPERATION_FAILED = "ATOMIC_OPERATION_FAILED"


_KIND_BY_CODE = {
    ErrorCode.INVALID_INPUT: ErrorKind.VALIDATION,
    ErrorCode.INVALID_ID: ErrorKind.VALIDATION,
    ErrorCode.INVALID_QUANTITY: ErrorKind.VALIDATION,
    ErrorCode.MISSING_CODE: ErrorKind.VALIDATION,
    ErrorCode.EVENT_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.FORBIDDEN: ErrorKind.FORBIDDEN,
    ErrorCode.EVENT_NOT_OPEN: ErrorKind.FORBIDDEN,
    ErrorCode.WAITLISTED: ErrorKind.FORBIDDEN,
    ErrorCode.TICKET_CANCELLED: ErrorKind.FORBIDDEN,
    ErrorCode.ALREADY_REGISTERED: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_CANCELLED: ErrorKind.CONFLICT,
    ErrorCode.REGISTRATION_CANCELLED: ErrorKind.CONFLICT,
    ErrorCode.QUANTITY_EXCEEDS: ErrorKind.CONFLICT,
    ErrorCode.CAPACITY_EXCEEDED: ErrorKind.CONFLICT,
    ErrorCode.QUANTITY_BELOW_ISSUED: ErrorKind.CONFLICT,
    ErrorCode.TICKET_ALREADY_USED: ErrorKind.CONFLICT,
    ErrorCode.TICKET_USED: ErrorKind.CONFLICT,
    ErrorCode.TICKET_NOT_VALID: ErrorKind.CONFLICT,
    ErrorCode.ATOMIC_OPERATION_FAILED: ErrorKind.INTERNAL,
}


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    @property
    def kind(self) -> ErrorKind:
        return _KIND_BY_CODE[self.code]

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidInputError(DomainError):
    """Raised when a request body does not have the expected shape."""

    def __init__(self, message: str = "Invalid request body") -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, field: str = "id") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {field} format",
        )
        self.field = field


class InvalidQuantityError(DomainError):
    """Raised when a quantity is missing, not an integer or below one."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message="Quantity must be a positive integer",
        )


class MissingTicketCodeError(DomainError):
    """Raised when a scan or validation request carries no code."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MISSING_CODE,
            message="Ticket code required",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class RegistrationNotFoundError(DomainError):
    """Raised when a registration is not found."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="Registration not found",
        )
        self.registration_id = registration_id


class TicketNotFoundError(DomainError):
    """Raised when a ticket id or code does not match any ticket."""

    def __init__(self, reference: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Invalid or non-existent ticket",
        )
        self.reference = reference


class ForbiddenError(DomainError):
    """Raised when the actor is neither the owner nor an administrator."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class EventNotOpenError(DomainError):
    """Raised when an event does not accept registrations or tickets."""

    def __init__(self, reason: str = "Event is not open for registration") -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_OPEN, message=reason)


class WaitlistedError(DomainError):
    """Raised when tickets are requested for a waitlisted registration."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.WAITLISTED,
            message=(
                "Tickets cannot be issued while registration is waitlisted. "
                "Please wait until you are confirmed."
            ),
        )


class TicketCancelledError(DomainError):
    """Raised when a cancelled ticket is presented at the door."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_CANCELLED,
            message="Ticket is cancelled",
        )


class AlreadyRegisteredError(DomainError):
    """Raised when the user already holds an active registration."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="User already registered for this event",
        )
        self.event_id = event_id


class AlreadyCancelledError(DomainError):
    """Raised when a registration or ticket is cancelled a second time."""

    def __init__(self, what: str = "Registration") -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CANCELLED,
            message=f"{what} already cancelled",
        )


class RegistrationCancelledError(DomainError):
    """Raised when a cancelled registration is issued against or resized."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CANCELLED,
            message="Registration is cancelled",
        )


class QuantityExceedsError(DomainError):
    """Raised when issuing would overshoot the registration's allotment."""

    def __init__(self, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.QUANTITY_EXCEEDS,
            message="Requested quantity exceeds registration allocation",
        )
        self.remaining = remaining


class CapacityExceededError(DomainError):
    """Raised when a confirmed registration cannot grow into free seats."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message="Not enough capacity to increase quantity",
        )


class QuantityBelowIssuedError(DomainError):
    """Raised when a registration would shrink below its issued tickets."""

    def __init__(self, issued: int) -> None:
        super().__init__(
            code=ErrorCode.QUANTITY_BELOW_ISSUED,
            message="Quantity cannot drop below the number of issued tickets",
        )
        self.issued = issued


class TicketAlreadyUsedError(DomainError):
    """Raised by the read-only validation of a consumed ticket."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_ALREADY_USED,
            message="Ticket already used",
        )


class TicketUsedError(DomainError):
    """Raised when a used ticket is cancelled."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_USED,
            message="Used tickets cannot be cancelled",
        )


class TicketNotValidError(DomainError):
    """Raised when a code or QR change targets a ticket that is not valid."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_VALID,
            message=f"Ticket is {status}",
        )


class AtomicOperationError(DomainError):
    """Raised when the transactional store fails; nothing was applied."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ATOMIC_OPERATION_FAILED,
            message="The operation could not be completed",
        )
