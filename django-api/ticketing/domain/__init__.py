from ticketing.domain.models import (
    Actor,
    Event,
    EventAvailability,
    EventStatus,
    ModerationStatus,
    Promotion,
    Registration,
    RegistrationStatus,
    Reservation,
    ReservationVerdict,
    Role,
    ScanOutcome,
    ScanResult,
    Ticket,
    TicketStatus,
    TicketView,
)
from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    Quantity,
    RegistrationId,
    TicketCode,
    TicketId,
    UserId,
)

__all__ = [
    "Actor",
    "Event",
    "EventAvailability",
    "EventStatus",
    "ModerationStatus",
    "Promotion",
    "Registration",
    "RegistrationStatus",
    "Reservation",
    "ReservationVerdict",
    "Role",
    "ScanOutcome",
    "ScanResult",
    "Ticket",
    "TicketStatus",
    "TicketView",
    "Capacity",
    "EventId",
    "Quantity",
    "RegistrationId",
    "TicketCode",
    "TicketId",
    "UserId",
]
