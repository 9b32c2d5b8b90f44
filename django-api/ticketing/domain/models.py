"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    Quantity,
    RegistrationId,
    TicketCode,
    TicketId,
    UserId,
)


class EventStatus(str, Enum):
    """Lifecycle of an event."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ModerationStatus(str, Enum):
    """Review state; only approved events take registrations."""

    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class RegistrationStatus(str, Enum):
    """Status of a registration."""

    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"


class TicketStatus(str, Enum):
    """A ticket moves from valid to used or cancelled, never back."""

    VALID = "valid"
    USED = "used"
    CANCELLED = "cancelled"


class Role(str, Enum):
    """Role carried by an authenticated principal."""

    STUDENT = "student"
    ORGANIZER = "organizer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """A verified principal handed to the core by the identity layer."""

    user_id: UserId
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_authenticated(self) -> bool:
        return True


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event and its capacity ledger fields."""

    id: EventId
    title: str
    organizer_id: UserId | None
    capacity: Capacity
    status: EventStatus
    moderation_status: ModerationStatus
    ends_at: datetime | None = None
    registered_users: tuple[UserId, ...] = ()
    waitlist: tuple[RegistrationId, ...] = ()

    def is_open_for_registration(self, now: datetime) -> bool:
        if self.status not in (EventStatus.UPCOMING, EventStatus.ONGOING):
            return False
        if self.moderation_status is not ModerationStatus.APPROVED:
            return False
        return self.ends_at is None or self.ends_at > now

    def accepts_ticketing(self, now: datetime) -> bool:
        if self.status not in (EventStatus.UPCOMING, EventStatus.ONGOING):
            return False
        return self.ends_at is None or self.ends_at > now


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration.

    ``ticket_ids`` lists the registration's non-cancelled tickets in creation
    order and is derived from the Ticket rows; ``tickets_issued`` is its
    length, never a separately stored counter.
    """

    id: RegistrationId
    user_id: UserId
    event_id: EventId
    quantity: Quantity
    status: RegistrationStatus
    created_at: datetime
    updated_at: datetime
    ticket_ids: tuple[TicketId, ...] = ()

    @property
    def tickets_issued(self) -> int:
        return len(self.ticket_ids)

    @property
    def remaining_allotment(self) -> int:
        return self.quantity.value - self.tickets_issued


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a Ticket."""

    id: TicketId
    code: TicketCode
    user_id: UserId
    event_id: EventId
    registration_id: RegistrationId
    status: TicketStatus
    qr_data_url: str
    qr_expires_at: datetime
    created_at: datetime
    scanned_at: datetime | None = None
    scanned_by: str | None = None


class ReservationVerdict(str, Enum):
    """Outcome of a capacity reservation attempt."""

    RESERVED = "reserved"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Reservation:
    """Outcome of a capacity ledger reservation attempt."""

    verdict: ReservationVerdict
    event: Event
    reason: str | None = None


@dataclass(frozen=True)
class Promotion:
    """A waitlisted registration admitted by the waitlist promoter."""

    registration_id: RegistrationId
    user_id: UserId
    event_id: EventId
    quantity: Quantity


class ScanOutcome(str, Enum):
    """Result codes reported at the door."""

    TICKET_VALID = "TICKET_VALID"
    TICKET_ALREADY_USED = "TICKET_ALREADY_USED"


@dataclass(frozen=True)
class ScanResult:
    """What a scan reports back to the scanning device."""

    outcome: ScanOutcome
    ticket: Ticket
    message: str
    reuse_alert: bool = False
    attempted_by: str | None = None


@dataclass(frozen=True)
class TicketView:
    """A read-only validation result."""

    ticket: Ticket
    message: str


@dataclass(frozen=True)
class EventAvailability:
    """Snapshot of an event's remaining seats and queue."""

    event_id: EventId
    capacity: int
    waitlist_length: int
    registered_count: int
    is_open: bool
    status: EventStatus
    ends_at: datetime | None = None
