"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Methods named ``lock_*``
and every write must run inside ``TransactionManager.atomic()``; callers
acquire locks in the order Event, Registration, Ticket.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from datetime import datetime

from ticketing.domain import (
    Event,
    EventId,
    Quantity,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Ticket,
    TicketCode,
    TicketId,
    UserId,
)


class TransactionManager(ABC):
    """Interface for the atomicity primitive."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open an all-or-nothing unit of work; nested calls join the outer one."""
        ...

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run callback once the outermost unit commits; dropped on rollback."""
        ...


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID holding its row lock until the unit ends."""
        ...

    @abstractmethod
    def save_ledger(self, event: Event) -> None:
        """Persist capacity, registered_users and waitlist."""
        ...

    @abstractmethod
    def save_status(self, event: Event) -> None:
        """Persist the lifecycle status."""
        ...


class RegistrationStore(ABC):
    """Interface for registration persistence operations."""

    @abstractmethod
    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        ...

    @abstractmethod
    def lock_registration(self, registration_id: RegistrationId) -> Registration | None:
        """Return a registration holding its row lock until the unit ends."""
        ...

    @abstractmethod
    def find_active(self, user_id: UserId, event_id: EventId) -> Registration | None:
        """Return the user's non-cancelled registration for the event, if any."""
        ...

    @abstractmethod
    def create_registration(self, registration: Registration) -> Registration:
        """Insert a registration.

        Raises:
            AlreadyRegisteredError: If an active registration exists for the pair.
        """
        ...

    @abstractmethod
    def update_registration(
        self,
        registration_id: RegistrationId,
        *,
        status: RegistrationStatus | None = None,
        quantity: Quantity | None = None,
    ) -> Registration:
        ...

    @abstractmethod
    def delete_registration(self, registration_id: RegistrationId) -> None:
        """Remove the row; owned tickets go with it."""
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Registration]:
        """Return registrations for an event, newest first."""
        ...

    @abstractmethod
    def list_for_user(self, user_id: UserId) -> list[Registration]:
        """Return registrations held by a user, newest first."""
        ...


class TicketStore(ABC):
    """Interface for ticket persistence operations."""

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        ...

    @abstractmethod
    def get_by_code(self, code: TicketCode) -> Ticket | None:
        ...

    @abstractmethod
    def lock_ticket(self, ticket_id: TicketId) -> Ticket | None:
        ...

    @abstractmethod
    def create_tickets(self, tickets: Sequence[Ticket]) -> list[Ticket]:
        ...

    @abstractmethod
    def consume(self, code: TicketCode, scanned_by: str, scanned_at: datetime) -> bool:
        """Transition the ticket with this code from valid to used.

        Check and write are a single conditional update. Returns True only for
        the caller that performed the transition.
        """
        ...

    @abstractmethod
    def force_used(
        self, ticket_id: TicketId, scanned_by: str, scanned_at: datetime
    ) -> Ticket | None:
        """Mark a ticket used regardless of its current status."""
        ...

    @abstractmethod
    def cancel_ticket(self, ticket_id: TicketId) -> bool:
        """Transition valid to cancelled; returns False if the ticket was not valid."""
        ...

    @abstractmethod
    def cancel_for_registration(self, registration_id: RegistrationId) -> int:
        """Cancel every non-cancelled ticket of a registration; returns the count."""
        ...

    @abstractmethod
    def replace_code(
        self,
        ticket_id: TicketId,
        code: TicketCode,
        qr_data_url: str,
        qr_expires_at: datetime,
    ) -> bool:
        """Swap the code of a valid ticket; returns False if it is no longer valid."""
        ...

    @abstractmethod
    def refresh_qr(
        self, ticket_id: TicketId, qr_data_url: str, qr_expires_at: datetime
    ) -> Ticket | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Ticket]:
        ...

    @abstractmethod
    def list_for_user(self, user_id: UserId) -> list[Ticket]:
        ...
