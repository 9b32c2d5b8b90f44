"""Event service - event reads and event-wide operations.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    Actor,
    Event,
    EventAvailability,
    EventId,
    EventStatus,
    Promotion,
    RegistrationStatus,
)
from ticketing.domain.errors import EventNotFoundError
from ticketing.services.access import OrganizationDirectory, ensure_admin, ensure_event_staff
from ticketing.services.capacity_ledger import CapacityLedger
from ticketing.services.inputs import parse_id
from ticketing.services.waitlist_promoter import WaitlistPromoter
from ticketing.stores.interfaces import (
    EventStore,
    RegistrationStore,
    TicketStore,
    TransactionManager,
)

logger = logging.getLogger(__name__)


class EventService:
    """Service for event reads, cancellation and manual promotion."""

    def __init__(
        self,
        tx: TransactionManager,
        events: EventStore,
        registrations: RegistrationStore,
        tickets: TicketStore,
        ledger: CapacityLedger,
        promoter: WaitlistPromoter,
        directory: OrganizationDirectory,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._tx = tx
        self._events = events
        self._registrations = registrations
        self._tickets = tickets
        self._ledger = ledger
        self._promoter = promoter
        self._directory = directory
        self._clock = clock

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        eid = parse_id(EventId, event_id, "event_id")
        event = self._events.get_event(eid)
        if event is None:
            raise EventNotFoundError(str(eid))
        return event

    def availability(self, event_id: str) -> EventAvailability:
        event = self.get_event(event_id)
        return EventAvailability(
            event_id=event.id,
            capacity=event.capacity.value,
            waitlist_length=len(event.waitlist),
            registered_count=len(event.registered_users),
            is_open=event.is_open_for_registration(self._clock()) and event.capacity.value > 0,
            status=event.status,
            ends_at=event.ends_at,
        )

    def cancel_event(self, event_id: str, actor: Actor) -> Event:
        """Cancel an event and every live registration and ticket on it.

        Seats are released through the ledger so the counter stays
        consistent; nobody is promoted into a cancelled event.
        """
        ensure_admin(actor)
        eid = parse_id(EventId, event_id, "event_id")

        with self._tx.atomic():
            event = self._events.lock_event(eid)
            if event is None:
                raise EventNotFoundError(str(eid))
            self._events.save_status(replace(event, status=EventStatus.CANCELLED))

            cancelled = 0
            for registration in self._registrations.list_for_event(eid):
                if registration.status is RegistrationStatus.CANCELLED:
                    continue
                locked = self._registrations.lock_registration(registration.id)
                if locked is None or locked.status is RegistrationStatus.CANCELLED:
                    continue
                if locked.status is RegistrationStatus.CONFIRMED:
                    self._ledger.release(eid, locked.user_id, locked.quantity)
                else:
                    self._ledger.withdraw(eid, locked.id)
                self._tickets.cancel_for_registration(locked.id)
                self._registrations.update_registration(
                    locked.id, status=RegistrationStatus.CANCELLED
                )
                cancelled += 1

            result = self._events.get_event(eid)

        logger.info("Event %s cancelled by %s (%d registration(s))", eid, actor.user_id, cancelled)
        return result

    def promote_waitlist(self, event_id: str, actor: Actor) -> list[Promotion]:
        """Manual trigger for the waitlist promoter."""
        event = self.get_event(event_id)
        ensure_event_staff(actor, event, self._directory)
        return self._promoter.promote(event.id)
