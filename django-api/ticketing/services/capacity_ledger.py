"""Event capacity ledger.

The only writer of an event's ``capacity``, ``registered_users`` and
``waitlist``. Each entry point is one read-modify-write against the locked
event row, which makes the event row the serialization point for every
capacity-affecting operation.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    Event,
    EventId,
    EventStatus,
    ModerationStatus,
    Quantity,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Reservation,
    ReservationVerdict,
    UserId,
)
from ticketing.domain.errors import EventNotFoundError
from ticketing.stores.interfaces import EventStore, TransactionManager

logger = logging.getLogger(__name__)


def _closed_reason(event: Event, now: datetime) -> str | None:
    if event.status not in (EventStatus.UPCOMING, EventStatus.ONGOING):
        return f"Event is {event.status.value}"
    if event.moderation_status is not ModerationStatus.APPROVED:
        return "Event is not approved for registration"
    if event.ends_at is not None and event.ends_at <= now:
        return "Event has already ended"
    return None


class CapacityLedger:
    """Reserve, release and waitlist bookkeeping for events."""

    def __init__(
        self,
        tx: TransactionManager,
        events: EventStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._tx = tx
        self._events = events
        self._clock = clock

    def _lock(self, event_id: EventId) -> Event:
        event = self._events.lock_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def try_reserve(
        self,
        event_id: EventId,
        user_id: UserId,
        registration_id: RegistrationId,
        quantity: int,
    ) -> Reservation:
        """Claim seats for a registration, or queue it.

        Reserved: capacity is decremented and the user joins registered_users.
        Waitlisted: the registration is appended to the waitlist tail and
        capacity is untouched. Rejected: nothing changes.
        """
        with self._tx.atomic():
            event = self._lock(event_id)
            try:
                seats = Quantity(quantity)
            except ValueError:
                return Reservation(ReservationVerdict.REJECTED, event, "Quantity invalid")

            reason = _closed_reason(event, self._clock())
            if reason is not None:
                return Reservation(ReservationVerdict.REJECTED, event, reason)

            if event.capacity.can_hold(seats):
                members = event.registered_users
                if user_id not in members:
                    members = members + (user_id,)
                updated = replace(
                    event, capacity=event.capacity.reserve(seats), registered_users=members
                )
                self._events.save_ledger(updated)
                logger.debug("Reserved %s seat(s) on event %s", seats.value, event_id)
                return Reservation(ReservationVerdict.RESERVED, updated)

            updated = replace(event, waitlist=event.waitlist + (registration_id,))
            self._events.save_ledger(updated)
            logger.debug("Waitlisted registration %s on event %s", registration_id, event_id)
            return Reservation(ReservationVerdict.WAITLISTED, updated)

    def try_extend(self, event_id: EventId, quantity: Quantity) -> Reservation:
        """Claim extra seats for an already confirmed registration.

        Never queues: a request that does not fit comes back WAITLISTED with
        the ledger unchanged, a closed event comes back REJECTED.
        """
        with self._tx.atomic():
            event = self._lock(event_id)
            reason = _closed_reason(event, self._clock())
            if reason is not None:
                return Reservation(ReservationVerdict.REJECTED, event, reason)
            if not event.capacity.can_hold(quantity):
                return Reservation(
                    ReservationVerdict.WAITLISTED, event, "Not enough capacity"
                )
            updated = replace(event, capacity=event.capacity.reserve(quantity))
            self._events.save_ledger(updated)
            return Reservation(ReservationVerdict.RESERVED, updated)

    def release(
        self,
        event_id: EventId,
        user_id: UserId,
        quantity: Quantity,
        *,
        keep_member: bool = False,
    ) -> Event:
        """Return seats taken by a previous reservation.

        Must be paired with exactly one earlier RESERVED (or extension) of at
        least ``quantity`` seats.
        """
        with self._tx.atomic():
            event = self._lock(event_id)
            members = event.registered_users
            if not keep_member:
                members = tuple(u for u in members if u != user_id)
            updated = replace(
                event, capacity=event.capacity.release(quantity), registered_users=members
            )
            self._events.save_ledger(updated)
            logger.debug("Released %s seat(s) on event %s", quantity.value, event_id)
            return updated

    def withdraw(self, event_id: EventId, registration_id: RegistrationId) -> Event:
        """Remove a registration from the waitlist, wherever it stands."""
        with self._tx.atomic():
            event = self._lock(event_id)
            if registration_id not in event.waitlist:
                return event
            updated = replace(
                event, waitlist=tuple(r for r in event.waitlist if r != registration_id)
            )
            self._events.save_ledger(updated)
            return updated

    def admit_waitlisted(
        self,
        event_id: EventId,
        lookup: Callable[[RegistrationId], Registration | None],
    ) -> list[Registration]:
        """Admit waitlist entries from the head while seats remain.

        Entries whose registration is gone or no longer waitlisted are dropped.
        The first entry that does not fit stops the scan, so a smaller request
        further back never overtakes it. Returns the admitted registrations in
        waitlist order; flipping their status is the caller's job.
        """
        with self._tx.atomic():
            event = self._lock(event_id)
            if not event.waitlist or _closed_reason(event, self._clock()) is not None:
                return []

            waitlist = list(event.waitlist)
            capacity = event.capacity
            members = list(event.registered_users)
            admitted: list[Registration] = []
            while capacity.value > 0 and waitlist:
                registration = lookup(waitlist[0])
                if registration is None or registration.status is not RegistrationStatus.WAITLISTED:
                    waitlist.pop(0)
                    continue
                if not capacity.can_hold(registration.quantity):
                    break
                waitlist.pop(0)
                capacity = capacity.reserve(registration.quantity)
                if registration.user_id not in members:
                    members.append(registration.user_id)
                admitted.append(registration)

            if tuple(waitlist) != event.waitlist:
                self._events.save_ledger(
                    replace(
                        event,
                        capacity=capacity,
                        registered_users=tuple(members),
                        waitlist=tuple(waitlist),
                    )
                )
            return admitted
