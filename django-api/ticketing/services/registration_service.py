"""Registration service - a user's claim on an event.

Every mutating operation runs as one unit of work that locks the event row
first, then the registration row, so the duplicate check, the ledger update
and the registration write can never be applied partially.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    Actor,
    EventId,
    Quantity,
    Registration,
    RegistrationId,
    RegistrationStatus,
    ReservationVerdict,
    UserId,
)
from ticketing.domain.errors import (
    AlreadyCancelledError,
    AlreadyRegisteredError,
    CapacityExceededError,
    EventNotFoundError,
    EventNotOpenError,
    QuantityBelowIssuedError,
    RegistrationCancelledError,
    RegistrationNotFoundError,
)
from ticketing.services.access import (
    OrganizationDirectory,
    ensure_admin,
    ensure_event_staff,
    ensure_owner_or_admin,
)
from ticketing.services.capacity_ledger import CapacityLedger
from ticketing.services.inputs import parse_id, parse_quantity
from ticketing.services.notifications import Notifier
from ticketing.services.waitlist_promoter import WaitlistPromoter
from ticketing.stores.interfaces import (
    EventStore,
    RegistrationStore,
    TicketStore,
    TransactionManager,
)

logger = logging.getLogger(__name__)


class RegistrationService:
    """Register, cancel, resize and delete registrations."""

    def __init__(
        self,
        tx: TransactionManager,
        events: EventStore,
        registrations: RegistrationStore,
        tickets: TicketStore,
        ledger: CapacityLedger,
        promoter: WaitlistPromoter,
        notifier: Notifier,
        directory: OrganizationDirectory,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._tx = tx
        self._events = events
        self._registrations = registrations
        self._tickets = tickets
        self._ledger = ledger
        self._promoter = promoter
        self._notifier = notifier
        self._directory = directory
        self._clock = clock

    def register(self, actor: Actor, event_id: str, quantity: object) -> Registration:
        """Create a confirmed or waitlisted registration for the actor.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            InvalidQuantityError: If quantity is not a positive integer.
            EventNotFoundError: If the event does not exist.
            AlreadyRegisteredError: If the actor already holds an active registration.
            EventNotOpenError: If the event does not accept registrations.
        """
        eid = parse_id(EventId, event_id, "event_id")
        seats = parse_quantity(quantity)

        with self._tx.atomic():
            if self._events.lock_event(eid) is None:
                raise EventNotFoundError(str(eid))
            if self._registrations.find_active(actor.user_id, eid) is not None:
                raise AlreadyRegisteredError(str(eid))

            registration_id = RegistrationId(uuid.uuid4())
            reservation = self._ledger.try_reserve(
                eid, actor.user_id, registration_id, seats.value
            )
            if reservation.verdict is ReservationVerdict.REJECTED:
                raise EventNotOpenError(reservation.reason or "Event is not open for registration")

            status = (
                RegistrationStatus.CONFIRMED
                if reservation.verdict is ReservationVerdict.RESERVED
                else RegistrationStatus.WAITLISTED
            )
            now = self._clock()
            registration = self._registrations.create_registration(
                Registration(
                    id=registration_id,
                    user_id=actor.user_id,
                    event_id=eid,
                    quantity=seats,
                    status=status,
                    created_at=now,
                    updated_at=now,
                )
            )
            self._tx.on_commit(lambda: self._notifier.registration_created(registration))

        logger.info(
            "Registration %s created for event %s as %s",
            registration.id,
            eid,
            registration.status.value,
        )
        return registration

    def get(self, registration_id: str, actor: Actor) -> Registration:
        registration = self._get(parse_id(RegistrationId, registration_id, "registration_id"))
        ensure_owner_or_admin(actor, registration.user_id)
        return registration

    def list_for_user(self, user_id: str, actor: Actor) -> list[Registration]:
        uid = parse_id(UserId, user_id, "user_id")
        ensure_owner_or_admin(actor, uid)
        return self._registrations.list_for_user(uid)

    def list_for_event(self, event_id: str, actor: Actor) -> list[Registration]:
        eid = parse_id(EventId, event_id, "event_id")
        event = self._events.get_event(eid)
        if event is None:
            raise EventNotFoundError(str(eid))
        ensure_event_staff(actor, event, self._directory)
        return self._registrations.list_for_event(eid)

    def cancel(self, registration_id: str, actor: Actor) -> Registration:
        """Cancel a registration and cascade to its tickets.

        A confirmed registration gives its seats back and a waitlisted one
        leaves the queue. Either way the waitlist is promoted in the same unit
        of work.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
            ForbiddenError: If the actor is neither the owner nor an admin.
            AlreadyCancelledError: If the registration was already cancelled.
        """
        rid = parse_id(RegistrationId, registration_id, "registration_id")

        with self._tx.atomic():
            registration = self._lock(rid)
            ensure_owner_or_admin(actor, registration.user_id)
            if registration.status is RegistrationStatus.CANCELLED:
                raise AlreadyCancelledError()

            self._give_back(registration)
            cancelled_tickets = self._tickets.cancel_for_registration(rid)
            cancelled = self._registrations.update_registration(
                rid, status=RegistrationStatus.CANCELLED
            )
            self._promoter.promote(registration.event_id)

        logger.info(
            "Registration %s cancelled by %s (%d ticket(s) cancelled)",
            rid,
            actor.user_id,
            cancelled_tickets,
        )
        return cancelled

    def delete(self, registration_id: str, actor: Actor) -> None:
        """Remove a registration row, releasing what it still holds."""
        ensure_admin(actor)
        rid = parse_id(RegistrationId, registration_id, "registration_id")
        with self._tx.atomic():
            self._delete(self._lock(rid))

    def delete_for_user(self, user_id: UserId) -> int:
        """Cascade for user deletion: drop every registration the user holds."""
        registrations = self._registrations.list_for_user(user_id)
        with self._tx.atomic():
            for registration in registrations:
                locked = self._lock(registration.id)
                self._delete(locked)
        logger.info("Deleted %d registration(s) of user %s", len(registrations), user_id)
        return len(registrations)

    def change_quantity(self, registration_id: str, quantity: object, actor: Actor) -> Registration:
        """Resize a registration.

        Growing a confirmed registration reserves the difference and fails
        when it does not fit; shrinking releases seats and promotes the
        waitlist. Quantity never drops below the tickets already issued.
        """
        rid = parse_id(RegistrationId, registration_id, "registration_id")
        seats = parse_quantity(quantity)

        with self._tx.atomic():
            registration = self._lock(rid)
            ensure_owner_or_admin(actor, registration.user_id)
            if registration.status is RegistrationStatus.CANCELLED:
                raise RegistrationCancelledError()
            if seats == registration.quantity:
                return registration
            if seats.value < registration.tickets_issued:
                raise QuantityBelowIssuedError(registration.tickets_issued)

            delta = seats.value - registration.quantity.value
            promote = False
            if registration.status is RegistrationStatus.CONFIRMED:
                if delta > 0:
                    reservation = self._ledger.try_extend(registration.event_id, Quantity(delta))
                    if reservation.verdict is ReservationVerdict.REJECTED:
                        raise EventNotOpenError(reservation.reason or "Event is not open")
                    if reservation.verdict is ReservationVerdict.WAITLISTED:
                        raise CapacityExceededError()
                else:
                    self._ledger.release(
                        registration.event_id,
                        registration.user_id,
                        Quantity(-delta),
                        keep_member=True,
                    )
                    promote = True
            elif delta < 0:
                # A smaller waitlisted head may now fit.
                promote = True

            updated = self._registrations.update_registration(rid, quantity=seats)
            if promote:
                self._promoter.promote(registration.event_id)

        logger.info(
            "Registration %s quantity changed %d -> %d",
            rid,
            registration.quantity.value,
            seats.value,
        )
        return updated

    def _get(self, rid: RegistrationId) -> Registration:
        registration = self._registrations.get_registration(rid)
        if registration is None:
            raise RegistrationNotFoundError(str(rid))
        return registration

    def _lock(self, rid: RegistrationId) -> Registration:
        """Lock event then registration; must run inside a unit of work."""
        registration = self._get(rid)
        self._events.lock_event(registration.event_id)
        locked = self._registrations.lock_registration(rid)
        if locked is None:
            raise RegistrationNotFoundError(str(rid))
        return locked

    def _give_back(self, registration: Registration) -> None:
        if registration.status is RegistrationStatus.CONFIRMED:
            self._ledger.release(
                registration.event_id, registration.user_id, registration.quantity
            )
        elif registration.status is RegistrationStatus.WAITLISTED:
            self._ledger.withdraw(registration.event_id, registration.id)

    def _delete(self, registration: Registration) -> None:
        self._give_back(registration)
        self._registrations.delete_registration(registration.id)
        if registration.status is not RegistrationStatus.CANCELLED:
            self._promoter.promote(registration.event_id)
        logger.info("Registration %s deleted", registration.id)
