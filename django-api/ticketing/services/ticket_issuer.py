"""Ticket issuance and ticket lifecycle operations for ticket owners."""

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
    Ticket,
    TicketId,
    TicketStatus,
    UserId,
)
from ticketing.domain.errors import (
    AlreadyCancelledError,
    EventNotFoundError,
    EventNotOpenError,
    QuantityExceedsError,
    RegistrationCancelledError,
    RegistrationNotFoundError,
    TicketNotFoundError,
    TicketNotValidError,
    TicketUsedError,
    WaitlistedError,
)
from ticketing.services.access import (
    OrganizationDirectory,
    ensure_event_staff,
    ensure_owner_or_admin,
)
from ticketing.services.capacity_ledger import CapacityLedger
from ticketing.services.credentials import CredentialFactory
from ticketing.services.inputs import parse_id, parse_quantity
from ticketing.services.waitlist_promoter import WaitlistPromoter
from ticketing.stores.interfaces import (
    EventStore,
    RegistrationStore,
    TicketStore,
    TransactionManager,
)

logger = logging.getLogger(__name__)


class TicketIssuer:
    """Issues tickets against confirmed registrations.

    The allotment check runs against the locked registration row, so two
    concurrent issue requests for the same registration cannot both pass it.
    """

    def __init__(
        self,
        tx: TransactionManager,
        events: EventStore,
        registrations: RegistrationStore,
        tickets: TicketStore,
        ledger: CapacityLedger,
        promoter: WaitlistPromoter,
        credentials: CredentialFactory,
        directory: OrganizationDirectory,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._tx = tx
        self._events = events
        self._registrations = registrations
        self._tickets = tickets
        self._ledger = ledger
        self._promoter = promoter
        self._credentials = credentials
        self._directory = directory
        self._clock = clock

    def issue(self, registration_id: str, quantity: object, actor: Actor) -> list[Ticket]:
        """Create ``quantity`` tickets for a confirmed registration.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
            ForbiddenError: If the actor is neither the owner nor an admin.
            WaitlistedError: If the registration is still waitlisted.
            RegistrationCancelledError: If the registration is cancelled.
            EventNotOpenError: If the event no longer accepts ticketing.
            QuantityExceedsError: If the allotment would be exceeded.
        """
        rid = parse_id(RegistrationId, registration_id, "registration_id")
        count = parse_quantity(quantity)

        current = self._registrations.get_registration(rid)
        if current is None:
            raise RegistrationNotFoundError(str(rid))
        ensure_owner_or_admin(actor, current.user_id)
        now = self._clock()
        self._check_issuable(current, count, now)

        # QR rendering is slow; keep it out of the locked section.
        expires_at = self._credentials.expires_at(now)
        credentials = []
        for _ in range(count.value):
            code = self._credentials.new_code()
            credentials.append((code, self._credentials.render(code)))

        with self._tx.atomic():
            registration = self._registrations.lock_registration(rid)
            if registration is None:
                raise RegistrationNotFoundError(str(rid))
            self._check_issuable(registration, count, now)

            issued = self._tickets.create_tickets(
                [
                    Ticket(
                        id=TicketId(uuid.uuid4()),
                        code=code,
                        user_id=registration.user_id,
                        event_id=registration.event_id,
                        registration_id=registration.id,
                        status=TicketStatus.VALID,
                        qr_data_url=qr_data_url,
                        qr_expires_at=expires_at,
                        created_at=now,
                    )
                    for code, qr_data_url in credentials
                ]
            )

        logger.info(
            "Issued %d ticket(s) for registration %s (%d/%d)",
            len(issued),
            rid,
            registration.tickets_issued + len(issued),
            registration.quantity.value,
        )
        return issued

    def _check_issuable(self, registration: Registration, count: Quantity, now: datetime) -> None:
        """Checked once before rendering and again under the registration lock."""
        if registration.status is RegistrationStatus.WAITLISTED:
            raise WaitlistedError()
        if registration.status is RegistrationStatus.CANCELLED:
            raise RegistrationCancelledError()

        event = self._events.get_event(registration.event_id)
        if event is None:
            raise EventNotFoundError(str(registration.event_id))
        if not event.accepts_ticketing(now):
            raise EventNotOpenError("Event is not open for ticketing")

        if count.value > registration.remaining_allotment:
            raise QuantityExceedsError(registration.remaining_allotment)

    def get(self, ticket_id: str, actor: Actor) -> Ticket:
        ticket = self._get(parse_id(TicketId, ticket_id, "ticket_id"))
        ensure_owner_or_admin(actor, ticket.user_id)
        return ticket

    def list_for_user(self, user_id: str, actor: Actor) -> list[Ticket]:
        uid = parse_id(UserId, user_id, "user_id")
        ensure_owner_or_admin(actor, uid)
        return self._tickets.list_for_user(uid)

    def list_for_event(self, event_id: str, actor: Actor) -> list[Ticket]:
        eid = parse_id(EventId, event_id, "event_id")
        event = self._events.get_event(eid)
        if event is None:
            raise EventNotFoundError(str(eid))
        ensure_event_staff(actor, event, self._directory)
        return self._tickets.list_for_event(eid)

    def cancel(self, ticket_id: str, actor: Actor) -> Ticket:
        """Cancel a single valid ticket and give its seat back.

        The owning registration shrinks by one; at zero it is cancelled.
        """
        tid = parse_id(TicketId, ticket_id, "ticket_id")
        current = self._get(tid)
        ensure_owner_or_admin(actor, current.user_id)

        with self._tx.atomic():
            self._events.lock_event(current.event_id)
            registration = self._registrations.lock_registration(current.registration_id)
            ticket = self._tickets.lock_ticket(tid)
            if ticket is None:
                raise TicketNotFoundError(str(tid))
            if ticket.status is TicketStatus.USED:
                raise TicketUsedError()
            if ticket.status is TicketStatus.CANCELLED or not self._tickets.cancel_ticket(tid):
                raise AlreadyCancelledError("Ticket")

            if registration is not None and registration.status is RegistrationStatus.CONFIRMED:
                remaining = registration.quantity.value - 1
                self._ledger.release(
                    registration.event_id,
                    registration.user_id,
                    Quantity(1),
                    keep_member=remaining > 0,
                )
                if remaining > 0:
                    self._registrations.update_registration(
                        registration.id, quantity=Quantity(remaining)
                    )
                else:
                    self._registrations.update_registration(
                        registration.id, status=RegistrationStatus.CANCELLED
                    )
                self._promoter.promote(registration.event_id)

            cancelled = self._get(tid)

        logger.info("Ticket %s cancelled by %s", tid, actor.user_id)
        return cancelled

    def regenerate_code(self, ticket_id: str, actor: Actor) -> Ticket:
        """Replace the code and QR image of a valid ticket.

        The swap is conditional on the ticket still being valid, so the old
        code stops validating the moment this commits.
        """
        tid = parse_id(TicketId, ticket_id, "ticket_id")
        ticket = self._get(tid)
        ensure_owner_or_admin(actor, ticket.user_id)
        if ticket.status is not TicketStatus.VALID:
            raise TicketNotValidError(ticket.status.value)

        code = self._credentials.new_code()
        qr_data_url = self._credentials.render(code)
        expires_at = self._credentials.expires_at(self._clock())
        with self._tx.atomic():
            if not self._tickets.replace_code(tid, code, qr_data_url, expires_at):
                raise TicketNotValidError(self._get(tid).status.value)

        logger.info("Ticket %s code regenerated", tid)
        return self._get(tid)

    def refresh_qr(self, ticket_id: str, actor: Actor) -> Ticket:
        """Re-render the QR image for the same code and extend its expiry."""
        tid = parse_id(TicketId, ticket_id, "ticket_id")
        ticket = self._get(tid)
        ensure_owner_or_admin(actor, ticket.user_id)
        if ticket.status is not TicketStatus.VALID:
            raise TicketNotValidError(ticket.status.value)

        qr_data_url = self._credentials.render(ticket.code)
        refreshed = self._tickets.refresh_qr(
            tid, qr_data_url, self._credentials.expires_at(self._clock())
        )
        if refreshed is None:
            raise TicketNotFoundError(str(tid))
        return refreshed

    def _get(self, tid: TicketId) -> Ticket:
        ticket = self._tickets.get_ticket(tid)
        if ticket is None:
            raise TicketNotFoundError(str(tid))
        return ticket
