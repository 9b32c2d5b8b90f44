"""Ticket validation at the door.

A ticket moves ``valid -> used`` exactly once. The status check and the
transition are a single conditional update on the ticket row, independent of
the event lock, so concurrent scans of one code have exactly one winner.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    Actor,
    ScanOutcome,
    ScanResult,
    Ticket,
    TicketId,
    TicketStatus,
    TicketView,
)
from ticketing.domain.errors import (
    EventNotFoundError,
    TicketAlreadyUsedError,
    TicketCancelledError,
    TicketNotFoundError,
)
from ticketing.services.access import OrganizationDirectory, ensure_admin, ensure_event_staff
from ticketing.services.inputs import parse_code, parse_id
from ticketing.services.notifications import Notifier
from ticketing.stores.interfaces import EventStore, TicketStore, TransactionManager

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("ticketing.security")


class ScanValidator:
    """Validates presented ticket codes and consumes them exactly once."""

    def __init__(
        self,
        tx: TransactionManager,
        events: EventStore,
        tickets: TicketStore,
        notifier: Notifier,
        directory: OrganizationDirectory,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._tx = tx
        self._events = events
        self._tickets = tickets
        self._notifier = notifier
        self._directory = directory
        self._clock = clock

    def validate(self, code: object) -> TicketView:
        """Read-only check of a code; never changes the ticket."""
        ticket = self._by_code(code)
        if ticket.status is TicketStatus.CANCELLED:
            raise TicketCancelledError()
        if ticket.status is TicketStatus.USED:
            raise TicketAlreadyUsedError()
        return TicketView(ticket=ticket, message="Ticket is valid")

    def scan(self, code: object, actor: Actor) -> ScanResult:
        """Consume a ticket at the door.

        Returns TICKET_VALID for the one scan that performs the transition
        and TICKET_ALREADY_USED, with a reuse alert, for every later one.

        Raises:
            MissingTicketCodeError: If no code was supplied.
            TicketNotFoundError: If no ticket carries the code.
            ForbiddenError: If the actor does not staff the ticket's event.
            TicketCancelledError: If the ticket was cancelled.
        """
        ticket = self._by_code(code)
        event = self._events.get_event(ticket.event_id)
        if event is None:
            raise EventNotFoundError(str(ticket.event_id))
        ensure_event_staff(actor, event, self._directory)

        scanned_by = str(actor.user_id)
        with self._tx.atomic():
            consumed = self._tickets.consume(ticket.code, scanned_by, self._clock())
        current = self._tickets.get_by_code(ticket.code) or ticket

        if consumed:
            logger.info("Ticket %s admitted to event %s by %s", current.id, event.id, scanned_by)
            return ScanResult(
                outcome=ScanOutcome.TICKET_VALID,
                ticket=current,
                message="Ticket validated and marked as used",
            )

        if current.status is TicketStatus.CANCELLED:
            raise TicketCancelledError()
        if current.status is TicketStatus.VALID:
            # The code was swapped between the lookup and the update.
            raise TicketNotFoundError(str(ticket.code))

        security_logger.warning(
            "Ticket reuse detected: ticket=%s event=%s attempted_by=%s first_scanned_at=%s",
            current.id,
            current.event_id,
            scanned_by,
            current.scanned_at,
        )
        self._notifier.ticket_reuse_detected(current, scanned_by)
        return ScanResult(
            outcome=ScanOutcome.TICKET_ALREADY_USED,
            ticket=current,
            message="Ticket already used - administrators notified",
            reuse_alert=True,
            attempted_by=scanned_by,
        )

    def mark_used(self, ticket_id: str, actor: Actor) -> Ticket:
        """Admin override: force a ticket to used by identifier."""
        ensure_admin(actor)
        tid = parse_id(TicketId, ticket_id, "ticket_id")
        with self._tx.atomic():
            ticket = self._tickets.force_used(tid, str(actor.user_id), self._clock())
        if ticket is None:
            raise TicketNotFoundError(str(tid))
        logger.info("Ticket %s marked used by admin %s", tid, actor.user_id)
        return ticket

    def _by_code(self, code: object) -> Ticket:
        ticket_code = parse_code(code)
        ticket = self._tickets.get_by_code(ticket_code)
        if ticket is None:
            raise TicketNotFoundError(ticket_code.value)
        return ticket
