"""Django ORM implementation of the ticketing stores."""

import logging
from collections import defaultdict
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from uuid import UUID

from django.db import DatabaseError, IntegrityError, transaction

from ticketing import models
from ticketing.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    ModerationStatus,
    Quantity,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Ticket,
    TicketCode,
    TicketId,
    TicketStatus,
    UserId,
)
from ticketing.domain.errors import AlreadyRegisteredError, AtomicOperationError
from ticketing.stores.interfaces import (
    EventStore,
    RegistrationStore,
    TicketStore,
    TransactionManager,
)

logger = logging.getLogger(__name__)


def _event_to_domain(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        organizer_id=UserId(row.organizer_id) if row.organizer_id else None,
        capacity=Capacity(row.capacity),
        status=EventStatus(row.status),
        moderation_status=ModerationStatus(row.moderation_status),
        ends_at=row.ends_at,
        registered_users=tuple(UserId(UUID(u)) for u in row.registered_users),
        waitlist=tuple(RegistrationId(UUID(r)) for r in row.waitlist),
    )


def _registration_to_domain(
    row: models.Registration, ticket_ids: Sequence[UUID]
) -> Registration:
    return Registration(
        id=RegistrationId(row.id),
        user_id=UserId(row.user_id),
        event_id=EventId(row.event_id),
        quantity=Quantity(row.quantity),
        status=RegistrationStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        ticket_ids=tuple(TicketId(t) for t in ticket_ids),
    )


def _ticket_to_domain(row: models.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        code=TicketCode(row.code),
        user_id=UserId(row.user_id),
        event_id=EventId(row.event_id),
        registration_id=RegistrationId(row.registration_id),
        status=TicketStatus(row.status),
        qr_data_url=row.qr_data_url,
        qr_expires_at=row.qr_expires_at,
        created_at=row.created_at,
        scanned_at=row.scanned_at,
        scanned_by=row.scanned_by,
    )


class DjangoTransactionManager(TransactionManager):
    """Database transactions via ``transaction.atomic``."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            logger.exception("Atomic unit rolled back after a database failure")
            raise AtomicOperationError() from exc

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, robust=True)


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def lock_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def save_ledger(self, event: Event) -> None:
        row = models.Event.objects.get(pk=event.id.value)
        row.capacity = event.capacity.value
        row.registered_users = [str(u) for u in event.registered_users]
        row.waitlist = [str(r) for r in event.waitlist]
        row.save(update_fields=["capacity", "registered_users", "waitlist", "updated_at"])

    def save_status(self, event: Event) -> None:
        row = models.Event.objects.get(pk=event.id.value)
        row.status = event.status.value
        row.save(update_fields=["status", "updated_at"])


class DjangoRegistrationStore(RegistrationStore):
    """Registration store using Django ORM.

    Ticket references are read from the Ticket table on every load.
    """

    def _active_ticket_ids(self, registration_ids: Sequence[UUID]) -> dict[UUID, list[UUID]]:
        by_registration: dict[UUID, list[UUID]] = defaultdict(list)
        rows = (
            models.Ticket.objects.filter(registration_id__in=registration_ids)
            .exclude(status=models.Ticket.Status.CANCELLED)
            .order_by("created_at", "id")
            .values_list("registration_id", "id")
        )
        for registration_id, ticket_id in rows:
            by_registration[registration_id].append(ticket_id)
        return by_registration

    def _to_domain(self, row: models.Registration | None) -> Registration | None:
        if row is None:
            return None
        ticket_ids = self._active_ticket_ids([row.id])
        return _registration_to_domain(row, ticket_ids[row.id])

    def _many_to_domain(self, rows: Sequence[models.Registration]) -> list[Registration]:
        ticket_ids = self._active_ticket_ids([r.id for r in rows])
        return [_registration_to_domain(r, ticket_ids[r.id]) for r in rows]

    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        row = models.Registration.objects.filter(pk=registration_id.value).first()
        return self._to_domain(row)

    def lock_registration(self, registration_id: RegistrationId) -> Registration | None:
        row = (
            models.Registration.objects.select_for_update()
            .filter(pk=registration_id.value)
            .first()
        )
        return self._to_domain(row)

    def find_active(self, user_id: UserId, event_id: EventId) -> Registration | None:
        row = (
            models.Registration.objects.filter(user_id=user_id.value, event_id=event_id.value)
            .exclude(status=models.Registration.Status.CANCELLED)
            .first()
        )
        return self._to_domain(row)

    def create_registration(self, registration: Registration) -> Registration:
        try:
            with transaction.atomic():
                row = models.Registration.objects.create(
                    id=registration.id.value,
                    user_id=registration.user_id.value,
                    event_id=registration.event_id.value,
                    quantity=registration.quantity.value,
                    status=registration.status.value,
                )
        except IntegrityError as exc:
            raise AlreadyRegisteredError(str(registration.event_id)) from exc
        return _registration_to_domain(row, [])

    def update_registration(
        self,
        registration_id: RegistrationId,
        *,
        status: RegistrationStatus | None = None,
        quantity: Quantity | None = None,
    ) -> Registration:
        row = models.Registration.objects.get(pk=registration_id.value)
        update_fields = ["updated_at"]
        if status is not None:
            row.status = status.value
            update_fields.append("status")
        if quantity is not None:
            row.quantity = quantity.value
            update_fields.append("quantity")
        row.save(update_fields=update_fields)
        return self._to_domain(row)

    def delete_registration(self, registration_id: RegistrationId) -> None:
        models.Registration.objects.filter(pk=registration_id.value).delete()

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        rows = list(
            models.Registration.objects.filter(event_id=event_id.value).order_by("-created_at")
        )
        return self._many_to_domain(rows)

    def list_for_user(self, user_id: UserId) -> list[Registration]:
        rows = list(
            models.Registration.objects.filter(user_id=user_id.value).order_by("-created_at")
        )
        return self._many_to_domain(rows)


class DjangoTicketStore(TicketStore):
    """Ticket store using Django ORM."""

    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        row = models.Ticket.objects.filter(pk=ticket_id.value).first()
        return _ticket_to_domain(row) if row else None

    def get_by_code(self, code: TicketCode) -> Ticket | None:
        row = models.Ticket.objects.filter(code=code.value).first()
        return _ticket_to_domain(row) if row else None

    def lock_ticket(self, ticket_id: TicketId) -> Ticket | None:
        row = models.Ticket.objects.select_for_update().filter(pk=ticket_id.value).first()
        return _ticket_to_domain(row) if row else None

    def create_tickets(self, tickets: Sequence[Ticket]) -> list[Ticket]:
        rows = [
            models.Ticket(
                id=t.id.value,
                code=t.code.value,
                user_id=t.user_id.value,
                event_id=t.event_id.value,
                registration_id=t.registration_id.value,
                status=t.status.value,
                qr_data_url=t.qr_data_url,
                qr_expires_at=t.qr_expires_at,
            )
            for t in tickets
        ]
        created = models.Ticket.objects.bulk_create(rows)
        return [_ticket_to_domain(row) for row in created]

    def consume(self, code: TicketCode, scanned_by: str, scanned_at: datetime) -> bool:
        updated = models.Ticket.objects.filter(
            code=code.value, status=models.Ticket.Status.VALID
        ).update(
            status=models.Ticket.Status.USED,
            scanned_at=scanned_at,
            scanned_by=scanned_by,
        )
        return updated == 1

    def force_used(
        self, ticket_id: TicketId, scanned_by: str, scanned_at: datetime
    ) -> Ticket | None:
        models.Ticket.objects.filter(pk=ticket_id.value).exclude(
            status=models.Ticket.Status.USED
        ).update(
            status=models.Ticket.Status.USED,
            scanned_at=scanned_at,
            scanned_by=scanned_by,
        )
        return self.get_ticket(ticket_id)

    def cancel_ticket(self, ticket_id: TicketId) -> bool:
        updated = models.Ticket.objects.filter(
            pk=ticket_id.value, status=models.Ticket.Status.VALID
        ).update(status=models.Ticket.Status.CANCELLED)
        return updated == 1

    def cancel_for_registration(self, registration_id: RegistrationId) -> int:
        return (
            models.Ticket.objects.filter(registration_id=registration_id.value)
            .exclude(status=models.Ticket.Status.CANCELLED)
            .update(status=models.Ticket.Status.CANCELLED)
        )

    def replace_code(
        self,
        ticket_id: TicketId,
        code: TicketCode,
        qr_data_url: str,
        qr_expires_at: datetime,
    ) -> bool:
        updated = models.Ticket.objects.filter(
            pk=ticket_id.value, status=models.Ticket.Status.VALID
        ).update(code=code.value, qr_data_url=qr_data_url, qr_expires_at=qr_expires_at)
        return updated == 1

    def refresh_qr(
        self, ticket_id: TicketId, qr_data_url: str, qr_expires_at: datetime
    ) -> Ticket | None:
        models.Ticket.objects.filter(pk=ticket_id.value).update(
            qr_data_url=qr_data_url, qr_expires_at=qr_expires_at
        )
        return self.get_ticket(ticket_id)

    def list_for_event(self, event_id: EventId) -> list[Ticket]:
        rows = models.Ticket.objects.filter(event_id=event_id.value).order_by("created_at")
        return [_ticket_to_domain(r) for r in rows]

    def list_for_user(self, user_id: UserId) -> list[Ticket]:
        rows = models.Ticket.objects.filter(user_id=user_id.value).order_by("created_at")
        return [_ticket_to_domain(r) for r in rows]
