"""Integration tests for the Django ORM stores.

Run with: pytest tests/test_django_store.py -v
"""

import uuid

import pytest
from django.db import IntegrityError, transaction

from tests.conftest import make_actor
from ticketing import models
from ticketing.domain import (
    EventId,
    Registration,
    RegistrationId,
    RegistrationStatus,
    ReservationVerdict,
    Role,
    ScanOutcome,
    TicketCode,
    TicketStatus,
)
from ticketing.domain.errors import AlreadyRegisteredError
from ticketing.stores.django_store import (
    DjangoEventStore,
    DjangoRegistrationStore,
    DjangoTicketStore,
)


def _rid() -> RegistrationId:
    return RegistrationId(uuid.uuid4())


def _event(capacity=3, **fields) -> models.Event:
    fields.setdefault("moderation_status", models.Event.ModerationStatus.APPROVED)
    return models.Event.objects.create(title="Career Fair", capacity=capacity, **fields)


@pytest.mark.django_db
class TestDjangoEventStore:
    def test_round_trips_ledger_fields(self, orm_pipeline):
        row = _event(capacity=1)
        user = make_actor().user_id

        first = orm_pipeline.ledger.try_reserve(EventId(row.id), user, _rid(), 1)
        second = orm_pipeline.ledger.try_reserve(EventId(row.id), make_actor().user_id, _rid(), 1)

        assert first.verdict is ReservationVerdict.RESERVED
        assert second.verdict is ReservationVerdict.WAITLISTED
        event = DjangoEventStore().get_event(EventId(row.id))
        assert event.capacity.value == 0
        assert event.registered_users == (user,)
        assert len(event.waitlist) == 1

    def test_missing_event_returns_none(self):
        assert DjangoEventStore().get_event(EventId(uuid.uuid4())) is None


@pytest.mark.django_db
class TestDjangoRegistrationStore:
    def test_partial_unique_constraint_blocks_second_active_row(self):
        row = _event()
        user_id = uuid.uuid4()
        models.Registration.objects.create(user_id=user_id, event=row)

        with pytest.raises(IntegrityError), transaction.atomic():
            models.Registration.objects.create(user_id=user_id, event=row)

    def test_cancelled_rows_do_not_count(self):
        row = _event()
        user_id = uuid.uuid4()
        models.Registration.objects.create(
            user_id=user_id, event=row, status=models.Registration.Status.CANCELLED
        )
        models.Registration.objects.create(user_id=user_id, event=row)

        assert models.Registration.objects.filter(user_id=user_id).count() == 2

    def test_integrity_error_maps_to_already_registered(self, orm_pipeline):
        row = _event()
        actor = make_actor()
        registration = orm_pipeline.registrations.register(actor, str(row.id), 1)

        duplicate = Registration(
            id=_rid(),
            user_id=actor.user_id,
            event_id=registration.event_id,
            quantity=registration.quantity,
            status=RegistrationStatus.CONFIRMED,
            created_at=registration.created_at,
            updated_at=registration.updated_at,
        )
        with pytest.raises(AlreadyRegisteredError):
            DjangoRegistrationStore().create_registration(duplicate)

    def test_ticket_ids_derived_from_active_tickets(self, orm_pipeline):
        row = _event()
        actor = make_actor()
        registration = orm_pipeline.registrations.register(actor, str(row.id), 3)
        first, second = orm_pipeline.tickets.issue(str(registration.id), 2, actor)
        orm_pipeline.tickets.cancel(str(first.id), actor)

        current = orm_pipeline.registrations.get(str(registration.id), actor)

        assert current.ticket_ids == (second.id,)
        assert current.tickets_issued == 1
        assert current.quantity.value == 2


@pytest.mark.django_db
class TestDjangoTicketStore:
    def test_consume_is_conditional(self, orm_pipeline):
        row = _event()
        actor = make_actor()
        registration = orm_pipeline.registrations.register(actor, str(row.id), 1)
        (ticket,) = orm_pipeline.tickets.issue(str(registration.id), 1, actor)
        store = DjangoTicketStore()

        assert store.consume(ticket.code, "gate-1", ticket.created_at) is True
        assert store.consume(ticket.code, "gate-2", ticket.created_at) is False
        stored = models.Ticket.objects.get(pk=ticket.id.value)
        assert stored.status == models.Ticket.Status.USED
        assert stored.scanned_by == "gate-1"

    def test_scan_flow_against_database(self, orm_pipeline, notifier):
        row = _event()
        actor = make_actor()
        admin = make_actor(Role.ADMIN)
        registration = orm_pipeline.registrations.register(actor, str(row.id), 1)
        (ticket,) = orm_pipeline.tickets.issue(str(registration.id), 1, actor)

        first = orm_pipeline.scans.scan(ticket.code.value, admin)
        second = orm_pipeline.scans.scan(ticket.code.value, admin)

        assert first.outcome is ScanOutcome.TICKET_VALID
        assert second.outcome is ScanOutcome.TICKET_ALREADY_USED
        assert len(notifier.reuse_alerts) == 1

    def test_registration_cancel_cascades(self, orm_pipeline):
        row = _event(capacity=2)
        actor = make_actor()
        registration = orm_pipeline.registrations.register(actor, str(row.id), 2)
        orm_pipeline.tickets.issue(str(registration.id), 2, actor)

        orm_pipeline.registrations.cancel(str(registration.id), actor)

        row.refresh_from_db()
        assert row.capacity == 2
        assert row.registered_users == []
        assert set(
            models.Ticket.objects.filter(registration_id=registration.id.value).values_list(
                "status", flat=True
            )
        ) == {TicketStatus.CANCELLED.value}

    def test_unknown_code(self):
        assert DjangoTicketStore().get_by_code(TicketCode("TK-NOPE")) is None
