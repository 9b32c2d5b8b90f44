"""Unit tests for WaitlistPromoter FIFO admission."""

from dataclasses import replace

import pytest

from tests.conftest import make_actor
from ticketing.domain import Capacity, EventStatus, RegistrationStatus


def _fill(pipeline, memory_db, capacity, *quantities):
    """Create an event with ``capacity`` seats and waitlist one user per quantity."""
    event = memory_db.add_event(capacity=0)
    waiting = [
        pipeline.registrations.register(make_actor(), str(event.id), q) for q in quantities
    ]
    memory_db.events[event.id] = replace(memory_db.event(event.id), capacity=Capacity(capacity))
    return event, waiting


class TestPromote:
    def test_head_that_fits_is_admitted(self, pipeline, memory_db, notifier):
        """Given capacity 2 and waitlist [A(2), B(1)], only A is admitted."""
        event, (a, b) = _fill(pipeline, memory_db, 2, 2, 1)

        promotions = pipeline.promoter.promote(event.id)

        assert [p.registration_id for p in promotions] == [a.id]
        assert memory_db.registrations[a.id].status is RegistrationStatus.CONFIRMED
        assert memory_db.registrations[b.id].status is RegistrationStatus.WAITLISTED
        stored = memory_db.event(event.id)
        assert stored.capacity.value == 0
        assert stored.waitlist == (b.id,)
        assert notifier.promotions == promotions

    def test_blocked_head_stops_the_scan(self, pipeline, memory_db):
        """Given capacity 1 and waitlist [A(2), B(1)], nobody is admitted."""
        event, (a, b) = _fill(pipeline, memory_db, 1, 2, 1)

        promotions = pipeline.promoter.promote(event.id)

        assert promotions == []
        stored = memory_db.event(event.id)
        assert stored.capacity.value == 1
        assert stored.waitlist == (a.id, b.id)

    def test_several_admitted_in_order(self, pipeline, memory_db):
        """Given capacity 3 and waitlist [A(1), B(1), C(2)], A and B are admitted."""
        event, (a, b, c) = _fill(pipeline, memory_db, 3, 1, 1, 2)

        promotions = pipeline.promoter.promote(event.id)

        assert [p.registration_id for p in promotions] == [a.id, b.id]
        stored = memory_db.event(event.id)
        assert stored.capacity.value == 1
        assert stored.waitlist == (c.id,)
        assert {a.user_id, b.user_id} <= set(stored.registered_users)

    def test_stale_entries_are_dropped(self, pipeline, memory_db):
        event, (a, b) = _fill(pipeline, memory_db, 1, 1, 1)
        memory_db.registrations[a.id] = replace(
            memory_db.registrations[a.id], status=RegistrationStatus.CANCELLED
        )

        promotions = pipeline.promoter.promote(event.id)

        assert [p.registration_id for p in promotions] == [b.id]
        assert memory_db.event(event.id).waitlist == ()

    def test_closed_event_promotes_nobody(self, pipeline, memory_db):
        event, (a,) = _fill(pipeline, memory_db, 5, 1)
        memory_db.events[event.id] = replace(
            memory_db.event(event.id), status=EventStatus.CANCELLED
        )

        assert pipeline.promoter.promote(event.id) == []
        assert memory_db.registrations[a.id].status is RegistrationStatus.WAITLISTED

    def test_empty_waitlist(self, pipeline, memory_db):
        event = memory_db.add_event(capacity=3)
        assert pipeline.promoter.promote(event.id) == []


class TestBlockedHeadLeaves:
    """Given capacity 1 freed and waitlist [A(2), B(1)], A leaving admits B."""

    @pytest.fixture
    def blocked(self, pipeline, memory_db):
        event = memory_db.add_event(capacity=1)
        holder_actor = make_actor()
        holder = pipeline.registrations.register(holder_actor, str(event.id), 1)
        a_actor, b_actor = make_actor(), make_actor()
        a = pipeline.registrations.register(a_actor, str(event.id), 2)
        b = pipeline.registrations.register(b_actor, str(event.id), 1)
        pipeline.registrations.cancel(str(holder.id), holder_actor)
        assert memory_db.event(event.id).waitlist == (a.id, b.id)
        return event, (a_actor, a), b

    def test_cancelling_blocked_head_promotes_next(self, pipeline, memory_db, blocked):
        event, (a_actor, a), b = blocked

        pipeline.registrations.cancel(str(a.id), a_actor)

        assert memory_db.registrations[b.id].status is RegistrationStatus.CONFIRMED
        stored = memory_db.event(event.id)
        assert stored.capacity.value == 0
        assert stored.waitlist == ()

    def test_deleting_blocked_head_promotes_next(self, pipeline, memory_db, blocked, admin):
        event, (_, a), b = blocked

        pipeline.registrations.delete(str(a.id), admin)

        assert memory_db.registrations[b.id].status is RegistrationStatus.CONFIRMED
        assert memory_db.event(event.id).capacity.value == 0

    def test_shrinking_blocked_head_admits_it(self, pipeline, memory_db, blocked):
        event, (a_actor, a), b = blocked

        pipeline.registrations.change_quantity(str(a.id), 1, a_actor)

        assert memory_db.registrations[a.id].status is RegistrationStatus.CONFIRMED
        assert memory_db.registrations[b.id].status is RegistrationStatus.WAITLISTED
        stored = memory_db.event(event.id)
        assert stored.capacity.value == 0
        assert stored.waitlist == (b.id,)
