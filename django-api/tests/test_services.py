"""Unit tests for EventService.

These test error handling and domain error mapping.
Run with: pytest tests/test_services.py -v
"""

import uuid

import pytest

from tests.conftest import make_actor
from ticketing.domain import EventStatus, ModerationStatus, RegistrationStatus, TicketStatus
from ticketing.domain.errors import EventNotFoundError, ForbiddenError, InvalidIdError


class TestEventService:
    """Tests for EventService."""

    def test_get_event_invalid_id_raises_error(self, pipeline):
        """get_event raises InvalidIdError for malformed UUID."""
        with pytest.raises(InvalidIdError):
            pipeline.events.get_event("not-a-uuid")

    def test_get_event_not_found_raises_error(self, pipeline):
        """get_event raises EventNotFoundError when store returns None."""
        with pytest.raises(EventNotFoundError):
            pipeline.events.get_event(str(uuid.uuid4()))

    def test_availability_reports_ledger(self, pipeline, memory_db, student, other_student):
        event = memory_db.add_event(capacity=1)
        pipeline.registrations.register(student, str(event.id), 1)
        pipeline.registrations.register(other_student, str(event.id), 1)

        availability = pipeline.events.availability(str(event.id))

        assert availability.capacity == 0
        assert availability.waitlist_length == 1
        assert availability.registered_count == 1
        assert not availability.is_open

    def test_availability_closed_when_not_approved(self, pipeline, memory_db):
        event = memory_db.add_event(moderation_status=ModerationStatus.PENDING_APPROVAL)
        assert not pipeline.events.availability(str(event.id)).is_open


class TestCancelEvent:
    def test_cancel_event_cascades_without_promotion(
        self, pipeline, memory_db, student, other_student, admin
    ):
        event = memory_db.add_event(capacity=2)
        confirmed = pipeline.registrations.register(student, str(event.id), 2)
        waiting = pipeline.registrations.register(other_student, str(event.id), 1)
        (ticket,) = pipeline.tickets.issue(str(confirmed.id), 1, student)

        cancelled = pipeline.events.cancel_event(str(event.id), admin)

        assert cancelled.status is EventStatus.CANCELLED
        assert cancelled.capacity.value == 2
        assert cancelled.waitlist == ()
        assert memory_db.registrations[confirmed.id].status is RegistrationStatus.CANCELLED
        assert memory_db.registrations[waiting.id].status is RegistrationStatus.CANCELLED
        assert memory_db.tickets[ticket.id].status is TicketStatus.CANCELLED

    def test_cancel_event_requires_admin(self, pipeline, memory_db, organizer):
        event = memory_db.add_event(organizer_id=organizer.user_id)
        with pytest.raises(ForbiddenError):
            pipeline.events.cancel_event(str(event.id), organizer)


class TestManualPromotion:
    def test_organizer_can_trigger(self, pipeline, memory_db, student, other_student):
        owner = make_actor()
        event = memory_db.add_event(capacity=1, organizer_id=owner.user_id)
        holder = pipeline.registrations.register(student, str(event.id), 1)
        waiting = pipeline.registrations.register(other_student, str(event.id), 1)
        pipeline.ledger.release(event.id, student.user_id, holder.quantity)

        promotions = pipeline.events.promote_waitlist(str(event.id), owner)

        assert [p.registration_id for p in promotions] == [waiting.id]

    def test_attendee_cannot_trigger(self, pipeline, memory_db, student):
        event = memory_db.add_event()
        with pytest.raises(ForbiddenError):
            pipeline.events.promote_waitlist(str(event.id), student)
