"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import timedelta

import pytest

from tests.fakes import NOW
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
    TicketCode,
    TicketId,
    UserId,
)
from ticketing.domain.errors import (
    ErrorKind,
    EventNotOpenError,
    InvalidIdError,
    TicketAlreadyUsedError,
    WaitlistedError,
)


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_zero(self):
        """Capacity can be created with zero."""
        assert Capacity(0).value == 0

    def test_capacity_rejects_negative_value(self):
        """Capacity raises ValueError for negative value."""
        with pytest.raises(ValueError):
            Capacity(-1)

    def test_reserve_and_release(self):
        """Reserving then releasing returns to the starting count."""
        capacity = Capacity(5).reserve(Quantity(3))
        assert capacity.value == 2
        assert capacity.release(Quantity(3)).value == 5

    def test_reserve_beyond_remaining_is_rejected(self):
        """Reserving more than remains would go negative, which is invalid."""
        assert not Capacity(1).can_hold(Quantity(2))
        with pytest.raises(ValueError):
            Capacity(1).reserve(Quantity(2))


class TestQuantity:
    """Tests for Quantity value object."""

    def test_quantity_rejects_zero(self):
        with pytest.raises(ValueError):
            Quantity(0)

    def test_quantity_rejects_bool_and_str(self):
        """Only real integers count; nothing is coerced."""
        with pytest.raises(ValueError):
            Quantity(True)
        with pytest.raises(ValueError):
            Quantity("2")


class TestIdentifiers:
    """Tests for identifier value objects."""

    def test_from_string_valid_uuid(self):
        """EventId.from_string parses valid UUID."""
        raw = uuid.uuid4()
        assert EventId.from_string(str(raw)).value == raw

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")

    def test_str_is_canonical_uuid(self):
        raw = uuid.uuid4()
        assert str(TicketId(raw)) == str(raw)


class TestTicketCode:
    def test_generated_codes_are_prefixed_and_distinct(self):
        codes = {TicketCode.generate().value for _ in range(50)}
        assert len(codes) == 50
        assert all(code.startswith("TK-") for code in codes)

    def test_blank_code_rejected(self):
        with pytest.raises(ValueError):
            TicketCode("   ")


def _event(**overrides) -> Event:
    fields = dict(
        id=EventId(uuid.uuid4()),
        title="Robotics Night",
        organizer_id=None,
        capacity=Capacity(3),
        status=EventStatus.UPCOMING,
        moderation_status=ModerationStatus.APPROVED,
    )
    fields.update(overrides)
    return Event(**fields)


class TestEvent:
    def test_open_when_upcoming_and_approved(self):
        assert _event().is_open_for_registration(NOW)

    def test_closed_when_pending_moderation(self):
        event = _event(moderation_status=ModerationStatus.PENDING_APPROVAL)
        assert not event.is_open_for_registration(NOW)
        assert event.accepts_ticketing(NOW)

    def test_closed_after_end(self):
        event = _event(ends_at=NOW - timedelta(minutes=1))
        assert not event.is_open_for_registration(NOW)
        assert not event.accepts_ticketing(NOW)

    def test_closed_when_cancelled(self):
        assert not _event(status=EventStatus.CANCELLED).accepts_ticketing(NOW)


class TestRegistration:
    def test_tickets_issued_derives_from_ticket_ids(self):
        registration = Registration(
            id=RegistrationId(uuid.uuid4()),
            user_id=UserId(uuid.uuid4()),
            event_id=EventId(uuid.uuid4()),
            quantity=Quantity(3),
            status=RegistrationStatus.CONFIRMED,
            created_at=NOW,
            updated_at=NOW,
            ticket_ids=(TicketId(uuid.uuid4()), TicketId(uuid.uuid4())),
        )
        assert registration.tickets_issued == 2
        assert registration.remaining_allotment == 1


class TestDomainErrors:
    def test_errors_carry_kind_and_code(self):
        assert InvalidIdError("event_id").kind is ErrorKind.VALIDATION
        assert EventNotOpenError().kind is ErrorKind.FORBIDDEN
        assert WaitlistedError().kind is ErrorKind.FORBIDDEN
        assert TicketAlreadyUsedError().kind is ErrorKind.CONFLICT

    def test_str_includes_code(self):
        assert str(InvalidIdError("event_id")) == "INVALID_ID: Invalid event_id format"
