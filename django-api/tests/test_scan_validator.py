"""Unit tests for ScanValidator."""

import logging
from dataclasses import replace
from datetime import timedelta

import pytest

from tests.fakes import NOW
from ticketing.domain import ScanOutcome, TicketStatus
from ticketing.domain.errors import (
    ForbiddenError,
    MissingTicketCodeError,
    TicketAlreadyUsedError,
    TicketCancelledError,
    TicketNotFoundError,
)


@pytest.fixture
def event(memory_db, organizer):
    return memory_db.add_event(capacity=5, organizer_id=organizer.user_id)


@pytest.fixture
def ticket(pipeline, event, student):
    registration = pipeline.registrations.register(student, str(event.id), 1)
    (issued,) = pipeline.tickets.issue(str(registration.id), 1, student)
    return issued


class TestValidate:
    def test_valid_ticket(self, pipeline, ticket):
        view = pipeline.scans.validate(ticket.code.value)
        assert view.message == "Ticket is valid"
        assert view.ticket.id == ticket.id

    def test_validate_does_not_consume(self, pipeline, memory_db, ticket):
        pipeline.scans.validate(ticket.code.value)
        pipeline.scans.validate(ticket.code.value)
        assert memory_db.tickets[ticket.id].status is TicketStatus.VALID

    def test_unknown_code(self, pipeline):
        with pytest.raises(TicketNotFoundError) as exc_info:
            pipeline.scans.validate("TK-DOESNOTEXIST")
        assert exc_info.value.message == "Invalid or non-existent ticket"

    def test_blank_code(self, pipeline):
        with pytest.raises(MissingTicketCodeError):
            pipeline.scans.validate("  ")

    def test_cancelled_ticket(self, pipeline, ticket, student):
        pipeline.tickets.cancel(str(ticket.id), student)
        with pytest.raises(TicketCancelledError):
            pipeline.scans.validate(ticket.code.value)

    def test_used_ticket(self, pipeline, ticket, admin):
        pipeline.scans.scan(ticket.code.value, admin)
        with pytest.raises(TicketAlreadyUsedError):
            pipeline.scans.validate(ticket.code.value)


class TestScan:
    def test_first_scan_admits(self, pipeline, memory_db, ticket, organizer):
        result = pipeline.scans.scan(ticket.code.value, organizer)

        assert result.outcome is ScanOutcome.TICKET_VALID
        assert result.message == "Ticket validated and marked as used"
        assert not result.reuse_alert
        stored = memory_db.tickets[ticket.id]
        assert stored.status is TicketStatus.USED
        assert stored.scanned_by == str(organizer.user_id)
        assert stored.scanned_at == NOW

    def test_second_scan_raises_reuse_alert(self, pipeline, ticket, organizer, admin, notifier, caplog):
        pipeline.scans.scan(ticket.code.value, organizer)

        with caplog.at_level(logging.WARNING, logger="ticketing.security"):
            result = pipeline.scans.scan(ticket.code.value, admin)

        assert result.outcome is ScanOutcome.TICKET_ALREADY_USED
        assert result.reuse_alert
        assert result.message == "Ticket already used - administrators notified"
        assert result.attempted_by == str(admin.user_id)
        assert result.ticket.scanned_by == str(organizer.user_id)
        assert [(t.id, who) for t, who in notifier.reuse_alerts] == [(ticket.id, str(admin.user_id))]
        assert "Ticket reuse detected" in caplog.text

    def test_cancelled_ticket_is_forbidden(self, pipeline, ticket, student, organizer):
        pipeline.tickets.cancel(str(ticket.id), student)
        with pytest.raises(TicketCancelledError):
            pipeline.scans.scan(ticket.code.value, organizer)

    def test_expired_qr_still_scans(self, pipeline, ticket, organizer, memory_db):
        memory_db.tickets[ticket.id] = replace(ticket, qr_expires_at=NOW - timedelta(days=1))

        result = pipeline.scans.scan(ticket.code.value, organizer)

        assert result.outcome is ScanOutcome.TICKET_VALID

    def test_attendee_cannot_scan(self, pipeline, ticket, student):
        with pytest.raises(ForbiddenError):
            pipeline.scans.scan(ticket.code.value, student)

    def test_unknown_code(self, pipeline, organizer):
        with pytest.raises(TicketNotFoundError):
            pipeline.scans.scan("TK-0000", organizer)


class TestMarkUsed:
    def test_admin_override(self, pipeline, ticket, admin):
        marked = pipeline.scans.mark_used(str(ticket.id), admin)
        assert marked.status is TicketStatus.USED
        assert marked.scanned_by == str(admin.user_id)

    def test_already_used_returned_unchanged(self, pipeline, ticket, organizer, admin):
        pipeline.scans.scan(ticket.code.value, organizer)
        marked = pipeline.scans.mark_used(str(ticket.id), admin)
        assert marked.scanned_by == str(organizer.user_id)

    def test_organizer_cannot_override(self, pipeline, ticket, organizer):
        with pytest.raises(ForbiddenError):
            pipeline.scans.mark_used(str(ticket.id), organizer)
