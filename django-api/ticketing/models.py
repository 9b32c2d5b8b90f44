"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import Q


class Event(models.Model):
    """Persistence model for events, including the capacity ledger fields."""

    class Status(models.TextChoices):
        UPCOMING = "upcoming", "Upcoming"
        ONGOING = "ongoing", "Ongoing"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class ModerationStatus(models.TextChoices):
        PENDING_APPROVAL = "pending_approval", "Pending approval"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        FLAGGED = "flagged", "Flagged"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    organizer_id = models.UUIDField(blank=True, null=True, db_index=True)
    # Remaining open seats, not total capacity.
    capacity = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.UPCOMING, db_index=True
    )
    moderation_status = models.CharField(
        max_length=20,
        choices=ModerationStatus.choices,
        default=ModerationStatus.PENDING_APPROVAL,
        db_index=True,
    )
    ends_at = models.DateTimeField(blank=True, null=True)
    registered_users = models.JSONField(default=list, blank=True)
    # Registration ids, oldest first.
    waitlist = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(capacity__gte=0), name="event_capacity_non_negative"
            ),
        ]

    def __str__(self) -> str:
        return self.title


class Registration(models.Model):
    """Persistence model for a user's claim on an event."""

    class Status(models.TextChoices):
        CONFIRMED = "confirmed", "Confirmed"
        WAITLISTED = "waitlisted", "Waitlisted"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="registrations"
    )
    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.CONFIRMED, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "event"],
                condition=~Q(status="cancelled"),
                name="one_active_registration_per_user_event",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1), name="registration_quantity_positive"
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="ticketing_r_event_i_5d0a47_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} - {self.event_id} ({self.status})"


class Ticket(models.Model):
    """Persistence model for issued tickets."""

    class Status(models.TextChoices):
        VALID = "valid", "Valid"
        USED = "used", "Used"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=64, unique=True)
    user_id = models.UUIDField(db_index=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    registration = models.ForeignKey(
        Registration, on_delete=models.CASCADE, related_name="tickets"
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.VALID, db_index=True
    )
    qr_data_url = models.TextField(blank=True, default="")
    qr_expires_at = models.DateTimeField()
    scanned_at = models.DateTimeField(blank=True, null=True)
    scanned_by = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["event", "status"], name="ticketing_t_event_i_8c1f2e_idx"),
            models.Index(
                fields=["registration", "status"], name="ticketing_t_registr_3b9e71_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.status})"
