"""Serializers for transforming domain models to API responses, and for
checking the shape of request bodies before they reach a service."""

from rest_framework import serializers


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField(source="id.value")
    title = serializers.CharField()
    organizer_id = serializers.SerializerMethodField()
    capacity = serializers.IntegerField(source="capacity.value")
    status = serializers.CharField(source="status.value")
    moderation_status = serializers.CharField(source="moderation_status.value")
    ends_at = serializers.DateTimeField(allow_null=True)
    registered_count = serializers.SerializerMethodField()
    waitlist_length = serializers.SerializerMethodField()

    def get_organizer_id(self, obj):
        return str(obj.organizer_id) if obj.organizer_id else None

    def get_registered_count(self, obj) -> int:
        return len(obj.registered_users)

    def get_waitlist_length(self, obj) -> int:
        return len(obj.waitlist)


class AvailabilitySerializer(serializers.Serializer):
    """Serializer for the availability snapshot."""

    event_id = serializers.CharField(source="event_id.value")
    capacity = serializers.IntegerField()
    waitlist_length = serializers.IntegerField()
    registered_count = serializers.IntegerField()
    is_open = serializers.BooleanField()
    status = serializers.CharField(source="status.value")
    ends_at = serializers.DateTimeField(allow_null=True)


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    id = serializers.CharField(source="id.value")
    user_id = serializers.CharField(source="user_id.value")
    event_id = serializers.CharField(source="event_id.value")
    quantity = serializers.IntegerField(source="quantity.value")
    status = serializers.CharField(source="status.value")
    ticket_ids = serializers.SerializerMethodField()
    tickets_issued = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_ticket_ids(self, obj) -> list[str]:
        return [str(t) for t in obj.ticket_ids]


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.CharField(source="id.value")
    code = serializers.CharField(source="code.value")
    user_id = serializers.CharField(source="user_id.value")
    event_id = serializers.CharField(source="event_id.value")
    registration_id = serializers.CharField(source="registration_id.value")
    status = serializers.CharField(source="status.value")
    qr_data_url = serializers.CharField()
    qr_expires_at = serializers.DateTimeField()
    scanned_at = serializers.DateTimeField(allow_null=True)
    scanned_by = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()


class PromotionSerializer(serializers.Serializer):
    """Serializer for a waitlist promotion."""

    registration_id = serializers.CharField(source="registration_id.value")
    user_id = serializers.CharField(source="user_id.value")
    quantity = serializers.IntegerField(source="quantity.value")


class RegisterInputSerializer(serializers.Serializer):
    """Request body for POST /api/registrations."""

    event_id = serializers.CharField()
    quantity = serializers.JSONField(required=False, default=1)


class IssueInputSerializer(serializers.Serializer):
    """Request body for POST /api/tickets."""

    registration_id = serializers.CharField()
    quantity = serializers.JSONField(required=False, default=1)


class QuantityInputSerializer(serializers.Serializer):
    """Request body for PATCH /api/registrations/{id}."""

    quantity = serializers.JSONField()


class ScanInputSerializer(serializers.Serializer):
    """Request body for POST /api/tickets/scan."""

    code = serializers.CharField(required=False, allow_blank=True, default="")
