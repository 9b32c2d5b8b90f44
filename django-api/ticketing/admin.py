from django.contrib import admin

from ticketing.models import Event, Registration, Ticket


class RegistrationInline(admin.TabularInline):
    model = Registration
    extra = 0
    fields = ["user_id", "quantity", "status", "created_at"]
    readonly_fields = ["created_at"]


class TicketInline(admin.TabularInline):
    model = Ticket
    extra = 0
    fields = ["code", "status", "scanned_at", "scanned_by"]
    readonly_fields = ["code", "scanned_at", "scanned_by"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "status", "moderation_status", "capacity", "ends_at", "created_at"]
    list_filter = ["status", "moderation_status"]
    search_fields = ["title"]
    # Written only through the capacity ledger.
    readonly_fields = ["capacity", "registered_users", "waitlist"]
    inlines = [RegistrationInline]

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ["registered_users", "waitlist"]
        return self.readonly_fields


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["user_id", "event", "quantity", "status", "created_at"]
    list_filter = ["status", "event"]
    readonly_fields = ["quantity", "status"]
    inlines = [TicketInline]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["code", "event", "user_id", "status", "scanned_at"]
    list_filter = ["status", "event"]
    search_fields = ["code"]
    readonly_fields = ["code", "status", "qr_data_url", "qr_expires_at", "scanned_at", "scanned_by"]
