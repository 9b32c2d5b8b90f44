from django.urls import path

from ticketing.handlers import (
    EventAvailabilityView,
    EventCancelView,
    EventDetailView,
    EventPromoteWaitlistView,
    EventRegistrationListView,
    EventTicketListView,
    RegistrationCancelView,
    RegistrationCreateView,
    RegistrationDetailView,
    TicketCancelView,
    TicketCreateView,
    TicketDetailView,
    TicketMarkUsedView,
    TicketRefreshQrView,
    TicketRegenerateCodeView,
    TicketScanView,
    TicketValidateView,
    UserRegistrationListView,
    UserTicketListView,
)

urlpatterns = [
    path("registrations", RegistrationCreateView.as_view(), name="registration-create"),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path(
        "registrations/<str:registration_id>/cancel",
        RegistrationCancelView.as_view(),
        name="registration-cancel",
    ),
    path("tickets", TicketCreateView.as_view(), name="ticket-create"),
    # Literal routes first so they are not captured as ticket ids.
    path("tickets/validate", TicketValidateView.as_view(), name="ticket-validate"),
    path("tickets/scan", TicketScanView.as_view(), name="ticket-scan"),
    path("tickets/<str:ticket_id>", TicketDetailView.as_view(), name="ticket-detail"),
    path("tickets/<str:ticket_id>/cancel", TicketCancelView.as_view(), name="ticket-cancel"),
    path(
        "tickets/<str:ticket_id>/regenerate-code",
        TicketRegenerateCodeView.as_view(),
        name="ticket-regenerate-code",
    ),
    path(
        "tickets/<str:ticket_id>/refresh-qr",
        TicketRefreshQrView.as_view(),
        name="ticket-refresh-qr",
    ),
    path(
        "tickets/<str:ticket_id>/mark-used",
        TicketMarkUsedView.as_view(),
        name="ticket-mark-used",
    ),
    path(
        "users/<str:user_id>/registrations",
        UserRegistrationListView.as_view(),
        name="user-registrations",
    ),
    path("users/<str:user_id>/tickets", UserTicketListView.as_view(), name="user-tickets"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/availability",
        EventAvailabilityView.as_view(),
        name="event-availability",
    ),
    path(
        "events/<str:event_id>/registrations",
        EventRegistrationListView.as_view(),
        name="event-registrations",
    ),
    path("events/<str:event_id>/tickets", EventTicketListView.as_view(), name="event-tickets"),
    path("events/<str:event_id>/cancel", EventCancelView.as_view(), name="event-cancel"),
    path(
        "events/<str:event_id>/promote-waitlist",
        EventPromoteWaitlistView.as_view(),
        name="event-promote-waitlist",
    ),
]
