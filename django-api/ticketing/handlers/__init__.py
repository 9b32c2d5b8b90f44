from ticketing.handlers.views import (
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

__all__ = [
    "EventAvailabilityView",
    "EventCancelView",
    "EventDetailView",
    "EventPromoteWaitlistView",
    "EventRegistrationListView",
    "EventTicketListView",
    "RegistrationCancelView",
    "RegistrationCreateView",
    "RegistrationDetailView",
    "TicketCancelView",
    "TicketCreateView",
    "TicketDetailView",
    "TicketMarkUsedView",
    "TicketRefreshQrView",
    "TicketRegenerateCodeView",
    "TicketScanView",
    "TicketValidateView",
    "UserRegistrationListView",
    "UserTicketListView",
]
