"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.cache import cache_timeout, event_availability_key, event_detail_key
from ticketing.domain import ScanOutcome
from ticketing.domain.errors import DomainError, ErrorKind, InvalidInputError
from ticketing.handlers.serializers import (
    AvailabilitySerializer,
    EventSerializer,
    IssueInputSerializer,
    PromotionSerializer,
    QuantityInputSerializer,
    RegisterInputSerializer,
    RegistrationSerializer,
    ScanInputSerializer,
    TicketSerializer,
)
from ticketing.services.pipeline import Pipeline, default_pipeline

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: DomainError) -> Response:
    return Response(
        {"code": error.code.value, "message": error.message},
        status=STATUS_BY_KIND[error.kind],
    )


def parse_body(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        field = next(iter(serializer.errors), None)
        raise InvalidInputError(f"Invalid or missing field: {field}" if field else "Invalid request body")
    return serializer.validated_data


class TicketingView(APIView):
    """Base view: resolves services and maps domain errors to responses."""

    @property
    def pipeline(self) -> Pipeline:
        return default_pipeline()

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            if exc.kind is ErrorKind.INTERNAL:
                logger.error("Request %s %s failed: %s", self.request.method, self.request.path, exc)
            return error_response(exc)
        return super().handle_exception(exc)


class RegistrationCreateView(TicketingView):
    """Handler for POST /api/registrations"""

    def post(self, request: Request) -> Response:
        body = parse_body(RegisterInputSerializer, request)
        registration = self.pipeline.registrations.register(
            request.user, body["event_id"], body["quantity"]
        )
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)


class RegistrationDetailView(TicketingView):
    """Handler for GET/PATCH/DELETE /api/registrations/{registration_id}"""

    def get(self, request: Request, registration_id: str) -> Response:
        registration = self.pipeline.registrations.get(registration_id, request.user)
        return Response(RegistrationSerializer(registration).data)

    def patch(self, request: Request, registration_id: str) -> Response:
        body = parse_body(QuantityInputSerializer, request)
        registration = self.pipeline.registrations.change_quantity(
            registration_id, body["quantity"], request.user
        )
        return Response(RegistrationSerializer(registration).data)

    def delete(self, request: Request, registration_id: str) -> Response:
        self.pipeline.registrations.delete(registration_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RegistrationCancelView(TicketingView):
    """Handler for POST /api/registrations/{registration_id}/cancel"""

    def post(self, request: Request, registration_id: str) -> Response:
        registration = self.pipeline.registrations.cancel(registration_id, request.user)
        return Response(RegistrationSerializer(registration).data)


class UserRegistrationListView(TicketingView):
    """Handler for GET /api/users/{user_id}/registrations"""

    def get(self, request: Request, user_id: str) -> Response:
        registrations = self.pipeline.registrations.list_for_user(user_id, request.user)
        return Response(RegistrationSerializer(registrations, many=True).data)


class EventRegistrationListView(TicketingView):
    """Handler for GET /api/events/{event_id}/registrations"""

    def get(self, request: Request, event_id: str) -> Response:
        registrations = self.pipeline.registrations.list_for_event(event_id, request.user)
        return Response(RegistrationSerializer(registrations, many=True).data)


class TicketCreateView(TicketingView):
    """Handler for POST /api/tickets"""

    def post(self, request: Request) -> Response:
        body = parse_body(IssueInputSerializer, request)
        tickets = self.pipeline.tickets.issue(
            body["registration_id"], body["quantity"], request.user
        )
        return Response(TicketSerializer(tickets, many=True).data, status=status.HTTP_201_CREATED)


class TicketDetailView(TicketingView):
    """Handler for GET /api/tickets/{ticket_id}"""

    def get(self, request: Request, ticket_id: str) -> Response:
        ticket = self.pipeline.tickets.get(ticket_id, request.user)
        return Response(TicketSerializer(ticket).data)


class TicketCancelView(TicketingView):
    """Handler for POST /api/tickets/{ticket_id}/cancel"""

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = self.pipeline.tickets.cancel(ticket_id, request.user)
        return Response(TicketSerializer(ticket).data)


class TicketRegenerateCodeView(TicketingView):
    """Handler for POST /api/tickets/{ticket_id}/regenerate-code"""

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = self.pipeline.tickets.regenerate_code(ticket_id, request.user)
        return Response(TicketSerializer(ticket).data)


class TicketRefreshQrView(TicketingView):
    """Handler for POST /api/tickets/{ticket_id}/refresh-qr"""

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = self.pipeline.tickets.refresh_qr(ticket_id, request.user)
        return Response(TicketSerializer(ticket).data)


class TicketMarkUsedView(TicketingView):
    """Handler for POST /api/tickets/{ticket_id}/mark-used"""

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = self.pipeline.scans.mark_used(ticket_id, request.user)
        return Response(TicketSerializer(ticket).data)


class TicketValidateView(TicketingView):
    """Handler for GET /api/tickets/validate?code="""

    def get(self, request: Request) -> Response:
        view = self.pipeline.scans.validate(request.query_params.get("code", ""))
        return Response(
            {
                "valid": True,
                "message": view.message,
                "ticket": TicketSerializer(view.ticket).data,
            }
        )

    def handle_exception(self, exc):
        response = super().handle_exception(exc)
        if isinstance(exc, DomainError):
            response.data = {"valid": False, **response.data}
        return response


class TicketScanView(TicketingView):
    """Handler for POST /api/tickets/scan"""

    def post(self, request: Request) -> Response:
        body = parse_body(ScanInputSerializer, request)
        result = self.pipeline.scans.scan(body["code"], request.user)
        payload = {
            "code": result.outcome.value,
            "message": result.message,
            "alert": result.reuse_alert,
            "ticket": TicketSerializer(result.ticket).data,
        }
        if result.outcome is ScanOutcome.TICKET_ALREADY_USED:
            payload["attempted_by"] = result.attempted_by
            return Response(payload, status=status.HTTP_409_CONFLICT)
        return Response(payload)


class UserTicketListView(TicketingView):
    """Handler for GET /api/users/{user_id}/tickets"""

    def get(self, request: Request, user_id: str) -> Response:
        tickets = self.pipeline.tickets.list_for_user(user_id, request.user)
        return Response(TicketSerializer(tickets, many=True).data)


class EventTicketListView(TicketingView):
    """Handler for GET /api/events/{event_id}/tickets"""

    def get(self, request: Request, event_id: str) -> Response:
        tickets = self.pipeline.tickets.list_for_event(event_id, request.user)
        return Response(TicketSerializer(tickets, many=True).data)


class EventDetailView(TicketingView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        key = event_detail_key(event_id)
        data = cache.get(key)
        if data is None:
            data = dict(EventSerializer(self.pipeline.events.get_event(event_id)).data)
            cache.set(key, data, cache_timeout())
        return Response(data)


class EventAvailabilityView(TicketingView):
    """Handler for GET /api/events/{event_id}/availability"""

    def get(self, request: Request, event_id: str) -> Response:
        key = event_availability_key(event_id)
        data = cache.get(key)
        if data is None:
            availability = self.pipeline.events.availability(event_id)
            data = dict(AvailabilitySerializer(availability).data)
            # is_open flips when the event ends.
            cache.set(key, data, cache_timeout(stale_at=availability.ends_at))
        return Response(data)


class EventCancelView(TicketingView):
    """Handler for POST /api/events/{event_id}/cancel"""

    def post(self, request: Request, event_id: str) -> Response:
        event = self.pipeline.events.cancel_event(event_id, request.user)
        return Response(EventSerializer(event).data)


class EventPromoteWaitlistView(TicketingView):
    """Handler for POST /api/events/{event_id}/promote-waitlist"""

    def post(self, request: Request, event_id: str) -> Response:
        promotions = self.pipeline.events.promote_waitlist(event_id, request.user)
        return Response({"promoted": PromotionSerializer(promotions, many=True).data})
