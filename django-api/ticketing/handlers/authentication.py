"""Identity from the upstream gateway.

The gateway authenticates the caller and forwards the verified principal in
``X-User-Id`` and ``X-User-Role``; this layer only parses those headers.
"""

from rest_framework import authentication, exceptions
from rest_framework.request import Request

from ticketing.domain import Actor, Role, UserId

USER_ID_HEADER = "HTTP_X_USER_ID"
ROLE_HEADER = "HTTP_X_USER_ROLE"


class TrustedHeaderAuthentication(authentication.BaseAuthentication):
    """Builds an Actor from the identity headers set by the upstream gateway."""

    def authenticate(self, request: Request) -> tuple[Actor, None] | None:
        raw_user_id = request.META.get(USER_ID_HEADER)
        if not raw_user_id:
            return None
        try:
            user_id = UserId.from_string(raw_user_id)
        except ValueError:
            raise exceptions.AuthenticationFailed("Invalid user id header") from None
        try:
            role = Role(request.META.get(ROLE_HEADER, Role.STUDENT.value).lower())
        except ValueError:
            raise exceptions.AuthenticationFailed("Invalid role header") from None
        return Actor(user_id=user_id, role=role), None

    def authenticate_header(self, request: Request) -> str:
        return "X-User-Id"
