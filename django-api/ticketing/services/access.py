"""Authorization predicates over a trusted Actor.

The identity layer has already verified ``(user_id, role)``; these checks
only decide whether that principal may act on a given resource.
"""

from abc import ABC, abstractmethod

from ticketing.domain import Actor, Event, UserId
from ticketing.domain.errors import ForbiddenError


class OrganizationDirectory(ABC):
    """Interface to the external organization directory."""

    @abstractmethod
    def is_event_organizer(self, user_id: UserId, event: Event) -> bool:
        """Return True if the user organizes the event."""
        ...


class EventOrganizerDirectory(OrganizationDirectory):
    """Resolves organizers from the event's own ``organizer_id``."""

    def is_event_organizer(self, user_id: UserId, event: Event) -> bool:
        return event.organizer_id is not None and event.organizer_id == user_id


def ensure_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise ForbiddenError("Admin access required")


def ensure_owner_or_admin(actor: Actor, owner_id: UserId) -> None:
    if actor.is_admin or actor.user_id == owner_id:
        return
    raise ForbiddenError()


def ensure_event_staff(actor: Actor, event: Event, directory: OrganizationDirectory) -> None:
    """Admins and the event's organizers run the door and see attendee data."""
    if actor.is_admin or directory.is_event_organizer(actor.user_id, event):
        return
    raise ForbiddenError("Event staff access required")
