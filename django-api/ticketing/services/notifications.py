"""Outbound notifications for downstream alerting.

Dispatch is informative only: a failing receiver is logged and never
fails the operation that produced the notification.
"""

import logging
from abc import ABC, abstractmethod

from ticketing import signals
from ticketing.domain import Promotion, Registration, Ticket

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Interface for notification dispatch."""

    @abstractmethod
    def ticket_reuse_detected(self, ticket: Ticket, attempted_by: str) -> None:
        ...

    @abstractmethod
    def registration_promoted(self, promotion: Promotion) -> None:
        ...

    @abstractmethod
    def registration_created(self, registration: Registration) -> None:
        ...


class SignalNotifier(Notifier):
    """Publishes notifications as Django signals."""

    def _send(self, signal, **kwargs) -> None:
        for receiver, response in signal.send_robust(sender=self.__class__, **kwargs):
            if isinstance(response, Exception):
                logger.error(
                    "Notification receiver %r failed",
                    receiver,
                    exc_info=(type(response), response, response.__traceback__),
                )

    def ticket_reuse_detected(self, ticket: Ticket, attempted_by: str) -> None:
        self._send(signals.ticket_reuse_detected, ticket=ticket, attempted_by=attempted_by)

    def registration_promoted(self, promotion: Promotion) -> None:
        self._send(signals.registration_promoted, promotion=promotion)

    def registration_created(self, registration: Registration) -> None:
        self._send(signals.registration_created, registration=registration)
