"""Waitlist promotion after capacity is released."""

import logging

from ticketing.domain import EventId, Promotion, RegistrationStatus
from ticketing.services.capacity_ledger import CapacityLedger
from ticketing.services.notifications import Notifier
from ticketing.stores.interfaces import RegistrationStore, TransactionManager

logger = logging.getLogger(__name__)


class WaitlistPromoter:
    """Confirms the oldest waitlisted registrations that fit, in strict FIFO order.

    Runs inside the releasing operation's unit of work, so a release and the
    promotions it enables commit or roll back together.
    """

    def __init__(
        self,
        tx: TransactionManager,
        ledger: CapacityLedger,
        registrations: RegistrationStore,
        notifier: Notifier,
    ) -> None:
        self._tx = tx
        self._ledger = ledger
        self._registrations = registrations
        self._notifier = notifier

    def promote(self, event_id: EventId) -> list[Promotion]:
        with self._tx.atomic():
            admitted = self._ledger.admit_waitlisted(
                event_id, self._registrations.lock_registration
            )
            promotions = []
            for registration in admitted:
                self._registrations.update_registration(
                    registration.id, status=RegistrationStatus.CONFIRMED
                )
                promotion = Promotion(
                    registration_id=registration.id,
                    user_id=registration.user_id,
                    event_id=event_id,
                    quantity=registration.quantity,
                )
                promotions.append(promotion)
                self._tx.on_commit(self._announce(promotion))

        if promotions:
            logger.info(
                "Promoted %d waitlisted registration(s) on event %s", len(promotions), event_id
            )
        return promotions

    def _announce(self, promotion: Promotion):
        def send() -> None:
            self._notifier.registration_promoted(promotion)

        return send
