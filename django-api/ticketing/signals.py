"""Django signals for cache invalidation and ticketing notifications.

``ticket_reuse_detected``, ``registration_promoted`` and
``registration_created`` are sent by ``SignalNotifier`` after the
originating unit of work commits.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from ticketing.cache import invalidate_event
from ticketing.models import Event

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("ticketing.security")

ticket_reuse_detected = Signal()
registration_promoted = Signal()
registration_created = Signal()


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    event_id = instance.pk
    invalidate_event(event_id)
    # Readers inside the window before commit may re-cache the old row.
    transaction.on_commit(lambda: invalidate_event(event_id), robust=True)


@receiver(ticket_reuse_detected)
def alert_administrators(sender, ticket, attempted_by, **kwargs):
    security_logger.warning(
        "SECURITY ALERT: reused ticket %s (code %s) presented at event %s by %s",
        ticket.id,
        ticket.code,
        ticket.event_id,
        attempted_by,
    )


@receiver(registration_promoted)
def log_promotion(sender, promotion, **kwargs):
    logger.info(
        "Registration %s of user %s promoted from the waitlist of event %s",
        promotion.registration_id,
        promotion.user_id,
        promotion.event_id,
    )
