"""Cache keys and timeouts for event snapshots."""

import math
from datetime import datetime
from uuid import UUID

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone


def _normalize(event_id) -> str:
    try:
        return str(UUID(str(event_id)))
    except ValueError:
        return str(event_id)


def event_detail_key(event_id) -> str:
    return f"events:{_normalize(event_id)}"


def event_availability_key(event_id) -> str:
    return f"events:{_normalize(event_id)}:availability"


def cache_timeout(stale_at: datetime | None = None) -> int:
    """Configured timeout, cut short so an entry never outlives ``stale_at``."""
    timeout = settings.GATEPASS["CACHE_TIMEOUT_SECONDS"]
    if stale_at is not None:
        remaining = math.ceil((stale_at - timezone.now()).total_seconds())
        if remaining > 0:
            timeout = min(timeout, remaining)
    return timeout


def invalidate_event(event_id) -> None:
    cache.delete_many([event_detail_key(event_id), event_availability_key(event_id)])
