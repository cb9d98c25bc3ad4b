"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .models import ReservationLock

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.purge_expired_locks")
def purge_expired_locks() -> dict[str, int]:
    """
    Delete reservation locks past their expiry.

    Readers already ignore expired rows; this only keeps the table small.
    Runs every minute through Celery Beat.

    Returns:
        dict: {"purged": number of deleted rows}
    """
    deleted, _ = ReservationLock.objects.expired(timezone.now()).delete()
    if deleted:
        logger.info(f"Purged {deleted} expired reservation locks")
    return {"purged": deleted}
