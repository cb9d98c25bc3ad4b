"""Database-backed lock store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence

from django.conf import settings  # type: ignore
from django.db import DatabaseError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain.locks import BookingLockManager, LockEntry
from apps.rooms.models import Room
from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

from .models import ReservationLock

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoLockStore:
    """
    Stores holds as ReservationLock rows.

    ``guard`` opens a transaction and locks the affected Room rows in
    room_id order, so acquires on unrelated rooms never wait on each other.
    """

    @contextmanager
    def guard(self, room_ids: Sequence[str]) -> Iterator[None]:
        try:
            with transaction.atomic():
                rooms = Room.objects.filter(room_id__in=sorted(set(room_ids))).order_by("room_id")
                list(_lock_queryset_if_possible(rooms).values_list("pk", flat=True))
                yield
        except DatabaseError as exc:
            raise PersistenceError(f"Lock store unavailable: {exc}") from exc

    def _wrap(self, fn):
        try:
            return fn()
        except DatabaseError as exc:
            raise PersistenceError(f"Lock store unavailable: {exc}") from exc

    def overlapping(self, room_ids: Sequence[str], stay: Stay) -> List[LockEntry]:
        qs = ReservationLock.objects.overlapping(room_ids, stay.start_date, stay.end_date).select_related("room")
        return self._wrap(lambda: [row.to_entry() for row in qs])

    def for_session(self, session_id: str) -> List[LockEntry]:
        qs = ReservationLock.objects.filter(session_id=session_id).select_related("room")
        return self._wrap(lambda: [row.to_entry() for row in qs])

    def _rows(self, entries: Sequence[LockEntry]) -> List[ReservationLock]:
        rooms = Room.objects.in_bulk([e.room_id for e in entries], field_name="room_id")
        return [
            ReservationLock(
                session_id=e.session_id,
                room=rooms[e.room_id],
                start_date=e.stay.start_date,
                end_date=e.stay.end_date,
                kind=e.kind,
                acquired_at=e.acquired_at,
                expires_at=e.expires_at,
            )
            for e in entries
            if e.room_id in rooms
        ]

    def replace_holds(self, session_id: str, entries: Sequence[LockEntry]) -> None:
        def replace():
            with transaction.atomic():
                ReservationLock.objects.filter(session_id=session_id).delete()
                ReservationLock.objects.bulk_create(self._rows(entries))

        self._wrap(replace)

    def add(self, entries: Sequence[LockEntry]) -> None:
        self._wrap(lambda: ReservationLock.objects.bulk_create(self._rows(entries)))

    def release(self, session_id: str) -> int:
        deleted, _ = self._wrap(lambda: ReservationLock.objects.filter(session_id=session_id).delete())
        return deleted

    def purge_expired(self, now: datetime, room_ids: Optional[Sequence[str]] = None) -> int:
        qs = ReservationLock.objects.expired(now)
        if room_ids is not None:
            qs = qs.filter(room__room_id__in=room_ids)
        deleted, _ = self._wrap(qs.delete)
        if deleted:
            logger.info(f"Purged {deleted} expired reservation locks")
        return deleted


def get_lock_manager() -> BookingLockManager:
    return BookingLockManager(
        DjangoLockStore(),
        ttl_seconds=getattr(settings, "BOOKING_LOCK_TTL_SECONDS", 600),
        expiring_seconds=getattr(settings, "BOOKING_LOCK_EXPIRING_SECONDS", 60),
        probe_seconds=getattr(settings, "BOOKING_LOCK_PROBE_SECONDS", 60),
        clock=timezone.now,
    )
