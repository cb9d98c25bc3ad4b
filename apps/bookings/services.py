"""Wiring of the booking engine to Django, plus the availability search use case."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from django.utils import timezone  # type: ignore

from apps.bookings.application.command_handlers import CommitBookingHandler
from apps.bookings.application.validator import BookingValidator
from apps.bookings.domain.availability import (
    STORE_UNAVAILABLE,
    AvailabilityCheck,
    AvailabilityIndex,
    OccupancyStats,
    PartialAvailability,
)
from apps.bookings.domain.conflicts import AlternativeRequest, ConflictResolver, Suggestion
from apps.bookings.domain.entities import RoomInfo
from apps.pricing.services import get_rate_config_service
from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

from .lock_stores import get_lock_manager
from .repositories import DjangoSnapshotProvider

logger = logging.getLogger(__name__)


def get_availability_index() -> AvailabilityIndex:
    return AvailabilityIndex(DjangoSnapshotProvider())


def get_conflict_resolver() -> ConflictResolver:
    return ConflictResolver(today=timezone.localdate)


def get_booking_validator() -> BookingValidator:
    return BookingValidator(DjangoSnapshotProvider(), get_lock_manager(), get_conflict_resolver())


def get_commit_handler() -> CommitBookingHandler:
    return CommitBookingHandler(get_booking_validator(), get_lock_manager(), get_rate_config_service())


@dataclass
class AvailabilitySearch:
    checks: List[AvailabilityCheck]
    available_rooms: List[RoomInfo] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)
    partially_available: List[PartialAvailability] = field(default_factory=list)
    occupancy: Optional[OccupancyStats] = None

    @property
    def is_available(self) -> bool:
        if self.checks:
            return any(check.is_available for check in self.checks)
        return bool(self.available_rooms)

    def to_dict(self) -> dict:
        return {
            'is_available': self.is_available,
            'checks': [c.to_dict() for c in self.checks],
            'available_rooms': [r.to_dict() for r in self.available_rooms],
            'suggestions': [s.to_dict() for s in self.suggestions],
            'partially_available': [p.to_dict() for p in self.partially_available],
            'occupancy': self.occupancy.to_dict() if self.occupancy else None,
        }


def search_availability(
    stay: Stay,
    guest_count: int,
    room_ids: Sequence[str] = (),
    exclude_booking_id: Optional[str] = None,
    include_partial: bool = False,
) -> AvailabilitySearch:
    """
    Per-room checks for the requested rooms (or every active room), and
    alternatives when nothing fits.
    """
    index = get_availability_index()
    try:
        snapshot = index.snapshot(stay)
    except PersistenceError as exc:
        logger.error(f"Availability search failing closed ({stay}): {exc}")
        return AvailabilitySearch(
            checks=[AvailabilityCheck(room_id, False, errors=[STORE_UNAVAILABLE]) for room_id in room_ids],
        )

    requested = list(room_ids) or [room.room_id for room in snapshot.active_rooms()]
    checks = index.check_availability(requested, stay, exclude_booking_id, snapshot=snapshot)
    fitting = index.available_rooms(stay, guest_count, snapshot=snapshot)
    result = AvailabilitySearch(
        checks=checks,
        available_rooms=fitting,
        occupancy=index.occupancy_stats(stay, snapshot=snapshot),
    )

    nothing_fits = not any(c.is_available for c in checks) if room_ids else not fitting
    if nothing_fits:
        request = AlternativeRequest(stay=stay, guest_count=guest_count, room_ids=tuple(room_ids))
        result.suggestions = get_conflict_resolver().suggest_alternatives(
            request, snapshot.rooms, snapshot.active_bookings(exclude_booking_id), today=timezone.localdate(),
        )
    if include_partial:
        result.partially_available = index.partial_availability(stay, guest_count, snapshot=snapshot)
    return result
