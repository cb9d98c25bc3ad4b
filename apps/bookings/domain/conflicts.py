"""
Conflict Resolver

Validates a candidate booking against existing bookings and, when no room
fits a request, proposes alternatives:
1. the same stay shifted by up to 7 days (earlier first at each offset)
2. a split over two or more free rooms
3. free rooms with comfortable spare capacity

Suggestions keep discovery order and are capped at MAX_SUGGESTIONS.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from apps.pricing.domain.rates import USAGE_PRIVATE
from shared.domain.exceptions import BookingValidationError
from shared.domain.value_objects import Stay

from .entities import BookingCandidate, BookingRecord, BookingSnapshot, RoomInfo

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
MAX_SHIFT_DAYS = 7
COMFORT_FACTOR = Decimal('1.5')

SUGGEST_DATES = 'alternative_dates'
SUGGEST_SPLIT = 'split_booking'
SUGGEST_CAPACITY = 'capacity_fit'


@dataclass
class ConflictInfo:
    room_id: str
    conflicting_bookings: List[BookingRecord]
    overlap_days: List[date]

    def to_dict(self) -> dict:
        return {
            'room_id': self.room_id,
            'conflicting_bookings': [b.to_dict() for b in self.conflicting_bookings],
            'overlap_days': [d.isoformat() for d in self.overlap_days],
        }


@dataclass
class ValidationResult:
    is_valid: bool
    conflicts: List[ConflictInfo] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def failed(cls, *errors: str) -> 'ValidationResult':
        return cls(is_valid=False, errors=list(errors))

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        errors = self.errors + other.errors
        return ValidationResult(
            is_valid=not errors,
            conflicts=self.conflicts + other.conflicts,
            errors=errors,
            warnings=self.warnings + other.warnings,
        )

    def to_dict(self) -> dict:
        return {
            'is_valid': self.is_valid,
            'conflicts': [c.to_dict() for c in self.conflicts],
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


@dataclass(frozen=True)
class AlternativeRequest:
    """What the guest asked for when no room fit."""
    stay: Stay
    guest_count: int
    room_ids: Tuple[str, ...] = ()


@dataclass
class Suggestion:
    kind: str
    description: str
    stay: Stay
    rooms: List[RoomInfo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'type': self.kind,
            'description': self.description,
            'stay': self.stay.to_dict(),
            'rooms': [room.to_dict() for room in self.rooms],
            'total_capacity': sum(room.capacity for room in self.rooms),
        }


class ConflictResolver:
    def __init__(self, today: Callable[[], date] = date.today):
        self.today = today

    def validate_booking(
        self,
        candidate: BookingCandidate,
        existing_bookings: Iterable[BookingRecord],
        today: Optional[date] = None,
        rooms: Iterable[RoomInfo] = (),
    ) -> ValidationResult:
        """
        Check dates, guests and room overlaps.

        Field errors are reported before conflicts are looked up; with an
        unusable stay there is nothing to compare against.
        """
        if candidate.start_date is None or candidate.end_date is None:
            return ValidationResult.failed("Check-in and check-out dates are required")
        try:
            stay = candidate.stay
        except BookingValidationError as exc:
            return ValidationResult.failed(str(exc))

        today = today or self.today()
        errors: List[str] = []
        if stay.start_date < today:
            errors.append(f"Check-in date {stay.start_date} is in the past")
        if not candidate.room_ids:
            errors.append("At least one room must be selected")
        if candidate.guests.total <= 0:
            errors.append("At least one guest is required")

        room_index = {room.room_id: room for room in rooms}
        if candidate.guests.leader and room_index:
            selected = [room_index[r] for r in candidate.room_ids if r in room_index]
            if not any(room.usage_type == USAGE_PRIVATE for room in selected):
                errors.append("Leader rate is only available when a private room is selected")

        existing = [b for b in existing_bookings if b.booking_id != candidate.booking_id]
        conflicts: List[ConflictInfo] = []
        for room_id in dict.fromkeys(candidate.room_ids):
            clashing = [b for b in existing if b.blocks(room_id, stay)]
            if not clashing:
                continue
            overlap = sorted({day for b in clashing for day in stay.overlap_days(b.stay)})
            conflicts.append(ConflictInfo(room_id, clashing, overlap))
            errors.append(f"Room {room_id} is already booked on {len(overlap)} of the requested nights")

        return ValidationResult(is_valid=not errors, conflicts=conflicts, errors=errors)

    def suggest_alternatives(
        self,
        request: AlternativeRequest,
        rooms: Sequence[RoomInfo],
        bookings: Sequence[BookingRecord],
        today: Optional[date] = None,
    ) -> List[Suggestion]:
        today = today or self.today()
        snapshot = BookingSnapshot(tuple(rooms), tuple(bookings))

        suggestions = self._shifted_dates(request, snapshot, today)
        if request.guest_count > 0:
            split = self._split_booking(request, snapshot)
            if split:
                suggestions.append(split)
            suggestions.extend(self._capacity_fits(request, snapshot))

        logger.info(f"{len(suggestions)} alternatives found for {request.stay} ({request.guest_count} guests)")
        return suggestions[:MAX_SUGGESTIONS]

    def _window_is_free(self, request: AlternativeRequest, snapshot: BookingSnapshot, stay: Stay) -> List[RoomInfo]:
        """Rooms that make ``stay`` workable, or an empty list."""
        if request.room_ids:
            wanted = [snapshot.room(room_id) for room_id in request.room_ids]
            if any(room is None or not room.is_active for room in wanted):
                return []
            free = snapshot.free_rooms(stay, wanted)
            return free if len(free) == len(wanted) else []
        return [room for room in snapshot.free_rooms(stay) if room.capacity >= request.guest_count]

    def _shifted_dates(self, request: AlternativeRequest, snapshot: BookingSnapshot, today: date) -> List[Suggestion]:
        found = []
        for offset in range(1, MAX_SHIFT_DAYS + 1):
            for days in (-offset, offset):
                stay = request.stay.shifted(days)
                if stay.start_date < today:
                    continue
                free = self._window_is_free(request, snapshot, stay)
                if free:
                    direction = "earlier" if days < 0 else "later"
                    found.append(Suggestion(
                        kind=SUGGEST_DATES,
                        description=f"Available {offset} day(s) {direction}: {stay}",
                        stay=stay,
                        rooms=free,
                    ))
        return found

    def _split_booking(self, request: AlternativeRequest, snapshot: BookingSnapshot) -> Optional[Suggestion]:
        """Greedy, largest first, over the free rooms that cannot hold the group alone."""
        free = sorted(
            (room for room in snapshot.free_rooms(request.stay) if room.capacity < request.guest_count),
            key=lambda r: (-r.capacity, r.room_id),
        )
        picked, capacity = [], 0
        for room in free:
            if capacity >= request.guest_count:
                break
            picked.append(room)
            capacity += room.capacity
        if len(picked) < 2 or capacity < request.guest_count:
            return None
        names = ", ".join(room.room_id for room in picked)
        return Suggestion(
            kind=SUGGEST_SPLIT,
            description=f"Split across {len(picked)} rooms ({names}), {capacity} beds in total",
            stay=request.stay,
            rooms=picked,
        )

    def _capacity_fits(self, request: AlternativeRequest, snapshot: BookingSnapshot) -> List[Suggestion]:
        threshold = COMFORT_FACTOR * request.guest_count
        return [
            Suggestion(
                kind=SUGGEST_CAPACITY,
                description=f"Room {room.room_id} comfortably fits {request.guest_count} guests (capacity {room.capacity})",
                stay=request.stay,
                rooms=[room],
            )
            for room in snapshot.free_rooms(request.stay)
            if room.capacity >= threshold
        ]
