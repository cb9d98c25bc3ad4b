"""
Booking Validator

The last check before a booking is stored:
1. fresh snapshot of rooms and bookings, re-validated for conflicts
2. the caller's hold must still cover every requested (room, night) cell
3. selected rooms must hold the whole group
4. soft business-rule warnings (very long stays, very large groups)

Nothing here writes; a failed check leaves no trace.
"""

import logging
from datetime import date
from typing import Callable, List, Optional

from apps.bookings.domain.availability import SnapshotProvider
from apps.bookings.domain.conflicts import ConflictResolver, ValidationResult
from apps.bookings.domain.entities import BookingCandidate, BookingSnapshot
from apps.bookings.domain.locks import BookingLockManager
from shared.domain.exceptions import BookingValidationError, PersistenceError

logger = logging.getLogger(__name__)

HIGH_USAGE_RATIO = 0.8
LONG_STAY_NIGHTS = 30
LARGE_GROUP_GUESTS = 100

LOCK_MISSING = "Your hold on the selected rooms has expired or does not cover the requested dates"
STORE_UNAVAILABLE = "Availability could not be verified, please try again"


class BookingValidator:
    def __init__(
        self,
        snapshots: SnapshotProvider,
        locks: BookingLockManager,
        resolver: Optional[ConflictResolver] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.snapshots = snapshots
        self.locks = locks
        self.resolver = resolver or ConflictResolver()
        self.today = today or self.resolver.today

    def final_validation(self, candidate: BookingCandidate, session_id: str) -> ValidationResult:
        if candidate.start_date is None or candidate.end_date is None:
            return ValidationResult.failed("Check-in and check-out dates are required")
        try:
            stay = candidate.stay
        except BookingValidationError as exc:
            return ValidationResult.failed(str(exc))

        try:
            snapshot = self.snapshots.load(stay)
        except PersistenceError as exc:
            logger.error(f"Final validation failing closed for session {session_id}: {exc}")
            return ValidationResult.failed(STORE_UNAVAILABLE)

        result = self.resolver.validate_booking(
            candidate, snapshot.bookings, today=self.today(), rooms=snapshot.rooms,
        )

        if not self.locks.holds_cells(session_id, candidate.room_ids, stay):
            result = result.merge(ValidationResult.failed(LOCK_MISSING))

        result = result.merge(self._capacity(candidate, snapshot))
        result = result.merge(self._business_rules(candidate, stay.nights))

        if result.is_valid:
            logger.info(f"Final validation passed for session {session_id} ({stay}, rooms {list(candidate.room_ids)})")
        else:
            logger.info(f"Final validation failed for session {session_id}: {result.errors}")
        return result

    def _capacity(self, candidate: BookingCandidate, snapshot: BookingSnapshot) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []
        capacity = 0
        for room_id in dict.fromkeys(candidate.room_ids):
            room = snapshot.room(room_id)
            if room is None or not room.is_active:
                errors.append(f"Room {room_id} does not exist or is inactive")
                continue
            capacity += room.capacity

        guests = candidate.guest_total
        if capacity and guests > capacity:
            errors.append(f"Selected rooms hold {capacity} guests, {guests} requested")
        elif capacity and guests / capacity > HIGH_USAGE_RATIO:
            warnings.append(f"Rooms will be {round(guests / capacity * 100)}% full")
        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def _business_rules(self, candidate: BookingCandidate, nights: int) -> ValidationResult:
        warnings = []
        if nights > LONG_STAY_NIGHTS:
            warnings.append(f"Long stay: {nights} nights")
        if candidate.guest_total > LARGE_GROUP_GUESTS:
            warnings.append(f"Large group: {candidate.guest_total} guests")
        return ValidationResult(is_valid=True, warnings=warnings)
