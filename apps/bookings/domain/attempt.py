"""
Booking Attempt

Finite state machine for one session's way from "is anything free?" to a
stored booking.

State transitions:
- INIT -> AVAILABILITY_CHECKED (rooms found)
- AVAILABILITY_CHECKED -> LOCK_ACQUIRED (hold granted)
- LOCK_ACQUIRED -> FINAL_VALIDATED (fresh re-check passed)
- FINAL_VALIDATED -> COMMITTED (booking stored)
- any state after INIT -> LOCK_EXPIRED (hold timed out); reset() goes back to INIT
- any state after INIT -> CONFLICT_DETECTED (terminal for the attempt)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from shared.domain.base import Aggregate
from shared.domain.value_objects import Stay

from .events import BookingCommitted, BookingConflictDetected


class AttemptState(Enum):
    INIT = 'init'
    AVAILABILITY_CHECKED = 'availability_checked'
    LOCK_ACQUIRED = 'lock_acquired'
    FINAL_VALIDATED = 'final_validated'
    COMMITTED = 'committed'
    LOCK_EXPIRED = 'lock_expired'
    CONFLICT_DETECTED = 'conflict_detected'


TERMINAL_STATES = frozenset({AttemptState.COMMITTED, AttemptState.CONFLICT_DETECTED})

_FORWARD = {
    AttemptState.INIT: AttemptState.AVAILABILITY_CHECKED,
    AttemptState.AVAILABILITY_CHECKED: AttemptState.LOCK_ACQUIRED,
    AttemptState.LOCK_ACQUIRED: AttemptState.FINAL_VALIDATED,
    AttemptState.FINAL_VALIDATED: AttemptState.COMMITTED,
}


@dataclass
class BookingAttempt(Aggregate):
    session_id: str = ''
    room_ids: Tuple[str, ...] = ()
    stay: Optional[Stay] = None
    state: AttemptState = AttemptState.INIT
    errors: List[str] = field(default_factory=list)

    def _advance(self, target: AttemptState):
        if _FORWARD.get(self.state) != target:
            raise ValueError(
                f"Cannot move booking attempt from {self.state.value} to {target.value}"
            )
        self.state = target

    def availability_checked(self):
        self._advance(AttemptState.AVAILABILITY_CHECKED)

    def lock_acquired(self):
        self._advance(AttemptState.LOCK_ACQUIRED)

    def final_validated(self):
        self._advance(AttemptState.FINAL_VALIDATED)

    def committed(self, booking_id: str, booking_code: str, guest_total: int, total_price: Decimal):
        self._advance(AttemptState.COMMITTED)
        self.add_event(BookingCommitted(
            aggregate_id=self.id,
            booking_id=booking_id,
            booking_code=booking_code,
            session_id=self.session_id,
            room_ids=self.room_ids,
            stay=self.stay,
            guest_total=guest_total,
            total_price=total_price,
        ))

    def lock_expired(self):
        self._require_started()
        self.state = AttemptState.LOCK_EXPIRED

    def conflict_detected(self, errors: List[str]):
        self._require_started()
        self.state = AttemptState.CONFLICT_DETECTED
        self.errors = list(errors)
        self.add_event(BookingConflictDetected(
            aggregate_id=self.id,
            session_id=self.session_id,
            room_ids=self.room_ids,
            errors=tuple(errors),
        ))

    def reset(self):
        """Start over after the hold timed out."""
        if self.state != AttemptState.LOCK_EXPIRED:
            raise ValueError(f"Only an expired attempt can be reset, not {self.state.value}")
        self.state = AttemptState.INIT
        self.errors = []

    def _require_started(self):
        if self.state == AttemptState.INIT or self.state in TERMINAL_STATES:
            raise ValueError(f"Booking attempt in state {self.state.value} cannot change outcome")

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES
