"""Unit tests for the booking attempt state machine."""

from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.domain.attempt import AttemptState, BookingAttempt
from apps.bookings.domain.events import BookingCommitted, BookingConflictDetected
from shared.domain.value_objects import Stay


def attempt_at(state=AttemptState.INIT):
    return BookingAttempt(
        session_id="session-a",
        room_ids=("R1",),
        stay=Stay(date(2025, 6, 1), date(2025, 6, 3)),
        state=state,
    )


def test_happy_path_ends_committed_with_an_event():
    attempt = attempt_at()

    attempt.availability_checked()
    attempt.lock_acquired()
    attempt.final_validated()
    attempt.committed("42", "ABCD1234", 4, Decimal(29600))

    assert attempt.state == AttemptState.COMMITTED
    assert attempt.is_terminal
    [event] = attempt.events
    assert isinstance(event, BookingCommitted)
    assert event.booking_code == "ABCD1234"
    assert event.aggregate_id == attempt.id
    assert event.to_dict()["total_price"] == 29600


def test_steps_cannot_be_skipped():
    attempt = attempt_at()

    with pytest.raises(ValueError):
        attempt.lock_acquired()
    with pytest.raises(ValueError):
        attempt.committed("42", "ABCD1234", 4, Decimal(0))


def test_expired_hold_can_start_over():
    attempt = attempt_at(AttemptState.LOCK_ACQUIRED)

    attempt.lock_expired()
    assert attempt.state == AttemptState.LOCK_EXPIRED
    assert not attempt.is_terminal

    attempt.reset()
    assert attempt.state == AttemptState.INIT


def test_only_expired_attempts_reset():
    with pytest.raises(ValueError):
        attempt_at(AttemptState.FINAL_VALIDATED).reset()


def test_conflict_is_terminal_and_announced():
    attempt = attempt_at(AttemptState.LOCK_ACQUIRED)

    attempt.conflict_detected(["Room R1 is already booked on 1 of the requested nights"])

    assert attempt.state == AttemptState.CONFLICT_DETECTED
    assert attempt.is_terminal
    [event] = attempt.events
    assert isinstance(event, BookingConflictDetected)
    assert event.room_ids == ("R1",)
    with pytest.raises(ValueError):
        attempt.lock_expired()


def test_nothing_to_expire_before_the_attempt_started():
    with pytest.raises(ValueError):
        attempt_at().lock_expired()
    with pytest.raises(ValueError):
        attempt_at().conflict_detected(["x"])
