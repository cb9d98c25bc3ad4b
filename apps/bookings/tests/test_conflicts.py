"""Unit tests for booking validation and alternative suggestions."""

from datetime import date

import pytest

from apps.bookings.domain.conflicts import (
    MAX_SUGGESTIONS,
    SUGGEST_CAPACITY,
    SUGGEST_DATES,
    SUGGEST_SPLIT,
    AlternativeRequest,
    ConflictResolver,
)
from apps.bookings.domain.entities import BookedRoom, BookingCandidate, BookingRecord, BookingStatus, RoomInfo
from apps.pricing.domain.inputs import GuestCount
from shared.domain.value_objects import Stay

TODAY = date(2025, 5, 1)


@pytest.fixture
def resolver():
    return ConflictResolver(today=lambda: TODAY)


def booking(booking_id, start, end, *room_ids, status=BookingStatus.CONFIRMED):
    return BookingRecord(
        booking_id=booking_id,
        stay=Stay(start, end),
        rooms=tuple(BookedRoom(room_id, 2) for room_id in room_ids),
        status=status,
    )


def candidate(start=date(2025, 6, 1), end=date(2025, 6, 3), room_ids=("R1",), **guests):
    return BookingCandidate(
        room_ids=tuple(room_ids),
        start_date=start,
        end_date=end,
        guests=GuestCount(**(guests or {"adult": 2})),
    )


class TestValidateBooking:
    def test_free_rooms_validate(self, resolver):
        result = resolver.validate_booking(candidate(), [])

        assert result.is_valid
        assert result.errors == []

    def test_overlap_is_reported_with_the_shared_nights(self, resolver):
        existing = booking("b1", date(2025, 6, 2), date(2025, 6, 5), "R1")

        result = resolver.validate_booking(candidate(), [existing])

        assert not result.is_valid
        [conflict] = result.conflicts
        assert conflict.room_id == "R1"
        assert conflict.overlap_days == [date(2025, 6, 2)]
        assert conflict.conflicting_bookings == [existing]

    def test_cancelled_and_own_bookings_are_ignored(self, resolver):
        cancelled = booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1", status=BookingStatus.CANCELLED)
        own = booking("b2", date(2025, 6, 1), date(2025, 6, 3), "R1")
        edit = candidate()
        edit.booking_id = "b2"

        assert resolver.validate_booking(edit, [cancelled, own]).is_valid

    def test_inverted_range_is_an_error_not_an_exception(self, resolver):
        result = resolver.validate_booking(candidate(start=date(2025, 6, 3), end=date(2025, 6, 1)), [])

        assert not result.is_valid
        assert "must be after check-in" in result.errors[0]

    def test_missing_dates(self, resolver):
        result = resolver.validate_booking(candidate(start=None), [])

        assert result.errors == ["Check-in and check-out dates are required"]

    def test_field_errors(self, resolver):
        result = resolver.validate_booking(
            candidate(start=date(2025, 4, 20), end=date(2025, 4, 22), room_ids=(), adult=0), []
        )

        assert len(result.errors) == 3
        assert any("in the past" in e for e in result.errors)
        assert any("room" in e for e in result.errors)
        assert any("guest" in e for e in result.errors)

    def test_leader_requires_a_private_room(self, resolver):
        rooms = [RoomInfo("R1", "large", 10), RoomInfo("S1", "small_a", 2)]

        shared_only = resolver.validate_booking(candidate(adult=2, leader=1), [], rooms=rooms)
        with_private = resolver.validate_booking(candidate(room_ids=("R1", "S1"), adult=2, leader=1), [], rooms=rooms)

        assert not shared_only.is_valid
        assert with_private.is_valid


class TestSuggestAlternatives:
    def test_fully_booked_rooms_get_shifted_dates(self, resolver):
        rooms = [RoomInfo("R1", "large", 10), RoomInfo("R2", "large", 10)]
        taken = [booking("b1", date(2025, 6, 10), date(2025, 6, 12), "R1", "R2")]
        request = AlternativeRequest(Stay(date(2025, 6, 10), date(2025, 6, 12)), guest_count=4)

        suggestions = resolver.suggest_alternatives(request, rooms, taken)

        assert suggestions
        assert len(suggestions) == MAX_SUGGESTIONS
        assert all(s.kind == SUGGEST_DATES for s in suggestions)
        first = suggestions[0]
        assert first.stay == Stay(date(2025, 6, 8), date(2025, 6, 10))
        assert "earlier" in first.description
        assert suggestions[1].stay == Stay(date(2025, 6, 12), date(2025, 6, 14))

    def test_shifts_never_start_in_the_past(self):
        resolver = ConflictResolver(today=lambda: date(2025, 6, 10))
        rooms = [RoomInfo("R1", "large", 10)]
        taken = [booking("b1", date(2025, 6, 10), date(2025, 6, 12), "R1")]
        request = AlternativeRequest(Stay(date(2025, 6, 10), date(2025, 6, 12)), guest_count=4)

        suggestions = resolver.suggest_alternatives(request, rooms, taken)

        assert all(s.stay.start_date >= date(2025, 6, 10) for s in suggestions)

    def test_group_too_big_for_one_room_gets_a_split(self, resolver):
        rooms = [RoomInfo("R1", "medium_a", 4), RoomInfo("R2", "large", 6), RoomInfo("R3", "medium_b", 3)]
        request = AlternativeRequest(Stay(date(2025, 6, 10), date(2025, 6, 12)), guest_count=8)

        [split] = resolver.suggest_alternatives(request, rooms, [])

        assert split.kind == SUGGEST_SPLIT
        assert [room.room_id for room in split.rooms] == ["R2", "R1"]
        assert split.to_dict()["total_capacity"] == 10

    def test_split_is_offered_beside_a_room_that_fits_alone(self, resolver):
        rooms = [
            RoomInfo("R1", "large", 20),
            RoomInfo("R2", "medium_a", 6),
            RoomInfo("R3", "medium_b", 4),
            RoomInfo("R4", "medium_a", 10),
        ]
        taken = [booking("b1", date(2025, 6, 1), date(2025, 6, 25), "R4")]
        request = AlternativeRequest(Stay(date(2025, 6, 10), date(2025, 6, 12)), guest_count=8, room_ids=("R4",))

        suggestions = resolver.suggest_alternatives(request, rooms, taken)

        assert [s.kind for s in suggestions] == [SUGGEST_SPLIT, SUGGEST_CAPACITY]
        assert [room.room_id for room in suggestions[0].rooms] == ["R2", "R3"]
        assert suggestions[1].rooms[0].room_id == "R1"

    def test_roomy_alternatives_for_a_taken_room(self, resolver):
        rooms = [RoomInfo("R1", "large", 20), RoomInfo("R2", "medium_a", 10)]
        taken = [booking("b1", date(2025, 6, 1), date(2025, 6, 25), "R2")]
        request = AlternativeRequest(Stay(date(2025, 6, 10), date(2025, 6, 12)), guest_count=10, room_ids=("R2",))

        suggestions = resolver.suggest_alternatives(request, rooms, taken)

        assert [s.kind for s in suggestions] == [SUGGEST_CAPACITY]
        assert suggestions[0].rooms[0].room_id == "R1"
        assert suggestions[0].to_dict()["type"] == SUGGEST_CAPACITY
