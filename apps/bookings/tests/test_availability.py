"""Unit tests for availability queries."""

from datetime import date

import pytest

from apps.bookings.domain.availability import STORE_UNAVAILABLE, AvailabilityIndex
from apps.bookings.domain.entities import BookedRoom, BookingRecord, BookingSnapshot, BookingStatus, RoomInfo
from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay


class StaticSnapshots:
    def __init__(self, snapshot=None, error=None):
        self.snapshot = snapshot
        self.error = error

    def load(self, stay):
        if self.error:
            raise self.error
        return self.snapshot


ROOMS = (
    RoomInfo("R1", "large", 10),
    RoomInfo("R2", "medium_a", 6),
    RoomInfo("S1", "small_a", 2),
)


def booking(booking_id, start, end, *room_ids, guests=2, status=BookingStatus.CONFIRMED):
    return BookingRecord(
        booking_id=booking_id,
        stay=Stay(start, end),
        rooms=tuple(BookedRoom(room_id, guests) for room_id in room_ids),
        status=status,
    )


def index_for(*bookings, rooms=ROOMS):
    return AvailabilityIndex(StaticSnapshots(BookingSnapshot(rooms, bookings)))


def test_overlapping_booking_makes_room_unavailable():
    existing = booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1")

    [check] = index_for(existing).check_availability(["R1"], Stay(date(2025, 6, 2), date(2025, 6, 4)))

    assert check.is_available is False
    assert check.conflicting_bookings == [existing]
    assert check.available_capacity == 0


def test_checkout_day_is_free_for_the_next_checkin():
    existing = booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1")

    [check] = index_for(existing).check_availability(["R1"], Stay(date(2025, 6, 3), date(2025, 6, 5)))

    assert check.is_available is True
    assert check.available_capacity == 10


@pytest.mark.parametrize(
    "first, second",
    [
        ((1, 3), (2, 4)),
        ((1, 3), (3, 5)),
        ((1, 10), (4, 5)),
        ((5, 6), (1, 5)),
        ((1, 2), (1, 2)),
    ],
)
def test_overlap_is_symmetric(first, second):
    a = Stay(date(2025, 6, first[0]), date(2025, 6, first[1]))
    b = Stay(date(2025, 6, second[0]), date(2025, 6, second[1]))

    assert a.overlaps_with(b) == b.overlaps_with(a)


def test_cancelled_bookings_do_not_block():
    cancelled = booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1", status=BookingStatus.CANCELLED)

    [check] = index_for(cancelled).check_availability(["R1"], Stay(date(2025, 6, 1), date(2025, 6, 3)))

    assert check.is_available is True


def test_excluded_booking_does_not_conflict_with_itself():
    existing = booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1")

    [check] = index_for(existing).check_availability(
        ["R1"], Stay(date(2025, 6, 1), date(2025, 6, 4)), exclude_booking_id="b1"
    )

    assert check.is_available is True


def test_unknown_room_fails_only_its_own_item():
    checks = index_for().check_availability(["R1", "NOPE"], Stay(date(2025, 6, 1), date(2025, 6, 2)))

    by_room = {check.room_id: check for check in checks}
    assert by_room["R1"].is_available is True
    assert by_room["NOPE"].is_available is False
    assert by_room["NOPE"].errors


def test_store_failure_reports_every_room_unavailable():
    index = AvailabilityIndex(StaticSnapshots(error=PersistenceError("db down")))

    checks = index.check_availability(["R1", "R2"], Stay(date(2025, 6, 1), date(2025, 6, 2)))

    assert [c.is_available for c in checks] == [False, False]
    assert all(c.errors == [STORE_UNAVAILABLE] for c in checks)
    assert index.available_rooms(Stay(date(2025, 6, 1), date(2025, 6, 2))) == []


def test_occupancy_stats():
    index = index_for(
        booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1", guests=8),
        booking("b2", date(2025, 6, 10), date(2025, 6, 12), "R2", guests=4),
    )

    stats = index.occupancy_stats(Stay(date(2025, 6, 2), date(2025, 6, 4)))

    assert stats.total_rooms == 3
    assert stats.occupied_rooms == 1
    assert stats.occupancy_rate == pytest.approx(33.3)
    assert stats.total_capacity == 18
    assert stats.occupied_capacity == 8


def test_occupancy_rates_stay_within_bounds():
    overbooked = booking("b1", date(2025, 6, 1), date(2025, 6, 3), "S1", guests=9)

    stats = index_for(overbooked, rooms=(RoomInfo("S1", "small_a", 2),)).occupancy_stats(Stay(date(2025, 6, 1), date(2025, 6, 3)))
    empty = index_for(rooms=()).occupancy_stats(Stay(date(2025, 6, 1), date(2025, 6, 3)))

    assert 0 <= stats.occupancy_rate <= 100
    assert stats.guest_occupancy_rate == 100.0
    assert empty.occupancy_rate == 0.0
    assert empty.guest_occupancy_rate == 0.0


def test_occupancy_propagates_store_failure():
    index = AvailabilityIndex(StaticSnapshots(error=PersistenceError("db down")))

    with pytest.raises(PersistenceError):
        index.occupancy_stats(Stay(date(2025, 6, 1), date(2025, 6, 2)))


def test_available_rooms_filters_by_group_size():
    index = index_for(booking("b1", date(2025, 6, 1), date(2025, 6, 3), "R1"))

    rooms = index.available_rooms(Stay(date(2025, 6, 1), date(2025, 6, 3)), guest_count=4)

    assert [room.room_id for room in rooms] == ["R2"]


def test_partial_availability_lists_free_and_busy_nights():
    index = index_for(booking("b1", date(2025, 6, 2), date(2025, 6, 3), "R1"))

    [partial] = index.partial_availability(Stay(date(2025, 6, 1), date(2025, 6, 4)), guest_count=5)

    assert partial.room.room_id == "R1"
    assert partial.busy_dates == [date(2025, 6, 2)]
    assert partial.free_dates == [date(2025, 6, 1), date(2025, 6, 3)]
