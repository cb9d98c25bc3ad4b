"""Reads rooms and bookings from the database into domain snapshots."""

from __future__ import annotations

from datetime import timedelta

from django.db import DatabaseError, transaction  # type: ignore
from django.db.models import Prefetch  # type: ignore

from apps.bookings.domain.entities import BookingSnapshot, RoomInfo
from apps.rooms.models import Room
from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

from .models import Booking, BookingRoom


def room_info(room: Room) -> RoomInfo:
    return RoomInfo(
        room_id=room.room_id,
        room_type=room.room_type,
        capacity=room.capacity,
        base_rate=room.base_rate,
        name=room.name,
        is_active=room.is_active,
    )


class DjangoSnapshotProvider:
    """
    Active rooms plus the active bookings touching a window.

    ``margin_days`` widens the window so alternative-date searches
    (up to a week either side) see every relevant booking.
    """

    def __init__(self, margin_days: int = 7):
        self.margin_days = margin_days

    def load(self, stay: Stay) -> BookingSnapshot:
        start = stay.start_date - timedelta(days=self.margin_days)
        end = stay.end_date + timedelta(days=self.margin_days)
        try:
            with transaction.atomic():
                rooms = [room_info(room) for room in Room.objects.active()]
                bookings = (
                    Booking.objects.active()
                    .overlapping(start, end)
                    .prefetch_related(
                        Prefetch("booking_rooms", queryset=BookingRoom.objects.select_related("room"))
                    )
                )
                records = [booking.to_record() for booking in bookings]
        except DatabaseError as exc:
            raise PersistenceError(f"Booking store unavailable: {exc}") from exc
        return BookingSnapshot(rooms=tuple(rooms), bookings=tuple(records))