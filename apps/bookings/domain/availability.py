"""
Availability Index

Read-only queries over (room, night) occupancy. Every query reads one
BookingSnapshot from the injected provider, so a single answer never mixes
two states of the store.

When the store cannot be read every room is reported unavailable: a stale
"free" answer could lead to a double booking.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Protocol

from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

from .entities import BookingRecord, BookingSnapshot, RoomInfo

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE = "Availability could not be verified, treating room as unavailable"


class SnapshotProvider(Protocol):
    def load(self, stay: Stay) -> BookingSnapshot:
        """Rooms plus every booking that may overlap ``stay``; raises PersistenceError."""
        ...


@dataclass
class AvailabilityCheck:
    room_id: str
    is_available: bool
    conflicting_bookings: List[BookingRecord] = field(default_factory=list)
    available_capacity: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'room_id': self.room_id,
            'is_available': self.is_available,
            'conflicting_bookings': [b.to_dict() for b in self.conflicting_bookings],
            'available_capacity': self.available_capacity,
            'errors': list(self.errors),
        }


@dataclass
class OccupancyStats:
    total_rooms: int
    occupied_rooms: int
    occupancy_rate: float
    total_capacity: int
    occupied_capacity: int
    guest_occupancy_rate: float

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class PartialAvailability:
    """A room free on some requested nights but not on all of them."""
    room: RoomInfo
    free_dates: List[date]
    busy_dates: List[date]

    def to_dict(self) -> dict:
        return {
            'room': self.room.to_dict(),
            'free_dates': [d.isoformat() for d in self.free_dates],
            'busy_dates': [d.isoformat() for d in self.busy_dates],
        }


def _rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(min(100.0, max(0.0, part / whole * 100)), 1)


class AvailabilityIndex:
    """
    Usage:
        index = AvailabilityIndex(DjangoSnapshotProvider())
        checks = index.check_availability(['R1', 'R2'], stay)
    """

    def __init__(self, snapshots: SnapshotProvider):
        self.snapshots = snapshots

    def snapshot(self, stay: Stay) -> BookingSnapshot:
        return self.snapshots.load(stay)

    def check_availability(
        self,
        room_ids: Iterable[str],
        stay: Stay,
        exclude_booking_id: Optional[str] = None,
        snapshot: Optional[BookingSnapshot] = None,
    ) -> List[AvailabilityCheck]:
        """One result per requested room; an unknown room fails only its own item."""
        room_ids = list(room_ids)
        if snapshot is None:
            try:
                snapshot = self.snapshot(stay)
            except PersistenceError as exc:
                logger.error(f"Failing closed for rooms {room_ids} ({stay}): {exc}")
                return [AvailabilityCheck(room_id, False, errors=[STORE_UNAVAILABLE]) for room_id in room_ids]

        return [self._check_room(snapshot, room_id, stay, exclude_booking_id) for room_id in room_ids]

    def _check_room(
        self,
        snapshot: BookingSnapshot,
        room_id: str,
        stay: Stay,
        exclude_booking_id: Optional[str],
    ) -> AvailabilityCheck:
        room = snapshot.room(room_id)
        if room is None or not room.is_active:
            return AvailabilityCheck(room_id, False, errors=[f"Room {room_id} does not exist or is inactive"])

        conflicts = snapshot.conflicts_for(room_id, stay, exclude_booking_id)
        taken = sum(b.assigned_guests_for(room_id) for b in conflicts)
        return AvailabilityCheck(
            room_id=room_id,
            is_available=not conflicts,
            conflicting_bookings=conflicts,
            available_capacity=max(0, room.capacity - taken) if not conflicts else 0,
        )

    def occupancy_stats(self, stay: Stay, snapshot: Optional[BookingSnapshot] = None) -> OccupancyStats:
        snapshot = snapshot or self.snapshot(stay)
        rooms = snapshot.active_rooms()
        room_ids = {room.room_id for room in rooms}
        overlapping = [b for b in snapshot.active_bookings() if b.stay.overlaps_with(stay)]

        occupied = {room_id for b in overlapping for room_id in b.room_ids if room_id in room_ids}
        total_capacity = sum(room.capacity for room in rooms)
        occupied_capacity = sum(b.assigned_guests for b in overlapping)

        return OccupancyStats(
            total_rooms=len(rooms),
            occupied_rooms=len(occupied),
            occupancy_rate=_rate(len(occupied), len(rooms)),
            total_capacity=total_capacity,
            occupied_capacity=occupied_capacity,
            guest_occupancy_rate=_rate(occupied_capacity, total_capacity),
        )

    def available_rooms(
        self,
        stay: Stay,
        guest_count: int = 0,
        snapshot: Optional[BookingSnapshot] = None,
    ) -> List[RoomInfo]:
        """Active rooms free for the whole stay and big enough for ``guest_count``."""
        if snapshot is None:
            try:
                snapshot = self.snapshot(stay)
            except PersistenceError as exc:
                logger.error(f"Failing closed for room search ({stay}): {exc}")
                return []
        return [room for room in snapshot.free_rooms(stay) if room.capacity >= guest_count]

    def partial_availability(
        self,
        stay: Stay,
        guest_count: int = 0,
        snapshot: Optional[BookingSnapshot] = None,
    ) -> List[PartialAvailability]:
        if snapshot is None:
            try:
                snapshot = self.snapshot(stay)
            except PersistenceError as exc:
                logger.error(f"Failing closed for partial availability ({stay}): {exc}")
                return []

        result = []
        for room in snapshot.active_rooms():
            if room.capacity < guest_count:
                continue
            conflicts = snapshot.conflicts_for(room.room_id, stay)
            if not conflicts:
                continue
            busy = sorted({day for b in conflicts for day in stay.overlap_days(b.stay)})
            free = [day for day in stay.dates() if day not in busy]
            if free:
                result.append(PartialAvailability(room, free, busy))
        return result
