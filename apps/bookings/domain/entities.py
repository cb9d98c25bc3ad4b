"""
Booking Domain Entities

Plain records the availability, conflict and lock logic work on:
- RoomInfo: an active room as the catalogue describes it
- BookingRecord: an existing booking (rooms, stay, status, assigned guests)
- BookingCandidate: the booking a session is trying to make
- BookingSnapshot: rooms + bookings read together, one consistent view
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from apps.pricing.domain.inputs import AddonItem, GuestCount, RoomUsage
from apps.pricing.domain.rates import PRIVATE_ROOM_TYPES, USAGE_PRIVATE, USAGE_SHARED
from shared.domain.base import ValueObject
from shared.domain.value_objects import Stay


class BookingStatus(Enum):
    """
    Booking status

    Only pending and confirmed bookings block rooms; cancelled bookings are
    ignored by every conflict check.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'

    @property
    def is_active(self) -> bool:
        return self != BookingStatus.CANCELLED


@dataclass(frozen=True)
class RoomInfo(ValueObject):
    room_id: str
    room_type: str
    capacity: int
    base_rate: Decimal = Decimal(0)
    name: str = ''
    is_active: bool = True

    @property
    def usage_type(self) -> str:
        return USAGE_PRIVATE if self.room_type in PRIVATE_ROOM_TYPES else USAGE_SHARED

    def to_usage(self, assigned_guests: int = 0) -> RoomUsage:
        return RoomUsage(
            room_id=self.room_id,
            room_type=self.room_type,
            usage_type=self.usage_type,
            capacity=self.capacity,
            assigned_guests=assigned_guests,
            rate=self.base_rate,
        )

    def to_dict(self) -> dict:
        return {
            'room_id': self.room_id,
            'name': self.name,
            'room_type': self.room_type,
            'usage_type': self.usage_type,
            'capacity': self.capacity,
        }


@dataclass(frozen=True)
class BookedRoom(ValueObject):
    room_id: str
    assigned_guests: int = 0


@dataclass(frozen=True)
class BookingRecord(ValueObject):
    """An existing booking as the conflict logic sees it."""
    booking_id: str
    stay: Stay
    rooms: Tuple[BookedRoom, ...]
    status: BookingStatus = BookingStatus.CONFIRMED
    guest_total: int = 0
    reference: str = ''

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def room_ids(self) -> Tuple[str, ...]:
        return tuple(room.room_id for room in self.rooms)

    def references(self, room_id: str) -> bool:
        return room_id in self.room_ids

    def assigned_guests_for(self, room_id: str) -> int:
        return sum(room.assigned_guests for room in self.rooms if room.room_id == room_id)

    @property
    def assigned_guests(self) -> int:
        return sum(room.assigned_guests for room in self.rooms)

    def blocks(self, room_id: str, stay: Stay) -> bool:
        """True if this booking keeps ``room_id`` busy on any night of ``stay``."""
        return self.is_active and self.references(room_id) and self.stay.overlaps_with(stay)

    def to_dict(self) -> dict:
        return {
            'booking_id': self.booking_id,
            'reference': self.reference,
            'status': self.status.value,
            'room_ids': list(self.room_ids),
            **self.stay.to_dict(),
        }


@dataclass
class BookingCandidate:
    """
    The booking a session wants to commit

    Dates are kept raw so an inverted range can be reported as a validation
    error instead of failing at construction.
    """
    room_ids: Tuple[str, ...]
    start_date: Optional[date]
    end_date: Optional[date]
    guests: GuestCount = field(default_factory=GuestCount)
    addons: Tuple[AddonItem, ...] = ()
    booking_id: Optional[str] = None
    room_guests: Dict[str, int] = field(default_factory=dict)

    @property
    def stay(self) -> Stay:
        """Raises BookingValidationError for inverted or empty ranges."""
        return Stay(self.start_date, self.end_date)

    @property
    def guest_total(self) -> int:
        return self.guests.total


@dataclass(frozen=True)
class BookingSnapshot:
    """Active rooms and bookings read in one go."""
    rooms: Tuple[RoomInfo, ...] = ()
    bookings: Tuple[BookingRecord, ...] = ()
    _room_index: Dict[str, RoomInfo] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_room_index', {room.room_id: room for room in self.rooms})

    def room(self, room_id: str) -> Optional[RoomInfo]:
        return self._room_index.get(room_id)

    def active_rooms(self) -> List[RoomInfo]:
        return [room for room in self.rooms if room.is_active]

    def active_bookings(self, exclude_booking_id: Optional[str] = None) -> List[BookingRecord]:
        return [
            booking for booking in self.bookings
            if booking.is_active and booking.booking_id != exclude_booking_id
        ]

    def conflicts_for(
        self,
        room_id: str,
        stay: Stay,
        exclude_booking_id: Optional[str] = None,
    ) -> List[BookingRecord]:
        return [
            booking for booking in self.active_bookings(exclude_booking_id)
            if booking.blocks(room_id, stay)
        ]

    def free_rooms(self, stay: Stay, candidates: Optional[Iterable[RoomInfo]] = None) -> List[RoomInfo]:
        rooms = self.active_rooms() if candidates is None else list(candidates)
        return [room for room in rooms if not self.conflicts_for(room.room_id, stay)]
