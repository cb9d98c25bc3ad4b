"""Inputs to the price calculator: who stays, in which rooms, with which extras."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional

from shared.domain.base import ValueObject
from shared.domain.exceptions import BookingValidationError

from .rates import AGE_GROUPS, USAGE_PRIVATE, USAGE_SHARED


@dataclass(frozen=True)
class GuestCount(ValueObject):
    """
    Guests per age bucket

    ``leader`` is the number of adults booked at the discounted supervising
    rate. Leaders are a subset of ``adult``, not extra guests, and are only
    meaningful for private-room stays.
    """
    adult: int = 0
    student: int = 0
    child: int = 0
    infant: int = 0
    baby: int = 0
    leader: int = 0

    def __post_init__(self):
        for name in AGE_GROUPS + ('leader',):
            if getattr(self, name) < 0:
                raise BookingValidationError(f"Guest count for {name} cannot be negative")
        if self.leader > self.adult:
            raise BookingValidationError(
                f"Leader count ({self.leader}) cannot exceed adult count ({self.adult})"
            )

    def count(self, age_group: str) -> int:
        return getattr(self, age_group)

    @property
    def total(self) -> int:
        return sum(self.count(group) for group in AGE_GROUPS)

    def to_dict(self) -> dict:
        data = {group: self.count(group) for group in AGE_GROUPS}
        data['leader'] = self.leader
        return data


@dataclass(frozen=True)
class RoomUsage(ValueObject):
    """A room selected for a stay, as the wizard hands it to the engine."""
    room_id: str
    room_type: str
    usage_type: str = USAGE_SHARED
    capacity: int = 0
    assigned_guests: int = 0
    rate: Optional[Decimal] = None

    @property
    def is_private(self) -> bool:
        return self.usage_type == USAGE_PRIVATE


@dataclass(frozen=True)
class AddonItem(ValueObject):
    """
    A requested add-on

    Meals carry an ``age_breakdown`` (portions per age group, per night),
    facilities carry booked ``hours`` and a ``guest_type`` ("guest" for
    staying guests, "other" for day visitors), equipment carries ``quantity``.
    """
    addon_id: str
    category: str = ''
    quantity: int = 1
    age_breakdown: Mapping[str, int] = field(default_factory=dict)
    hours: Decimal = Decimal(0)
    guest_type: str = 'guest'
    name: str = ''


def usage_type_for(rooms) -> str:
    """One private room makes the whole stay private."""
    return USAGE_PRIVATE if any(room.is_private for room in rooms) else USAGE_SHARED
