"""
Common Value Objects

Value objects used by both the pricing and the booking domain:
- Stay: a half-open range of nights (check-in inclusive, check-out exclusive)
- whole_units: rounding helper for currency amounts
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, List

from shared.domain.base import ValueObject
from shared.domain.exceptions import BookingValidationError


def whole_units(amount) -> Decimal:
    """Round an amount to the nearest whole currency unit (half up)."""
    return Decimal(amount).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Half-open overlap test: start1 < end2 AND start2 < end1."""
    return start1 < end2 and start2 < end1


@dataclass(frozen=True)
class Stay(ValueObject):
    """
    Stay value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    A stay always covers at least one night; an inverted or empty range is
    rejected here, before anything downstream computes nights.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise BookingValidationError(
                f"Check-out date ({self.end_date}) must be after check-in date ({self.start_date})"
            )

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    def __len__(self) -> int:
        return self.nights

    def overlaps_with(self, other: 'Stay') -> bool:
        """
        Check if this stay shares at least one night with another

        Adjacent stays (one ends the day the other starts) do not overlap.

        Examples:
            - Stay(25, 28) overlaps with Stay(27, 30) -> True
            - Stay(25, 28) overlaps with Stay(28, 31) -> False (adjacent)
        """
        if not isinstance(other, Stay):
            raise TypeError("Can only check overlap with another Stay")
        return ranges_overlap(self.start_date, self.end_date, other.start_date, other.end_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def dates(self) -> Iterator[date]:
        """Each night of the stay, in order."""
        for offset in range(self.nights):
            yield self.start_date + timedelta(days=offset)

    def overlap_days(self, other: 'Stay') -> List[date]:
        """Calendar nights shared by both stays."""
        start = max(self.start_date, other.start_date)
        end = min(self.end_date, other.end_date)
        return [start + timedelta(days=i) for i in range((end - start).days)] if start < end else []

    def shifted(self, days: int) -> 'Stay':
        """Same length of stay, moved by ``days`` (negative moves earlier)."""
        delta = timedelta(days=days)
        return Stay(self.start_date + delta, self.end_date + delta)

    def to_dict(self) -> dict:
        return {
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'nights': self.nights,
        }

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"Stay({self.start_date}, {self.end_date})"
