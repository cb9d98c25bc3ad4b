"""
Booking Domain Events

Published after the surrounding transaction commits. Downstream consumers
(estimate sync, exports) subscribe through the message bus.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Tuple

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Stay


@dataclass
class BookingCommitted(DomainEvent):
    """
    Event: a booking passed final validation and was stored

    Triggers:
    - release of the session's reservation hold
    - estimate / CRM sync
    """
    booking_id: str = ''
    booking_code: str = ''
    session_id: str = ''
    room_ids: Tuple[str, ...] = ()
    stay: Stay = None
    guest_total: int = 0
    total_price: Decimal = field(default_factory=Decimal)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'booking_id': self.booking_id,
            'booking_code': self.booking_code,
            'room_ids': list(self.room_ids),
            'stay': self.stay.to_dict() if self.stay else None,
            'guest_total': self.guest_total,
            'total_price': int(self.total_price),
        })
        return data


@dataclass
class BookingConflictDetected(DomainEvent):
    """Event: an attempt was rejected at final validation."""
    session_id: str = ''
    room_ids: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
