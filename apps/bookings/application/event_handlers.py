"""Subscribers for booking domain events."""

import logging

from apps.bookings.domain.events import BookingCommitted, BookingConflictDetected
from shared.application.message_bus import message_bus

logger = logging.getLogger(__name__)


def record_booking_committed(event: BookingCommitted):
    logger.info(
        f"Booking {event.booking_code} committed: rooms {list(event.room_ids)}, "
        f"{event.stay}, {event.guest_total} guests, total {event.total_price}"
    )


def record_conflict(event: BookingConflictDetected):
    logger.warning(f"Session {event.session_id} lost rooms {list(event.room_ids)}: {list(event.errors)}")


def register_handlers():
    message_bus.register_event_handler(BookingCommitted, record_booking_committed)
    message_bus.register_event_handler(BookingConflictDetected, record_conflict)
