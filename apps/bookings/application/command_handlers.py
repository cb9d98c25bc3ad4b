"""
Booking Command Handlers

Use cases that write. They orchestrate domain operations within transactions.

Commands:
- CommitBookingCommand: final validation, pricing and storage of a booking
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

from django.conf import settings
from django.db import transaction

from apps.bookings.application.validator import LOCK_MISSING, BookingValidator
from apps.bookings.domain.attempt import AttemptState, BookingAttempt
from apps.bookings.domain.conflicts import ValidationResult
from apps.bookings.domain.entities import BookingCandidate, RoomInfo
from apps.bookings.domain.locks import BookingLockManager
from apps.pricing.domain.calculator import PriceBreakdown
from apps.pricing.services import RateConfigService
from apps.rooms.models import Room
from shared.application.uow import DjangoUnitOfWork

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CommitBookingCommand:
    """
    Command to store a booking the session currently holds

    The caller must have acquired a hold over every requested room for the
    candidate's stay.
    """
    session_id: str
    candidate: BookingCandidate
    guest_name: str
    guest_email: str = ''
    guest_phone: str = ''
    organization: str = ''
    notes: str = ''
    created_by_id: Optional[int] = None


@dataclass
class CommitResult:
    attempt: BookingAttempt
    validation: ValidationResult
    booking: Optional[object] = None
    price: Optional[PriceBreakdown] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.attempt.state == AttemptState.COMMITTED


def assign_guests(candidate: BookingCandidate, rooms: Sequence[RoomInfo]) -> Dict[str, int]:
    """Guests per room: explicit numbers win, the rest fill rooms in order up to capacity."""
    if candidate.room_guests:
        return {room.room_id: candidate.room_guests.get(room.room_id, 0) for room in rooms}
    remaining = candidate.guest_total
    assigned = {}
    for room in rooms:
        take = min(room.capacity, remaining)
        assigned[room.room_id] = take
        remaining -= take
    if remaining and rooms:
        assigned[rooms[-1].room_id] += remaining
    return assigned


# ===== Command Handlers =====

class CommitBookingHandler:
    """
    Handler for CommitBooking command

    Strategy:
    1. Start database transaction (atomic)
    2. Lock the requested Room rows (SELECT FOR UPDATE, room_id order)
    3. Final validation: fresh conflicts + caller's hold + capacity
    4. Price the stay with the active rate configuration
    5. Store Booking and BookingRoom rows
    6. Release the session's hold once the transaction commits
    7. Publish BookingCommitted (after commit)
    """

    def __init__(self, validator: BookingValidator, locks: BookingLockManager, pricing: RateConfigService):
        self.validator = validator
        self.locks = locks
        self.pricing = pricing

    def handle(self, command: CommitBookingCommand) -> CommitResult:
        from apps.bookings.models import Booking, BookingRoom
        from apps.bookings.repositories import room_info

        candidate = command.candidate
        attempt = BookingAttempt(
            session_id=command.session_id,
            room_ids=tuple(candidate.room_ids),
            state=AttemptState.LOCK_ACQUIRED,
        )
        logger.info(
            f"Committing booking for session {command.session_id}, "
            f"rooms {list(candidate.room_ids)}, {candidate.start_date} - {candidate.end_date}"
        )

        with DjangoUnitOfWork() as uow:
            rooms = list(
                Room.objects.select_for_update()
                .filter(room_id__in=sorted(set(candidate.room_ids)))
                .order_by("room_id")
            )

            validation = self.validator.final_validation(candidate, command.session_id)
            if not validation.is_valid:
                if validation.errors and all(e == LOCK_MISSING for e in validation.errors):
                    attempt.lock_expired()
                else:
                    attempt.conflict_detected(validation.errors)
                uow.collect_events(attempt)
                return CommitResult(attempt=attempt, validation=validation, warnings=validation.warnings)

            attempt.stay = candidate.stay
            attempt.final_validated()

            by_id = {room.room_id: room for room in rooms}
            ordered = [room_info(by_id[room_id]) for room_id in dict.fromkeys(candidate.room_ids)]
            guests_per_room = assign_guests(candidate, ordered)
            usages = [room.to_usage(guests_per_room[room.room_id]) for room in ordered]
            price = self.pricing.compute_price(usages, candidate.guests, attempt.stay, candidate.addons)

            guests = candidate.guests
            booking = Booking.objects.create(
                created_by_id=command.created_by_id,
                guest_name=command.guest_name,
                guest_email=command.guest_email,
                guest_phone=command.guest_phone,
                organization=command.organization,
                notes=command.notes,
                start_date=candidate.start_date,
                end_date=candidate.end_date,
                status=Booking.Status.CONFIRMED,
                adult_count=guests.adult,
                student_count=guests.student,
                child_count=guests.child,
                infant_count=guests.infant,
                baby_count=guests.baby,
                leader_count=guests.leader,
                addons=[_addon_dict(addon) for addon in candidate.addons],
                room_amount=price.room_amount,
                guest_amount=price.guest_amount,
                addon_amount=price.addon_amount,
                total_price=price.total,
                currency=getattr(settings, "BOOKING_CURRENCY", "JPY"),
                rate_config_version=price.rate_config_version,
                price_breakdown=price.to_dict(),
                session_id=command.session_id,
            )
            BookingRoom.objects.bulk_create([
                BookingRoom(booking=booking, room=by_id[room.room_id], assigned_guests=guests_per_room[room.room_id])
                for room in ordered
            ])

            attempt.committed(str(booking.pk), booking.booking_code, guests.total, price.total)
            uow.collect_events(attempt)

            session_id = command.session_id
            transaction.on_commit(lambda: self.locks.release(session_id))

        logger.info(f"Booking {booking.booking_code} committed (total {price.total})")
        return CommitResult(
            attempt=attempt,
            validation=validation,
            booking=booking,
            price=price,
            warnings=validation.warnings,
        )


def _addon_dict(addon) -> dict:
    return {
        'addon_id': addon.addon_id,
        'category': addon.category,
        'quantity': addon.quantity,
        'age_breakdown': dict(addon.age_breakdown),
        'hours': str(addon.hours),
        'guest_type': addon.guest_type,
    }
