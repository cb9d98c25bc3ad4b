"""Booking persistence models."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import BookedRoom, BookingRecord, BookingStatus
from apps.bookings.domain.locks import HOLD, PROBE, LockEntry
from shared.domain.value_objects import Stay


def _amount_field(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=0, default=Decimal("0"), **kwargs)


class BookingQuerySet(models.QuerySet):
    def active(self) -> "BookingQuerySet":
        return self.exclude(status=Booking.Status.CANCELLED)

    def overlapping(self, start_date, end_date) -> "BookingQuerySet":
        return self.filter(start_date__lt=end_date, end_date__gt=start_date)


class Booking(models.Model):
    """A committed stay over one or more rooms."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")

    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    guest_name = models.CharField(max_length=150)
    guest_email = models.EmailField(blank=True)
    guest_phone = models.CharField(max_length=32, blank=True)
    organization = models.CharField(max_length=150, blank=True)

    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    adult_count = models.PositiveSmallIntegerField(default=0)
    student_count = models.PositiveSmallIntegerField(default=0)
    child_count = models.PositiveSmallIntegerField(default=0)
    infant_count = models.PositiveSmallIntegerField(default=0)
    baby_count = models.PositiveSmallIntegerField(default=0)
    leader_count = models.PositiveSmallIntegerField(default=0)

    addons = models.JSONField(default=list, blank=True)
    room_amount = _amount_field()
    guest_amount = _amount_field()
    addon_amount = _amount_field()
    total_price = _amount_field()
    currency = models.CharField(max_length=3, default="JPY")
    rate_config_version = models.CharField(max_length=40, blank=True)
    price_breakdown = models.JSONField(default=dict, blank=True)

    session_id = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_stay",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="booking_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.booking_code} ({self.start_date} - {self.end_date})"

    def save(self, *args, **kwargs):  # type: ignore
        if not self.booking_code:
            self.booking_code = self._generate_code()
        super().save(*args, **kwargs)

    @staticmethod
    def _generate_code() -> str:
        return secrets.token_hex(4).upper()

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    @property
    def guest_total(self) -> int:
        return self.adult_count + self.student_count + self.child_count + self.infant_count + self.baby_count

    def to_record(self) -> BookingRecord:
        rooms = tuple(
            BookedRoom(room_id=br.room.room_id, assigned_guests=br.assigned_guests)
            for br in self.booking_rooms.all()
        )
        return BookingRecord(
            booking_id=str(self.pk),
            stay=Stay(self.start_date, self.end_date),
            rooms=rooms,
            status=BookingStatus(self.status),
            guest_total=self.guest_total,
            reference=self.booking_code,
        )


class BookingRoom(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="booking_rooms")
    room = models.ForeignKey("rooms.Room", on_delete=models.PROTECT, related_name="booking_rooms")
    assigned_guests = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Booked room")
        verbose_name_plural = _("Booked rooms")
        constraints = [
            models.UniqueConstraint(fields=["booking", "room"], name="unique_room_per_booking"),
        ]

    def __str__(self) -> str:
        return f"{self.booking_id}: {self.room_id}"


class ReservationLockQuerySet(models.QuerySet):
    def overlapping(self, room_ids, start_date, end_date) -> "ReservationLockQuerySet":
        return self.filter(
            room__room_id__in=room_ids,
            start_date__lt=end_date,
            end_date__gt=start_date,
        )

    def expired(self, now) -> "ReservationLockQuerySet":
        return self.filter(expires_at__lt=now)


class ReservationLock(models.Model):
    """A session's hold (or probe) on one room for a stay."""

    class Kind(models.TextChoices):
        HOLD = HOLD, _("Hold")
        PROBE = PROBE, _("Probe")

    session_id = models.CharField(max_length=64, db_index=True)
    room = models.ForeignKey("rooms.Room", on_delete=models.CASCADE, related_name="reservation_locks")
    start_date = models.DateField()
    end_date = models.DateField()
    kind = models.CharField(max_length=8, choices=Kind.choices, default=Kind.HOLD)
    acquired_at = models.DateTimeField()
    expires_at = models.DateTimeField(db_index=True)

    objects = ReservationLockQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation lock")
        verbose_name_plural = _("Reservation locks")
        ordering = ["expires_at"]
        indexes = [models.Index(fields=["room", "start_date", "end_date"], name="lock_room_dates_idx")]

    def __str__(self) -> str:
        return f"{self.kind} {self.session_id} on {self.room_id} until {self.expires_at:%H:%M:%S}"

    def to_entry(self) -> LockEntry:
        return LockEntry(
            session_id=self.session_id,
            room_id=self.room.room_id,
            stay=Stay(self.start_date, self.end_date),
            acquired_at=self.acquired_at,
            expires_at=self.expires_at,
            kind=self.kind,
        )
