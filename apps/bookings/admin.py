"""Admin registration for bookings and reservation locks."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingRoom, ReservationLock


class BookingRoomInline(admin.TabularInline):
    model = BookingRoom
    extra = 0


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "guest_name",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("booking_code", "guest_name", "guest_email", "organization")
    inlines = [BookingRoomInline]
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "room_amount",
        "guest_amount",
        "addon_amount",
        "total_price",
        "rate_config_version",
        "price_breakdown",
    )


@admin.register(ReservationLock)
class ReservationLockAdmin(admin.ModelAdmin):
    list_display = ("session_id", "room", "kind", "start_date", "end_date", "expires_at")
    list_filter = ("kind",)
    search_fields = ("session_id", "room__room_id")
