"""Admin registrations for rooms."""

from __future__ import annotations

from django.contrib import admin

from .models import Room


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("room_id", "name", "room_type", "capacity", "base_rate", "is_active")
    list_filter = ("room_type", "is_active")
    search_fields = ("room_id", "name")
    readonly_fields = ("created_at", "updated_at")
