"""Admin registrations for the rate tables."""

from __future__ import annotations

from django.contrib import admin, messages

from .cache import invalidate_rate_config_cache
from .models import AddonRate, RateMatrixEntry, RoomRate, SeasonPeriod


class RateCacheAdminMixin:
    actions = ["invalidate_cache"]

    @admin.action(description="Invalidate cached rate configuration")
    def invalidate_cache(self, request, queryset):
        invalidate_rate_config_cache()
        self.message_user(request, "Rate configuration cache cleared.", messages.SUCCESS)


@admin.register(RateMatrixEntry)
class RateMatrixEntryAdmin(RateCacheAdminMixin, admin.ModelAdmin):
    list_display = ("usage_type", "age_group", "is_leader", "day_type", "season_type", "price", "effective_from", "is_active")
    list_filter = ("usage_type", "age_group", "day_type", "season_type", "is_leader", "is_active")
    list_editable = ("price",)


@admin.register(RoomRate)
class RoomRateAdmin(RateCacheAdminMixin, admin.ModelAdmin):
    list_display = ("room_type", "name", "base_rate", "effective_from", "effective_to", "is_active")
    list_filter = ("is_active",)


@admin.register(AddonRate)
class AddonRateAdmin(RateCacheAdminMixin, admin.ModelAdmin):
    list_display = ("addon_id", "name", "category", "unit_price", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("addon_id", "name")
    fieldsets = (
        (None, {"fields": ("addon_id", "name", "category", "is_active", "effective_from", "effective_to")}),
        ("Meal", {"fields": ("adult_fee", "student_fee", "child_fee", "infant_fee")}),
        (
            "Facility",
            {
                "fields": (
                    "personal_fee_short",
                    "personal_fee_medium",
                    "personal_fee_long",
                    "room_fee_weekday_guest",
                    "room_fee_weekend_guest",
                    "room_fee_weekday_other",
                    "room_fee_weekend_other",
                    "surcharge_per_hour",
                )
            },
        ),
        ("Equipment", {"fields": ("unit_price",)}),
    )


@admin.register(SeasonPeriod)
class SeasonPeriodAdmin(RateCacheAdminMixin, admin.ModelAdmin):
    list_display = ("name", "start", "end", "season_type", "is_active")
    list_filter = ("season_type", "is_active")
