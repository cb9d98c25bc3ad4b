"""Room catalogue for the retreat facility."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.pricing.domain.rates import PRIVATE_ROOM_TYPES, USAGE_PRIVATE, USAGE_SHARED


class RoomQuerySet(models.QuerySet):
    def active(self) -> "RoomQuerySet":
        return self.filter(is_active=True)


class Room(models.Model):
    """A bookable room. Shared rooms are billed per person at group rates."""

    class RoomType(models.TextChoices):
        LARGE = "large", _("Large room")
        MEDIUM_A = "medium_a", _("Medium room A")
        MEDIUM_B = "medium_b", _("Medium room B")
        SMALL_A = "small_a", _("Private room A")
        SMALL_B = "small_b", _("Private room B")
        SMALL_C = "small_c", _("Private room C")

    room_id = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=100)
    room_type = models.CharField(max_length=20, choices=RoomType.choices)
    capacity = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    base_rate = models.DecimalField(
        max_digits=10,
        decimal_places=0,
        default=Decimal("0"),
        help_text=_("Room's own nightly rate, used when the rate table has no entry for its type."),
    )
    floor = models.PositiveSmallIntegerField(null=True, blank=True)
    amenities = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RoomQuerySet.as_manager()

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["room_id"]
        indexes = [models.Index(fields=["is_active", "room_type"], name="room_active_type_idx")]

    def __str__(self) -> str:
        return f"{self.name} ({self.room_id})"

    @property
    def usage_type(self) -> str:
        return USAGE_PRIVATE if self.room_type in PRIVATE_ROOM_TYPES else USAGE_SHARED
