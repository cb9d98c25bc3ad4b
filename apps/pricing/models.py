"""Persisted rate configuration.

Administrators edit these tables; ``apps.pricing.repositories`` turns the
rows that are active today into an immutable ``RateConfig``. Every save or
delete invalidates the cached configuration (see ``signals.py``).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.pricing.domain import rates

month_day_validator = RegexValidator(
    regex=r"^(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$",
    message=_("Use the MM-DD format."),
)


def _price_field(**kwargs):
    return models.DecimalField(
        max_digits=10,
        decimal_places=0,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        **kwargs,
    )


class EffectiveQuerySet(models.QuerySet):
    """Rows switched on and inside their validity window on a given day."""

    def effective_on(self, day) -> "EffectiveQuerySet":
        return self.filter(is_active=True, effective_from__lte=day).filter(
            Q(effective_to__isnull=True) | Q(effective_to__gte=day)
        )


class EffectivePeriodModel(models.Model):
    effective_from = models.DateField(default=timezone.localdate)
    effective_to = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EffectiveQuerySet.as_manager()

    class Meta:
        abstract = True


class RateMatrixEntry(EffectivePeriodModel):
    """Guest price per night for one age group / usage / day / season cell."""

    class AgeGroup(models.TextChoices):
        ADULT = "adult", _("Adult")
        STUDENT = "student", _("Student")
        CHILD = "child", _("Child")
        INFANT = "infant", _("Infant")
        BABY = "baby", _("Baby")

    class UsageType(models.TextChoices):
        SHARED = rates.USAGE_SHARED, _("Shared room")
        PRIVATE = rates.USAGE_PRIVATE, _("Private room")

    class DayType(models.TextChoices):
        WEEKDAY = rates.WEEKDAY, _("Weekday")
        WEEKEND = rates.WEEKEND, _("Weekend")

    class SeasonType(models.TextChoices):
        OFF = rates.OFF_SEASON, _("Off-season")
        ON = rates.ON_SEASON, _("On-season")

    age_group = models.CharField(max_length=10, choices=AgeGroup.choices)
    usage_type = models.CharField(max_length=10, choices=UsageType.choices)
    day_type = models.CharField(max_length=10, choices=DayType.choices)
    season_type = models.CharField(max_length=5, choices=SeasonType.choices)
    is_leader = models.BooleanField(default=False)
    price = _price_field()

    class Meta:
        verbose_name = _("Guest rate")
        verbose_name_plural = _("Guest rate matrix")
        ordering = ["usage_type", "age_group", "-is_leader", "day_type", "season_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["age_group", "usage_type", "day_type", "season_type", "is_leader", "effective_from"],
                name="unique_guest_rate_cell",
            ),
        ]

    def __str__(self) -> str:
        leader = " (leader)" if self.is_leader else ""
        return f"{self.usage_type}/{self.age_group}{leader} {self.day_type}/{self.season_type}: {self.price}"

    def to_domain(self) -> rates.RateMatrixEntry:
        return rates.RateMatrixEntry(
            age_group=self.age_group,
            usage_type=self.usage_type,
            day_type=self.day_type,
            season_type=self.season_type,
            price=Decimal(self.price),
            is_leader=self.is_leader,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
        )


class RoomRate(EffectivePeriodModel):
    """Base price per night for a room type."""

    room_type = models.CharField(max_length=20)
    name = models.CharField(max_length=100, blank=True)
    base_rate = _price_field()

    class Meta:
        verbose_name = _("Room rate")
        verbose_name_plural = _("Room rates")
        ordering = ["room_type", "-effective_from"]

    def __str__(self) -> str:
        return f"{self.room_type}: {self.base_rate}"

    def to_domain(self) -> rates.RoomRate:
        usage_type = rates.USAGE_PRIVATE if self.room_type in rates.PRIVATE_ROOM_TYPES else rates.USAGE_SHARED
        return rates.RoomRate(
            room_type=self.room_type,
            base_rate=Decimal(self.base_rate),
            usage_type=usage_type,
            name=self.name,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
        )


class AddonRate(EffectivePeriodModel):
    """
    Price of an optional extra.

    Which columns matter depends on the category: meals use the per-age
    fees, facilities the hour-bracket / room / surcharge fees, equipment
    ``unit_price``.
    """

    class Category(models.TextChoices):
        MEAL = rates.CATEGORY_MEAL, _("Meal")
        FACILITY = rates.CATEGORY_FACILITY, _("Facility")
        EQUIPMENT = rates.CATEGORY_EQUIPMENT, _("Equipment")

    addon_id = models.SlugField(max_length=50)
    name = models.CharField(max_length=100)
    category = models.CharField(max_length=10, choices=Category.choices)

    adult_fee = _price_field()
    student_fee = _price_field()
    child_fee = _price_field()
    infant_fee = _price_field()

    personal_fee_short = _price_field(help_text=_("Per person, under 5 hours."))
    personal_fee_medium = _price_field(help_text=_("Per person, 5 to 10 hours."))
    personal_fee_long = _price_field(help_text=_("Per person, over 10 hours."))
    room_fee_weekday_guest = _price_field()
    room_fee_weekend_guest = _price_field()
    room_fee_weekday_other = _price_field()
    room_fee_weekend_other = _price_field()
    surcharge_per_hour = _price_field(help_text=_("Air conditioning, per hour."))

    unit_price = _price_field()

    class Meta:
        verbose_name = _("Add-on rate")
        verbose_name_plural = _("Add-on rates")
        ordering = ["category", "addon_id"]

    def __str__(self) -> str:
        return f"{self.get_category_display()}: {self.name}"

    def to_domain(self) -> rates.AddonRate:
        if self.category == rates.CATEGORY_MEAL:
            return rates.MealRate(
                addon_id=self.addon_id,
                name=self.name,
                prices={
                    "adult": Decimal(self.adult_fee),
                    "student": Decimal(self.student_fee),
                    "child": Decimal(self.child_fee),
                    "infant": Decimal(self.infant_fee),
                },
            )
        if self.category == rates.CATEGORY_FACILITY:
            return rates.FacilityRate(
                addon_id=self.addon_id,
                name=self.name,
                personal_fee_short=Decimal(self.personal_fee_short),
                personal_fee_medium=Decimal(self.personal_fee_medium),
                personal_fee_long=Decimal(self.personal_fee_long),
                room_fee_weekday_guest=Decimal(self.room_fee_weekday_guest),
                room_fee_weekend_guest=Decimal(self.room_fee_weekend_guest),
                room_fee_weekday_other=Decimal(self.room_fee_weekday_other),
                room_fee_weekend_other=Decimal(self.room_fee_weekend_other),
                surcharge_per_hour=Decimal(self.surcharge_per_hour),
            )
        return rates.EquipmentRate(addon_id=self.addon_id, name=self.name, unit_price=Decimal(self.unit_price))


class SeasonPeriod(models.Model):
    """Year-independent season window (MM-DD bounds, inclusive)."""

    class SeasonType(models.TextChoices):
        OFF = rates.OFF_SEASON, _("Off-season")
        ON = rates.ON_SEASON, _("On-season")

    name = models.CharField(max_length=100)
    season_type = models.CharField(max_length=5, choices=SeasonType.choices, default=SeasonType.ON)
    start = models.CharField(max_length=5, validators=[month_day_validator])
    end = models.CharField(max_length=5, validators=[month_day_validator])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Season period")
        verbose_name_plural = _("Season periods")
        ordering = ["start"]

    def __str__(self) -> str:
        return f"{self.name} ({self.start} - {self.end})"

    def to_domain(self) -> rates.SeasonPeriod:
        return rates.SeasonPeriod(
            name=self.name,
            start=self.start,
            end=self.end,
            season_type=self.season_type,
            is_active=self.is_active,
        )
