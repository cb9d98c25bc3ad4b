"""
Price Calculator

Pure computation of a stay's price from an injected RateConfig.

Calculation Flow (per night, then aggregated):
1. Room charge   = base rate of each selected room type
2. Guest charge  = per-age rate x count, column chosen by day type x season
                   (private table as soon as one selected room is private;
                   leaders replace the plain-adult charge for that many adults)
3. Add-on charge = meals per portion, facilities by hours, equipment per unit
4. Each night and every aggregate is rounded to whole currency units
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from shared.domain.value_objects import Stay, whole_units

from .calendar import DateClassifier
from .inputs import AddonItem, GuestCount, RoomUsage, usage_type_for
from .rates import (
    AGE_GROUPS,
    CATEGORY_EQUIPMENT,
    CATEGORY_FACILITY,
    CATEGORY_MEAL,
    USAGE_PRIVATE,
    EquipmentRate,
    FacilityRate,
    MealRate,
    RateConfig,
)

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


@dataclass
class DailyPrice:
    date: date
    day_type: str
    season_type: str
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        data = asdict(self)
        data['date'] = self.date.isoformat()
        for key in ('room_amount', 'guest_amount', 'addon_amount', 'total'):
            data[key] = int(data[key])
        return data


@dataclass
class PriceLineItem:
    """One estimate line ("Adult, weekday / on-season", 4 person-nights, ...)."""
    category: str
    description: str
    unit_price: Decimal
    quantity: Decimal
    unit: str
    subtotal: Decimal

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'description': self.description,
            'unit_price': int(whole_units(self.unit_price)),
            'quantity': float(self.quantity),
            'unit': self.unit,
            'subtotal': int(whole_units(self.subtotal)),
        }


@dataclass
class PriceBreakdown:
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    subtotal: Decimal
    total: Decimal
    usage_type: str
    nights: int
    daily_breakdown: List[DailyPrice] = field(default_factory=list)
    line_items: List[PriceLineItem] = field(default_factory=list)
    rate_config_version: str = ''

    def to_dict(self) -> dict:
        return {
            'room_amount': int(self.room_amount),
            'guest_amount': int(self.guest_amount),
            'addon_amount': int(self.addon_amount),
            'subtotal': int(self.subtotal),
            'total': int(self.total),
            'usage_type': self.usage_type,
            'nights': self.nights,
            'daily_breakdown': [d.to_dict() for d in self.daily_breakdown],
            'line_items': [item.to_dict() for item in self.line_items],
            'rate_config_version': self.rate_config_version,
        }


class _Lines:
    """Accumulates estimate lines keyed by what they describe."""

    def __init__(self):
        self._items: "OrderedDict[tuple, PriceLineItem]" = OrderedDict()

    def add(self, category: str, description: str, unit_price: Decimal, quantity, unit: str):
        key = (category, description, unit_price, unit)
        item = self._items.get(key)
        if item is None:
            item = PriceLineItem(category, description, unit_price, ZERO, unit, ZERO)
            self._items[key] = item
        item.quantity += Decimal(quantity)
        item.subtotal += unit_price * Decimal(quantity)

    def items(self) -> List[PriceLineItem]:
        return [item for item in self._items.values() if item.subtotal or item.unit_price]


class PriceCalculator:
    """
    Computes price breakdowns for one RateConfig.

    Usage:
        calculator = PriceCalculator(rate_config, DateClassifier.for_config(rate_config))
        breakdown = calculator.compute_price(rooms, guests, stay, addons)
    """

    def __init__(self, rate_config: RateConfig, classifier: Optional[DateClassifier] = None):
        self.rate_config = rate_config
        self.classifier = classifier or DateClassifier.for_config(rate_config)
        self._reported_gaps: set = set()

    def compute_price(
        self,
        rooms: Sequence[RoomUsage],
        guests: GuestCount,
        stay: Stay,
        addons: Iterable[AddonItem] = (),
    ) -> PriceBreakdown:
        addons = list(addons)
        usage_type = usage_type_for(rooms)
        lines = _Lines()

        room_total = guest_total = addon_total = ZERO
        daily: List[DailyPrice] = []

        for index, night in enumerate(stay.dates()):
            day_type = self.classifier.day_type(night)
            season_type = self.classifier.season_type(night)
            rate_key = self.classifier.rate_key(night)

            room_amount = self._room_amount_for_night(rooms, lines)
            guest_amount = self._guest_amount_for_night(guests, usage_type, rate_key, lines)
            addon_amount = self._addon_amount_for_night(addons, guests, day_type, index == 0, lines)

            room_total += room_amount
            guest_total += guest_amount
            addon_total += addon_amount

            daily.append(DailyPrice(
                date=night,
                day_type=day_type,
                season_type=season_type,
                room_amount=whole_units(room_amount),
                guest_amount=whole_units(guest_amount),
                addon_amount=whole_units(addon_amount),
                total=whole_units(room_amount + guest_amount + addon_amount),
            ))

        room_total = whole_units(room_total)
        guest_total = whole_units(guest_total)
        addon_total = whole_units(addon_total)
        subtotal = room_total + guest_total + addon_total

        return PriceBreakdown(
            room_amount=room_total,
            guest_amount=guest_total,
            addon_amount=addon_total,
            subtotal=subtotal,
            total=whole_units(subtotal),
            usage_type=usage_type,
            nights=stay.nights,
            daily_breakdown=daily,
            line_items=lines.items(),
            rate_config_version=self.rate_config.version,
        )

    # ===== Rooms =====

    def room_rate(self, room: RoomUsage) -> Decimal:
        rate = self.rate_config.room_rate(room.room_type)
        if rate is not None:
            return Decimal(rate.base_rate)
        if room.rate is not None:
            return Decimal(room.rate)
        self._report_gap(('room', room.room_type), f"No room rate for room type {room.room_type}")
        return ZERO

    def _room_amount_for_night(self, rooms: Sequence[RoomUsage], lines: _Lines) -> Decimal:
        amount = ZERO
        for room in rooms:
            rate = self.room_rate(room)
            amount += rate
            lines.add('room', f"Room {room.room_id} ({room.room_type})", rate, 1, 'night')
        return amount

    # ===== Guests =====

    def guest_rate(self, age_group: str, usage_type: str, rate_key: str, is_leader: bool = False) -> Decimal:
        if age_group == 'baby':
            return ZERO
        rate = self.rate_config.guest_rate(age_group, usage_type, rate_key, is_leader)
        if rate is None:
            self._report_gap(
                ('guest', age_group, usage_type, rate_key, is_leader),
                f"No guest rate for {age_group}/{usage_type}/{rate_key} (leader={is_leader})",
            )
            return ZERO
        return rate

    def _guest_amount_for_night(self, guests: GuestCount, usage_type: str, rate_key: str, lines: _Lines) -> Decimal:
        amount = ZERO
        for age_group in AGE_GROUPS:
            count = guests.count(age_group)
            if count <= 0 or age_group == 'baby':
                continue

            if age_group == 'adult' and usage_type == USAGE_PRIVATE and guests.leader:
                leaders = min(guests.leader, count)
                leader_rate = self.guest_rate('adult', usage_type, rate_key, is_leader=True)
                amount += leader_rate * leaders
                lines.add('guest', f"adult (leader), {usage_type}, {rate_key}", leader_rate, leaders, 'person-night')
                count -= leaders
                if count <= 0:
                    continue

            rate = self.guest_rate(age_group, usage_type, rate_key)
            amount += rate * count
            lines.add('guest', f"{age_group}, {usage_type}, {rate_key}", rate, count, 'person-night')
        return amount

    # ===== Add-ons =====

    def _addon_amount_for_night(
        self,
        addons: Sequence[AddonItem],
        guests: GuestCount,
        day_type: str,
        first_night: bool,
        lines: _Lines,
    ) -> Decimal:
        amount = ZERO
        for addon in addons:
            rate = self.rate_config.addon_rate(addon.addon_id)
            if rate is None:
                self._report_gap(('addon', addon.addon_id), f"No add-on rate for {addon.addon_id}")
                continue

            label = rate.name or addon.name or addon.addon_id
            if rate.category == CATEGORY_MEAL:
                amount += self._meal_amount(addon, rate, label, lines)
            elif rate.category == CATEGORY_FACILITY:
                amount += self._facility_amount(addon, rate, guests, day_type, first_night, label, lines)
            elif rate.category == CATEGORY_EQUIPMENT:
                amount += self._equipment_amount(addon, rate, label, lines)
        return amount

    def _meal_amount(self, addon: AddonItem, rate: MealRate, label: str, lines: _Lines) -> Decimal:
        amount = ZERO
        for age_group, portions in addon.age_breakdown.items():
            if portions <= 0:
                continue
            unit_price = rate.price_for(age_group)
            amount += unit_price * portions
            lines.add('addon', f"{label} ({age_group})", unit_price, portions, 'portion')
        return amount

    def _facility_amount(
        self,
        addon: AddonItem,
        rate: FacilityRate,
        guests: GuestCount,
        day_type: str,
        first_night: bool,
        label: str,
        lines: _Lines,
    ) -> Decimal:
        hours = Decimal(addon.hours)
        if hours <= 0:
            return ZERO

        room_fee = rate.room_fee(day_type, addon.guest_type)
        amount = room_fee * hours
        lines.add('addon', f"{label} room fee ({day_type})", room_fee, hours, 'hour')

        if first_night:
            personal_fee = rate.personal_fee(hours)
            amount += personal_fee * guests.total
            lines.add('addon', f"{label} personal fee", personal_fee, guests.total, 'person')

            amount += rate.surcharge_per_hour * hours
            lines.add('addon', f"{label} air conditioning", rate.surcharge_per_hour, hours, 'hour')
        return amount

    def _equipment_amount(self, addon: AddonItem, rate: EquipmentRate, label: str, lines: _Lines) -> Decimal:
        if addon.quantity <= 0:
            return ZERO
        lines.add('addon', label, rate.unit_price, addon.quantity, 'unit-night')
        return rate.unit_price * addon.quantity

    def _report_gap(self, key: tuple, message: str):
        if key in self._reported_gaps:
            return
        self._reported_gaps.add(key)
        logger.warning(f"{message}; priced at 0 (rate config {self.rate_config.version})")


def compute_price(
    rooms: Sequence[RoomUsage],
    guests: GuestCount,
    stay: Stay,
    addons: Iterable[AddonItem],
    rate_config: RateConfig,
    classifier: Optional[DateClassifier] = None,
) -> PriceBreakdown:
    """Functional entry point: price a stay against the given configuration."""
    return PriceCalculator(rate_config, classifier).compute_price(rooms, guests, stay, addons)
