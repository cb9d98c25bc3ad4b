"""
Rate Configuration

Immutable snapshot of every price the engine needs:
- guest rate matrix (age group x usage type x day type x season type, leader flag)
- room base rates per room type
- add-on rates (meal / facility / equipment shapes)
- season periods and the legacy peak-month list

A RateConfig is built either from persisted rate records (see
apps.pricing.repositories) or from ``default_rate_config()``, the static
fallback used when the store is unreachable.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

AGE_GROUPS = ('adult', 'student', 'child', 'infant', 'baby')
MEAL_AGE_GROUPS = ('adult', 'student', 'child', 'infant')

USAGE_SHARED = 'shared'
USAGE_PRIVATE = 'private'

# Individually booked small rooms; every other room type is shared.
PRIVATE_ROOM_TYPES = frozenset({'small_a', 'small_b', 'small_c'})

WEEKDAY = 'weekday'
WEEKEND = 'weekend'

OFF_SEASON = 'off'
ON_SEASON = 'on'

RATE_KEYS = ('weekday', 'weekend', 'peak_weekday', 'peak_weekend')

CATEGORY_MEAL = 'meal'
CATEGORY_FACILITY = 'facility'
CATEGORY_EQUIPMENT = 'equipment'


def rate_key_for(day_type: str, season_type: str) -> str:
    """Cross a day type with a season type into one of the four price columns."""
    return f"peak_{day_type}" if season_type == ON_SEASON else day_type


def _within(on: date, effective_from: Optional[date], effective_to: Optional[date]) -> bool:
    if effective_from and on < effective_from:
        return False
    if effective_to and on > effective_to:
        return False
    return True


@dataclass(frozen=True)
class RateMatrixEntry:
    """One cell of the guest rate matrix."""
    age_group: str
    usage_type: str
    day_type: str
    season_type: str
    price: Decimal
    is_leader: bool = False
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None

    @property
    def rate_key(self) -> str:
        return rate_key_for(self.day_type, self.season_type)

    @property
    def identity(self) -> Tuple[str, str, str, str, bool]:
        return (self.age_group, self.usage_type, self.day_type, self.season_type, self.is_leader)

    def is_effective(self, on: date) -> bool:
        return _within(on, self.effective_from, self.effective_to)


@dataclass(frozen=True)
class RoomRate:
    """Base price per night for a room type."""
    room_type: str
    base_rate: Decimal
    usage_type: str = USAGE_SHARED
    name: str = ''
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None

    def is_effective(self, on: date) -> bool:
        return _within(on, self.effective_from, self.effective_to)


@dataclass(frozen=True)
class MealRate:
    """Meals are priced per portion, per age group, and consumed every night."""
    addon_id: str
    prices: Mapping[str, Decimal]
    name: str = ''
    category: str = field(default=CATEGORY_MEAL, init=False)

    def price_for(self, age_group: str) -> Decimal:
        return Decimal(self.prices.get(age_group, 0))


@dataclass(frozen=True)
class FacilityRate:
    """
    Facility rental (meeting room, gymnasium)

    Total = tiered personal fee x guests
          + room fee (by day type and guest type) x hours, per night
          + surcharge x hours
    """
    addon_id: str
    personal_fee_short: Decimal      # under 5 hours
    personal_fee_medium: Decimal     # 5 to 10 hours
    personal_fee_long: Decimal       # over 10 hours
    room_fee_weekday_guest: Decimal
    room_fee_weekend_guest: Decimal
    room_fee_weekday_other: Decimal
    room_fee_weekend_other: Decimal
    surcharge_per_hour: Decimal
    name: str = ''
    category: str = field(default=CATEGORY_FACILITY, init=False)

    def personal_fee(self, hours) -> Decimal:
        if hours < 5:
            return self.personal_fee_short
        if hours <= 10:
            return self.personal_fee_medium
        return self.personal_fee_long

    def room_fee(self, day_type: str, guest_type: str = 'guest') -> Decimal:
        if guest_type == 'guest':
            return self.room_fee_weekend_guest if day_type == WEEKEND else self.room_fee_weekday_guest
        return self.room_fee_weekend_other if day_type == WEEKEND else self.room_fee_weekday_other


@dataclass(frozen=True)
class EquipmentRate:
    """Flat price per unit per night."""
    addon_id: str
    unit_price: Decimal
    name: str = ''
    category: str = field(default=CATEGORY_EQUIPMENT, init=False)


AddonRate = Union[MealRate, FacilityRate, EquipmentRate]


@dataclass(frozen=True)
class SeasonPeriod:
    """
    Year-independent season window expressed as MM-DD bounds (inclusive)

    A period whose start is after its end wraps the new year,
    e.g. 12-20 .. 01-10.
    """
    name: str
    start: str
    end: str
    season_type: str = ON_SEASON
    is_active: bool = True

    def contains(self, month_day: str) -> bool:
        if self.start <= self.end:
            return self.start <= month_day <= self.end
        return month_day >= self.start or month_day <= self.end


@dataclass(frozen=True)
class RateConfig:
    """
    Versioned, immutable rate configuration

    Lookups that find nothing return None; the calculator treats that as a
    zero price and logs it as a configuration gap.
    """
    guest_rates: Tuple[RateMatrixEntry, ...] = ()
    room_rates: Tuple[RoomRate, ...] = ()
    addon_rates: Tuple[AddonRate, ...] = ()
    season_periods: Tuple[SeasonPeriod, ...] = ()
    peak_months: Tuple[int, ...] = ()
    name: str = 'default'
    version: str = 'v1'
    _guest_index: Dict[tuple, Decimal] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        index = {}
        for entry in self.guest_rates:
            index[(entry.usage_type, entry.age_group, entry.is_leader, entry.rate_key)] = Decimal(entry.price)
        object.__setattr__(self, '_guest_index', index)

    def guest_rate(self, age_group: str, usage_type: str, rate_key: str, is_leader: bool = False) -> Optional[Decimal]:
        return self._guest_index.get((usage_type, age_group, is_leader, rate_key))

    def room_rate(self, room_type: str) -> Optional[RoomRate]:
        return next((r for r in self.room_rates if r.room_type == room_type), None)

    def addon_rate(self, addon_id: str) -> Optional[AddonRate]:
        return next((a for a in self.addon_rates if a.addon_id == addon_id), None)

    def usage_type_for(self, room_type: str) -> str:
        rate = self.room_rate(room_type)
        if rate:
            return rate.usage_type
        return USAGE_PRIVATE if room_type in PRIVATE_ROOM_TYPES else USAGE_SHARED

    def active_season_periods(self) -> Tuple[SeasonPeriod, ...]:
        return tuple(p for p in self.season_periods if p.is_active)

    def validate(self) -> list:
        """Return a list of problems; an empty list means the config is usable."""
        problems = []
        seen = set()
        for entry in self.guest_rates:
            if entry.price < 0:
                problems.append(f"Negative guest rate for {entry.identity}")
            if entry.identity in seen:
                problems.append(f"Duplicate guest rate for {entry.identity}")
            seen.add(entry.identity)
            if entry.is_leader and (entry.usage_type != USAGE_PRIVATE or entry.age_group != 'adult'):
                problems.append(f"Leader rate is only valid for private adults: {entry.identity}")
        for room in self.room_rates:
            if room.base_rate < 0:
                problems.append(f"Negative room rate for {room.room_type}")
        for period in self.season_periods:
            if len(period.start) != 5 or len(period.end) != 5:
                problems.append(f"Season period {period.name} must use MM-DD bounds")
        return problems


def _matrix(prices: Mapping[tuple, Tuple[int, int, int, int]]) -> Tuple[RateMatrixEntry, ...]:
    entries = []
    columns = (
        (WEEKDAY, OFF_SEASON),
        (WEEKEND, OFF_SEASON),
        (WEEKDAY, ON_SEASON),
        (WEEKEND, ON_SEASON),
    )
    for (usage_type, age_group, is_leader), row in prices.items():
        for (day_type, season_type), price in zip(columns, row):
            entries.append(RateMatrixEntry(
                age_group=age_group,
                usage_type=usage_type,
                day_type=day_type,
                season_type=season_type,
                price=Decimal(price),
                is_leader=is_leader,
            ))
    return tuple(entries)


def _meal(addon_id: str, name: str, prices: Iterable[int]) -> MealRate:
    return MealRate(addon_id=addon_id, name=name,
                    prices={group: Decimal(p) for group, p in zip(MEAL_AGE_GROUPS, prices)})


def default_rate_config() -> RateConfig:
    """Static rate table shipped with the application (last-resort fallback)."""
    # (usage, age group, leader): weekday, weekend, peak weekday, peak weekend
    guest_prices = {
        (USAGE_SHARED, 'adult', False): (4800, 5800, 5800, 7000),
        (USAGE_SHARED, 'student', False): (4000, 4800, 4800, 5800),
        (USAGE_SHARED, 'child', False): (3200, 3800, 3800, 4600),
        (USAGE_SHARED, 'infant', False): (2500, 3000, 3000, 3600),
        (USAGE_SHARED, 'baby', False): (0, 0, 0, 0),
        (USAGE_PRIVATE, 'adult', False): (8500, 10200, 10200, 12200),
        (USAGE_PRIVATE, 'adult', True): (6800, 8200, 8200, 9800),
        (USAGE_PRIVATE, 'student', False): (5900, 7100, 7100, 8500),
        (USAGE_PRIVATE, 'child', False): (5000, 6000, 6000, 7200),
        (USAGE_PRIVATE, 'infant', False): (4200, 5000, 5000, 6000),
        (USAGE_PRIVATE, 'baby', False): (0, 0, 0, 0),
    }
    room_rates = (
        RoomRate('large', Decimal(20000), USAGE_SHARED, 'Large room'),
        RoomRate('medium_a', Decimal(13000), USAGE_SHARED, 'Medium room A'),
        RoomRate('medium_b', Decimal(8000), USAGE_SHARED, 'Medium room B'),
        RoomRate('small_a', Decimal(7000), USAGE_PRIVATE, 'Private room A'),
        RoomRate('small_b', Decimal(6000), USAGE_PRIVATE, 'Private room B'),
        RoomRate('small_c', Decimal(5000), USAGE_PRIVATE, 'Private room C'),
    )
    addon_rates = (
        _meal('breakfast', 'Breakfast', (700, 700, 700, 700)),
        _meal('dinner', 'Dinner', (1500, 1000, 800, 800)),
        _meal('bbq', 'Barbecue', (3000, 2200, 1500, 1500)),
        FacilityRate(
            addon_id='meeting_room', name='Meeting room',
            personal_fee_short=Decimal(200), personal_fee_medium=Decimal(400), personal_fee_long=Decimal(600),
            room_fee_weekday_guest=Decimal(1000), room_fee_weekend_guest=Decimal(1500),
            room_fee_weekday_other=Decimal(1500), room_fee_weekend_other=Decimal(2000),
            surcharge_per_hour=Decimal(500),
        ),
        FacilityRate(
            addon_id='gymnasium', name='Gymnasium',
            personal_fee_short=Decimal(200), personal_fee_medium=Decimal(400), personal_fee_long=Decimal(600),
            room_fee_weekday_guest=Decimal(2000), room_fee_weekend_guest=Decimal(2500),
            room_fee_weekday_other=Decimal(3500), room_fee_weekend_other=Decimal(4500),
            surcharge_per_hour=Decimal(1500),
        ),
        EquipmentRate('bedding', Decimal(500), 'Bedding set'),
        EquipmentRate('towel', Decimal(200), 'Towel'),
        EquipmentRate('pillow', Decimal(300), 'Pillow'),
        EquipmentRate('projector', Decimal(2000), 'Projector'),
        EquipmentRate('sound_system', Decimal(3000), 'Sound system'),
    )
    season_periods = (
        SeasonPeriod('Spring', '03-01', '03-31'),
        SeasonPeriod('Early summer', '04-01', '04-30'),
        SeasonPeriod('Golden Week', '05-01', '05-10'),
        SeasonPeriod('Summer', '07-01', '08-31'),
        SeasonPeriod('Autumn', '09-01', '09-30'),
        SeasonPeriod('Winter', '12-01', '12-31'),
    )
    return RateConfig(
        guest_rates=_matrix(guest_prices),
        room_rates=room_rates,
        addon_rates=addon_rates,
        season_periods=season_periods,
        peak_months=(3, 4, 5, 7, 8, 9, 12),
        name='static_default',
        version='v1.0.0',
    )
