"""Unit tests for the price calculator and date classification."""

from datetime import date
from decimal import Decimal

import pytest

from apps.pricing.domain.calculator import PriceCalculator, compute_price
from apps.pricing.domain.calendar import POLICY_PEAK_MONTHS, DateClassifier
from apps.pricing.domain.inputs import AddonItem, GuestCount, RoomUsage
from apps.pricing.domain.rates import (
    OFF_SEASON,
    ON_SEASON,
    USAGE_PRIVATE,
    USAGE_SHARED,
    WEEKDAY,
    WEEKEND,
    RateConfig,
    RateMatrixEntry,
    RoomRate,
    SeasonPeriod,
    default_rate_config,
)
from shared.domain.exceptions import BookingValidationError
from shared.domain.value_objects import Stay

# 2025-06-03 is a Tuesday in June (off-season under the default periods).
TUESDAY = date(2025, 6, 3)
SATURDAY = date(2025, 6, 7)
SUMMER_TUESDAY = date(2025, 7, 15)


def large_room():
    return RoomUsage(room_id="R1", room_type="large", usage_type=USAGE_SHARED, capacity=20)


def private_room():
    return RoomUsage(room_id="S1", room_type="small_a", usage_type=USAGE_PRIVATE, capacity=2)


@pytest.fixture
def calculator():
    return PriceCalculator(default_rate_config())


def test_two_adults_one_weekday_night_in_shared_room(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 4))

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=2), stay)

    assert breakdown.room_amount == Decimal(20000)
    assert breakdown.guest_amount == Decimal(9600)
    assert breakdown.addon_amount == Decimal(0)
    assert breakdown.total == Decimal(29600)
    assert breakdown.usage_type == USAGE_SHARED
    assert breakdown.nights == 1


def test_scenario_with_minimal_in_memory_config():
    config = RateConfig(
        guest_rates=(RateMatrixEntry("adult", USAGE_SHARED, WEEKDAY, OFF_SEASON, Decimal(4800)),),
        room_rates=(RoomRate("large", Decimal(20000)),),
        version="test",
    )
    breakdown = compute_price([large_room()], GuestCount(adult=2), Stay(TUESDAY, date(2025, 6, 4)), [], config)

    assert breakdown.total == Decimal(29600)
    assert breakdown.rate_config_version == "test"


def test_leader_rate_replaces_plain_adult_rate_for_that_guest(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 4))

    breakdown = calculator.compute_price([private_room()], GuestCount(adult=2, leader=1), stay)

    # one leader at 6,800 and one ordinary private adult at 8,500
    assert breakdown.guest_amount == Decimal(15300)
    assert breakdown.room_amount == Decimal(7000)
    assert breakdown.usage_type == USAGE_PRIVATE
    descriptions = [item.description for item in breakdown.line_items if item.category == "guest"]
    assert "adult (leader), private, weekday" in descriptions
    assert "adult, private, weekday" in descriptions


def test_leader_is_ignored_for_shared_stays(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 4))

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=2, leader=1), stay)

    assert breakdown.guest_amount == Decimal(9600)


def test_one_private_room_makes_the_whole_stay_private(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 4))

    breakdown = calculator.compute_price([large_room(), private_room()], GuestCount(adult=1), stay)

    assert breakdown.usage_type == USAGE_PRIVATE
    assert breakdown.guest_amount == Decimal(8500)


def test_babies_are_always_free(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 6))
    without = calculator.compute_price([large_room()], GuestCount(adult=2), stay)

    with_babies = calculator.compute_price([large_room()], GuestCount(adult=2, baby=3), stay)

    assert with_babies.total == without.total
    assert not [item for item in with_babies.line_items if "baby" in item.description]


def test_babies_stay_free_even_if_a_rate_is_configured():
    config = RateConfig(
        guest_rates=(RateMatrixEntry("baby", USAGE_SHARED, WEEKDAY, OFF_SEASON, Decimal(999)),),
        room_rates=(RoomRate("large", Decimal(0)),),
    )
    breakdown = PriceCalculator(config).compute_price([large_room()], GuestCount(baby=2), Stay(TUESDAY, date(2025, 6, 4)))

    assert breakdown.total == Decimal(0)


def test_daily_breakdown_adds_up_to_total(calculator):
    stay = Stay(date(2025, 6, 5), date(2025, 6, 10))
    addons = [
        AddonItem("breakfast", age_breakdown={"adult": 3, "child": 1}),
        AddonItem("projector", quantity=1),
    ]

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=3, child=1), stay, addons)

    assert len(breakdown.daily_breakdown) == stay.nights
    assert sum(day.total for day in breakdown.daily_breakdown) == breakdown.total
    assert breakdown.subtotal == breakdown.room_amount + breakdown.guest_amount + breakdown.addon_amount


def test_weekend_and_season_pick_the_price_column(calculator):
    guests = GuestCount(adult=1)

    weekend = calculator.compute_price([large_room()], guests, Stay(SATURDAY, date(2025, 6, 8)))
    summer = calculator.compute_price([large_room()], guests, Stay(SUMMER_TUESDAY, date(2025, 7, 16)))

    assert weekend.guest_amount == Decimal(5800)
    assert weekend.daily_breakdown[0].day_type == WEEKEND
    assert summer.guest_amount == Decimal(5800)
    assert summer.daily_breakdown[0].season_type == ON_SEASON


def test_meal_addons_are_charged_per_portion_per_night(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 5))
    addons = [AddonItem("breakfast", age_breakdown={"adult": 2})]

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=2), stay, addons)

    assert breakdown.addon_amount == Decimal(2800)


def test_facility_personal_fee_and_surcharge_only_on_first_night(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 5))
    addons = [AddonItem("meeting_room", hours=Decimal(3))]

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=2), stay, addons)

    first, second = breakdown.daily_breakdown
    # room fee 1,000 x 3h + personal fee 200 x 2 + air conditioning 500 x 3h
    assert first.addon_amount == Decimal(4900)
    assert second.addon_amount == Decimal(3000)
    assert breakdown.addon_amount == Decimal(7900)


@pytest.mark.parametrize(
    "hours, personal_fee, expected",
    [
        ("4.5", 200, 7150),
        ("5", 400, 8300),
        ("10", 400, 15800),
        ("10.5", 600, 16950),
    ],
)
def test_facility_personal_fee_follows_hour_brackets(calculator, hours, personal_fee, expected):
    stay = Stay(TUESDAY, date(2025, 6, 4))
    addons = [AddonItem("meeting_room", hours=Decimal(hours))]

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=2), stay, addons)

    # room fee 1,000/h + air conditioning 500/h + personal fee x 2 guests
    assert breakdown.addon_amount == Decimal(1500) * Decimal(hours) + personal_fee * 2
    assert breakdown.addon_amount == Decimal(expected)


def test_equipment_is_charged_per_unit_per_night(calculator):
    stay = Stay(TUESDAY, date(2025, 6, 5))

    breakdown = calculator.compute_price([large_room()], GuestCount(adult=1), stay, [AddonItem("projector", quantity=2)])

    assert breakdown.addon_amount == Decimal(8000)


def test_missing_rates_cost_nothing_and_are_reported_once(caplog):
    config = RateConfig(version="empty")
    room = RoomUsage(room_id="X1", room_type="annex")
    stay = Stay(TUESDAY, date(2025, 6, 6))

    breakdown = PriceCalculator(config).compute_price([room], GuestCount(adult=2), stay, [AddonItem("sauna")])

    assert breakdown.total == Decimal(0)
    gaps = [r for r in caplog.records if "No guest rate for adult" in r.getMessage()]
    assert len(gaps) == 1
    assert any("No add-on rate for sauna" in r.getMessage() for r in caplog.records)


def test_room_rate_falls_back_to_the_room_own_rate():
    config = RateConfig()
    room = RoomUsage(room_id="X1", room_type="annex", rate=Decimal(3000))

    breakdown = PriceCalculator(config).compute_price([room], GuestCount(), Stay(TUESDAY, date(2025, 6, 5)))

    assert breakdown.room_amount == Decimal(6000)


def test_amounts_are_rounded_half_up_to_whole_units():
    config = RateConfig(
        guest_rates=(RateMatrixEntry("adult", USAGE_SHARED, WEEKDAY, OFF_SEASON, Decimal("100.5")),),
        room_rates=(RoomRate("large", Decimal(0)),),
    )
    breakdown = PriceCalculator(config).compute_price([large_room()], GuestCount(adult=1), Stay(TUESDAY, date(2025, 6, 4)))

    assert breakdown.total == Decimal(101)


def test_inverted_stay_is_rejected_before_pricing():
    with pytest.raises(BookingValidationError):
        Stay(date(2025, 6, 4), date(2025, 6, 3))
    with pytest.raises(BookingValidationError):
        Stay(TUESDAY, TUESDAY)


def test_leaders_cannot_outnumber_adults():
    with pytest.raises(BookingValidationError):
        GuestCount(adult=1, leader=2)


def test_breakdown_serializes_amounts_as_integers(calculator):
    data = calculator.compute_price([large_room()], GuestCount(adult=2), Stay(TUESDAY, date(2025, 6, 4))).to_dict()

    assert data["total"] == 29600
    assert data["daily_breakdown"][0]["date"] == "2025-06-03"
    assert data["rate_config_version"] == "v1.0.0"


class TestDateClassifier:
    def test_saturday_and_sunday_are_weekend_days(self):
        classifier = DateClassifier.for_config(default_rate_config())

        assert classifier.day_type(date(2025, 6, 6)) == WEEKDAY  # Friday
        assert classifier.day_type(SATURDAY) == WEEKEND
        assert classifier.day_type(date(2025, 6, 8)) == WEEKEND

    def test_periods_wrapping_the_new_year(self):
        config = RateConfig(season_periods=(SeasonPeriod("New year", "12-20", "01-10"),))
        classifier = DateClassifier.for_config(config)

        assert classifier.season_type(date(2025, 12, 25)) == ON_SEASON
        assert classifier.season_type(date(2026, 1, 5)) == ON_SEASON
        assert classifier.season_type(date(2026, 1, 11)) == OFF_SEASON

    def test_inactive_periods_are_ignored(self):
        config = RateConfig(season_periods=(SeasonPeriod("Summer", "07-01", "08-31", is_active=False),))

        assert DateClassifier.for_config(config).season_type(SUMMER_TUESDAY) == OFF_SEASON

    def test_peak_month_policy(self):
        classifier = DateClassifier.for_config(default_rate_config(), policy=POLICY_PEAK_MONTHS)

        assert classifier.season_type(date(2025, 6, 15)) == OFF_SEASON
        assert classifier.season_type(date(2025, 12, 1)) == ON_SEASON
        assert classifier.rate_key(date(2025, 12, 6)) == "peak_weekend"

    def test_unknown_policy_is_refused(self):
        with pytest.raises(ValueError):
            DateClassifier.for_config(default_rate_config(), policy="lunar")
