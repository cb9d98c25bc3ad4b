"""
Date classification

Every night of a stay is classified twice:
- day type: weekday / weekend (configured weekend set, Saturday + Sunday by default)
- season type: off / on (one season policy active at a time)
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol, Tuple

from .rates import OFF_SEASON, ON_SEASON, WEEKDAY, WEEKEND, RateConfig, SeasonPeriod, rate_key_for

SATURDAY_SUNDAY: Tuple[int, ...] = (5, 6)

POLICY_PERIODS = 'periods'
POLICY_PEAK_MONTHS = 'peak_months'


class SeasonPolicy(Protocol):
    def season_type(self, day: date) -> str:
        ...


class PeriodSeasonPolicy:
    """Explicit MM-DD periods; the first active on-season period that matches wins."""

    def __init__(self, periods: Iterable[SeasonPeriod]):
        self.periods = tuple(p for p in periods if p.is_active and p.season_type == ON_SEASON)

    def season_type(self, day: date) -> str:
        month_day = day.strftime('%m-%d')
        for period in self.periods:
            if period.contains(month_day):
                return ON_SEASON
        return OFF_SEASON


class PeakMonthSeasonPolicy:
    """Legacy policy: whole calendar months are on-season."""

    def __init__(self, peak_months: Iterable[int]):
        self.peak_months = frozenset(peak_months)

    def season_type(self, day: date) -> str:
        return ON_SEASON if day.month in self.peak_months else OFF_SEASON


class DateClassifier:
    """Derives day type, season type and the rate column for a calendar date."""

    def __init__(self, season_policy: SeasonPolicy, weekend_days: Iterable[int] = SATURDAY_SUNDAY):
        self.season_policy = season_policy
        self.weekend_days = frozenset(weekend_days)

    @classmethod
    def for_config(
        cls,
        config: RateConfig,
        policy: str = POLICY_PERIODS,
        weekend_days: Iterable[int] = SATURDAY_SUNDAY,
    ) -> 'DateClassifier':
        if policy == POLICY_PEAK_MONTHS:
            season_policy = PeakMonthSeasonPolicy(config.peak_months)
        elif policy == POLICY_PERIODS:
            season_policy = PeriodSeasonPolicy(config.season_periods)
        else:
            raise ValueError(f"Unknown season policy: {policy}")
        return cls(season_policy, weekend_days)

    def day_type(self, day: date) -> str:
        return WEEKEND if day.weekday() in self.weekend_days else WEEKDAY

    def season_type(self, day: date) -> str:
        return self.season_policy.season_type(day)

    def rate_key(self, day: date) -> str:
        return rate_key_for(self.day_type(day), self.season_type(day))
