"""
Pricing service

Resolves the active RateConfig and hands out calculators bound to it.

Resolution order:
1. cached config (5 minutes by default)
2. persisted rate tables
3. last config that loaded successfully
4. static default table
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from django.conf import settings

from apps.pricing.domain.calculator import PriceBreakdown, PriceCalculator
from apps.pricing.domain.calendar import POLICY_PERIODS, SATURDAY_SUNDAY, DateClassifier
from apps.pricing.domain.inputs import AddonItem, GuestCount, RoomUsage
from apps.pricing.domain.rates import RateConfig, default_rate_config
from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

from .cache import RateConfigCache
from .repositories import DjangoRateRepository

logger = logging.getLogger(__name__)


class RateConfigService:
    def __init__(self, repository=None, cache=None):
        self.repository = repository or DjangoRateRepository()
        self.cache = cache or RateConfigCache()

    def get_config(self) -> RateConfig:
        config = self.cache.get()
        if config is not None:
            return config

        try:
            config = self.repository.load_active()
        except PersistenceError as exc:
            fallback = self.cache.last_known_good()
            if fallback is not None:
                logger.error(f"{exc}; using last known good rate config {fallback.version}")
                return fallback
            logger.error(f"{exc}; using static default rate config")
            return default_rate_config()

        if config is None:
            logger.info("No rate tables configured, using static default rate config")
            config = default_rate_config()

        self.cache.set(config)
        return config

    def invalidate(self) -> None:
        self.cache.invalidate()

    def classifier(self, config: RateConfig) -> DateClassifier:
        return DateClassifier.for_config(
            config,
            policy=getattr(settings, "SEASON_POLICY", POLICY_PERIODS),
            weekend_days=getattr(settings, "WEEKEND_DAYS", SATURDAY_SUNDAY),
        )

    def calculator(self) -> PriceCalculator:
        config = self.get_config()
        return PriceCalculator(config, self.classifier(config))

    def compute_price(
        self,
        rooms: Sequence[RoomUsage],
        guests: GuestCount,
        stay: Stay,
        addons: Iterable[AddonItem] = (),
    ) -> PriceBreakdown:
        return self.calculator().compute_price(rooms, guests, stay, addons)


def get_rate_config_service() -> RateConfigService:
    return RateConfigService()
