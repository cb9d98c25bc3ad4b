"""Caching of the active rate configuration."""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.cache import cache

from apps.pricing.domain.rates import RateConfig

logger = logging.getLogger(__name__)

LAST_KNOWN_GOOD_SUFFIX = ":last_known_good"


def _cache_key() -> str:
    return getattr(settings, "RATE_CONFIG_CACHE_KEY", "pricing:rate_config")


def _last_known_good_key() -> str:
    return f"{_cache_key()}{LAST_KNOWN_GOOD_SUFFIX}"


class RateConfigCache:
    """
    Two entries live in the cache: the active config (expires after
    ``RATE_CONFIG_CACHE_TIMEOUT`` seconds) and the last config that was
    loaded successfully (never expires, read only when storage fails).

    A broken cache backend is treated as a miss.
    """

    def get(self) -> RateConfig | None:
        return self._read(_cache_key())

    def set(self, config: RateConfig) -> None:
        timeout = getattr(settings, "RATE_CONFIG_CACHE_TIMEOUT", 300)
        self._write(_cache_key(), config, timeout)
        self._write(_last_known_good_key(), config, None)

    def invalidate(self) -> None:
        try:
            cache.delete(_cache_key())
        except Exception as exc:  # noqa: BLE001 - any backend error
            logger.warning(f"Could not invalidate rate config cache: {exc}")
        else:
            logger.info("Rate config cache invalidated")

    def last_known_good(self) -> RateConfig | None:
        return self._read(_last_known_good_key())

    def _read(self, key: str) -> RateConfig | None:
        try:
            return cache.get(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Rate config cache read failed for {key}: {exc}")
            return None

    def _write(self, key: str, config: RateConfig, timeout) -> None:
        try:
            cache.set(key, config, timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Rate config cache write failed for {key}: {exc}")


def invalidate_rate_config_cache() -> None:
    """Drop the cached configuration so the next read reloads it."""
    RateConfigCache().invalidate()


__all__ = [
    "RateConfigCache",
    "invalidate_rate_config_cache",
]
