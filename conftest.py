"""Shared pytest fixtures."""

from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now=None):
        self.now = now or datetime(2025, 5, 20, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def _clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()
