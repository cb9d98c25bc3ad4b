"""Loads the persisted rate tables into an immutable ``RateConfig``."""

from __future__ import annotations

import logging
from datetime import date

from django.conf import settings  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.pricing.domain.rates import RateConfig
from shared.domain.exceptions import PersistenceError

from .models import AddonRate, RateMatrixEntry, RoomRate, SeasonPeriod

logger = logging.getLogger(__name__)


class DjangoRateRepository:
    """Reads the rows effective on a given day."""

    def load_active(self, on: date | None = None) -> RateConfig | None:
        """
        Build a config from the rate tables.

        Returns None when no guest rates are stored (nothing has been
        configured yet). Storage failures surface as PersistenceError.
        """
        on = on or timezone.localdate()
        try:
            guest_rows = list(RateMatrixEntry.objects.effective_on(on))
            if not guest_rows:
                return None
            room_rows = list(RoomRate.objects.effective_on(on))
            addon_rows = list(AddonRate.objects.effective_on(on))
            period_rows = list(SeasonPeriod.objects.filter(is_active=True))
        except DatabaseError as exc:
            raise PersistenceError(f"Rate tables unavailable: {exc}") from exc

        room_rates = _newest_by(room_rows, lambda row: row.room_type)
        guest_rates = _newest_by(
            guest_rows,
            lambda row: (row.age_group, row.usage_type, row.day_type, row.season_type, row.is_leader),
        )
        addon_rates = _newest_by(addon_rows, lambda row: row.addon_id)

        stamp = max(
            [row.updated_at for row in guest_rows + room_rows + addon_rows + period_rows if row.updated_at],
            default=None,
        )
        version = f"db-{stamp:%Y%m%d%H%M%S}" if stamp else "db"

        config = RateConfig(
            guest_rates=guest_rates,
            room_rates=room_rates,
            addon_rates=addon_rates,
            season_periods=tuple(row.to_domain() for row in period_rows),
            peak_months=tuple(getattr(settings, "PEAK_MONTHS", ())),
            name="database",
            version=version,
        )
        problems = config.validate()
        for problem in problems:
            logger.warning(f"Rate configuration problem: {problem}")
        return config


def _newest_by(rows, key) -> tuple:
    """Domain objects for ``rows``, keeping only the newest ``effective_from`` per key."""
    newest = {}
    for row in sorted(rows, key=lambda r: r.effective_from):
        newest[key(row)] = row.to_domain()
    return tuple(newest.values())
