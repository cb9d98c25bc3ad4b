"""Model signal handlers for rate config cache invalidation."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .cache import invalidate_rate_config_cache
from .models import AddonRate, RateMatrixEntry, RoomRate, SeasonPeriod


@receiver([post_save, post_delete], sender=RateMatrixEntry)
@receiver([post_save, post_delete], sender=RoomRate)
@receiver([post_save, post_delete], sender=AddonRate)
@receiver([post_save, post_delete], sender=SeasonPeriod)
def rate_config_cache_invalidator(**_: object) -> None:
    """Invalidate the cached rate config whenever a rate row changes."""
    invalidate_rate_config_cache()
