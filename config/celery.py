import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("retreat_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Dead reservation locks: readers ignore them, this keeps the table small
    "purge-expired-locks": {
        "task": "bookings.purge_expired_locks",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
}
