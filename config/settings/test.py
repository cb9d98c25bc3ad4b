"""Test settings.

In-memory SQLite and a local-memory cache; Celery tasks run eagerly.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'retreat-booking-tests',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

SEASON_POLICY = 'periods'
WEEKEND_DAYS = (5, 6)

# Let pytest's caplog see engine logs
for _name in ("apps", "shared"):
    LOGGING["loggers"][_name]["propagate"] = True  # noqa: F405
