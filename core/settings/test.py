from .dev import *  # noqa: F401,F403

# ruff: noqa: F405

ENV_NAME = "test"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-locmem",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Never pick up real credentials from a developer's .env while testing.
PROVIDER_CREDENTIALS = {
    "nod": {"api_user": "", "api_key": ""},
    "elko": {"base_url": "https://roapi.elko.cloud/v3.0/", "token": ""},
    "ingram": {"api_key": ""},
    "also": {
        "host": "paco.also.com",
        "port": 22,
        "username": "",
        "password": "",
        "filename": "pricelist-1.csv",
    },
}

SYNC_PARTIAL_FAILURE_THRESHOLD = None
HTTP_BACKOFF_S = 0.0

LOGGING["loggers"]["providers"]["level"] = "WARNING"
LOGGING["loggers"]["catalog"]["level"] = "WARNING"
HTTP_MAX_RETRIES = 3
SYNC_PAGE_LIMIT = 100
