from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # project root

load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-prod")
DEBUG = True  # overridden in dev.py

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "").split(",") if os.getenv("ALLOWED_HOSTS") else []

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "providers",
    "catalog",
    "django.contrib.admin",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ]
        },
    }
]

WSGI_APPLICATION = "core.wsgi.application"

# --- Database (Postgres) ---
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("POSTGRES_DB", "feedhub"),
        "USER": os.getenv("POSTGRES_USER", "postgres"),
        "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
        "HOST": os.getenv("POSTGRES_HOST", "127.0.0.1"),
        "PORT": os.getenv("POSTGRES_PORT", "5432"),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 8},
    },
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# --- Static ---
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"  # for collectstatic (prod)

# --- Internationalization ---
LANGUAGE_CODE = "en-us"
TIME_ZONE = "Europe/Bucharest"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --- Celery ---
CELERY_BROKER_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")
CELERY_RESULT_BACKEND = CELERY_BROKER_URL
# Full feed downloads run for minutes; keep the hard limit well above the slowest one.
CELERY_TASK_TIME_LIMIT = 60 * 60
CELERY_TASK_SOFT_TIME_LIMIT = 55 * 60

# --- Provider credentials (read by providers.registry at adapter construction) ---
PROVIDER_CREDENTIALS = {
    "nod": {
        "api_user": os.getenv("NOD_API_USER", ""),
        "api_key": os.getenv("NOD_API_KEY", ""),
    },
    "elko": {
        "base_url": os.getenv("ELKO_API_BASE_URL", "https://roapi.elko.cloud/v3.0/"),
        "token": os.getenv("ELKO_API_TOKEN", ""),
    },
    "ingram": {
        "api_key": os.getenv("IM_API_KEY", ""),
    },
    "also": {
        "host": os.getenv("ALSO_FTP_HOST", "paco.also.com"),
        "port": int(os.getenv("ALSO_FTP_PORT", "22")),
        "username": os.getenv("ALSO_FTP_USER", ""),
        "password": os.getenv("ALSO_FTP_PASSWORD", ""),
        "filename": os.getenv("ALSO_FEED_FILENAME", "pricelist-1.csv"),
    },
}

# --- Sync ---
SYNC_PAGE_LIMIT = int(os.getenv("SYNC_PAGE_LIMIT", "100"))
# Promote a finished job to PARTIAL once more than N secondary lookups failed (None = never).
_partial = os.getenv("SYNC_PARTIAL_FAILURE_THRESHOLD", "")
SYNC_PARTIAL_FAILURE_THRESHOLD = int(_partial) if _partial else None

HTTP_MAX_RETRIES = int(os.getenv("HTTP_MAX_RETRIES", "3"))
HTTP_BACKOFF_S = float(os.getenv("HTTP_BACKOFF_S", "0.5"))

# --- Catalog read cache (seconds) ---
CATALOG_CACHE_TTL = {
    "stats": 60,
    "providers": 60,
    "filters": 120,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {asctime} {name}: {message}",
            "style": "{",
        }
    },
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "simple"}},
    "root": {"handlers": ["console"], "level": "INFO"},
    "loggers": {
        "providers": {
            "handlers": ["console"],
            "level": os.getenv("PROVIDERS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "catalog": {
            "handlers": ["console"],
            "level": os.getenv("PROVIDERS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
