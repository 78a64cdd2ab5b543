"""
Django settings for the studio attendance project.

Values come from the environment; the defaults run against a local SQLite
database.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-studio-key-change-in-production")

DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")

ALLOWED_HOSTS = [h for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "studio",
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

ROOT_URLCONF = "config.urls"

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
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Database - SQLite unless STUDIO_DB_ENGINE says otherwise
DATABASES = {
    "default": {
        "ENGINE": os.getenv("STUDIO_DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("STUDIO_DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.getenv("STUDIO_DB_USER", ""),
        "PASSWORD": os.getenv("STUDIO_DB_PASSWORD", ""),
        "HOST": os.getenv("STUDIO_DB_HOST", ""),
        "PORT": os.getenv("STUDIO_DB_PORT", ""),
        "TEST": {
            "NAME": os.getenv("STUDIO_TEST_DB_NAME") or None,
        },
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "TEST_REQUEST_DEFAULT_FORMAT": "json",
}

# Logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "studio": {
            "level": os.getenv("STUDIO_LOG_LEVEL", "INFO"),
        },
    },
}

# Point-of-sale products as (product_id, product_line_id)
STUDIO_TEN_CLASS_PASS = (47764, 79740)
STUDIO_SINGLE_CLASS_MEMBER = (47776, 79759)
STUDIO_SINGLE_CLASS_NON_MEMBER = (47777, 79760)
STUDIO_MEMBERSHIP = (50311, 83799)
STUDIO_TEN_CLASS_PASS_SIZE = int(os.getenv("STUDIO_TEN_CLASS_PASS_SIZE", "10"))

# Month the academic year starts in (August)
STUDIO_NEW_ACADEMIC_YEAR_MONTH = int(os.getenv("STUDIO_NEW_ACADEMIC_YEAR_MONTH", "8"))
