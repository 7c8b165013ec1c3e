# config/settings/test.py
from .base import *  # noqa

DJANGO_ENV = "test"
DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
TIME_ZONE = "UTC"

FIXTURE_IDENTITY_ENABLED = True
REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [
    *REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"],
    "planora_core.iam.fixture_auth.FixtureIdentityAuthentication",
]

LOGGING["loggers"]["planora_core"]["level"] = "WARNING"
