# config/settings/local.py
from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

if os.getenv("DB_ENGINE", "postgres") == "sqlite":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# Lets a developer act as a seeded user via X-Fixture-User (see planora_core/iam/fixture_auth.py)
FIXTURE_IDENTITY_ENABLED = os.getenv("FIXTURE_IDENTITY_ENABLED", "0") == "1"
if FIXTURE_IDENTITY_ENABLED:
    REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [
        *REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"],
        "planora_core.iam.fixture_auth.FixtureIdentityAuthentication",
    ]
