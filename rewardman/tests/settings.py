"""
Django settings for Rewardman tests.

Includes all apps needed to run the full Rewardman test suite.
"""

SECRET_KEY = "test-secret-key-for-rewardman-tests"

DEBUG = True

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rewardman",
    "rewardman.contrib.activity",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "Africa/Johannesburg"

REWARDMAN = {
    "PRESENTATION_CODE_TTL_MINUTES": 15,
}
