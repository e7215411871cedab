# PATH: apps/api/config/settings/test.py
from .base import *

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

EXAM_FRONTEND_URL = "https://exam.test"
CORS_ALLOWED_ORIGINS = [EXAM_FRONTEND_URL]

LOGGING["root"]["level"] = "WARNING"
