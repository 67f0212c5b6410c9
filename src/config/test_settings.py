"""Settings for the test suite.

Supplies the values ``config.settings`` refuses to default, and switches
off request throttling so tests can create many transactions per minute.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-only-secret-key-not-for-production")
os.environ.setdefault("TRANSACTION_LOCK_TIMEOUT_MS", "5000")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import BASE_DIR, DATABASES, REST_FRAMEWORK  # noqa: E402

REST_FRAMEWORK = {**REST_FRAMEWORK, "DEFAULT_THROTTLE_CLASSES": []}

# Threaded tests need a file database: shared-cache in-memory SQLite uses
# table locks that ignore the busy timeout.
if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_db.sqlite3")}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
