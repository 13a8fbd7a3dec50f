"""Root conftest - shared test configuration."""

import os

# Ensure tests never reach a real MySQL server or bootstrap at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BOOTSTRAP_ON_STARTUP", "false")
os.environ.setdefault("LOG_FORMAT", "text")
