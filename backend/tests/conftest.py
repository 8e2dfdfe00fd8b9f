"""Root conftest — shared test configuration."""

import os

# Tests never talk to a real PostgreSQL; the change feed stays off.
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("CHANGE_FEED_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
