"""Root conftest — shared test configuration."""

import os

# Never point tests at the docker-compose PostgreSQL
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
