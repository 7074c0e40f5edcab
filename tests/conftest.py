"""Shared pytest configuration.

Settings are read from the environment on first use, and the Celery app
reads them at import time, so the test environment is set before any
``banqa`` module is imported.
"""

import os

os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_USER", "testuser")
os.environ.setdefault("POSTGRES_PASSWORD", "testpass")
os.environ.setdefault("POSTGRES_DB", "testdb")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
# Keep PBKDF2 fast in tests
os.environ.setdefault("PIN_HASH_ITERATIONS", "1000")

import pytest_asyncio  # noqa: E402

from support import session_scope  # noqa: E402


@pytest_asyncio.fixture
async def session():
    """Async session on a fresh in-memory database."""
    async with session_scope() as session:
        yield session
