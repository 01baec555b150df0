"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Database connection pool (skips when PostgreSQL is unreachable)
- In-memory token store and codec
- Settings cache isolation
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryTokenRepository
from src.adapters.repository.postgres import PostgresTokenRepository
from src.config.settings import get_settings
from src.domain.codec import TokenCodec
from src.domain.lifecycle import TokenLifecycle

TEST_SECRET_KEY = "test-secret-key-for-form-tokens"


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Drop cached settings so environment overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory_repository() -> InMemoryTokenRepository:
    """Fresh in-memory token store."""
    return InMemoryTokenRepository()


@pytest.fixture
def codec() -> TokenCodec:
    """Codec with a test secret key."""
    return TokenCodec(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def lifecycle(codec: TokenCodec, memory_repository: InMemoryTokenRepository) -> TokenLifecycle:
    """Token lifecycle backed by the in-memory store."""
    return TokenLifecycle(codec=codec, repository=memory_repository)


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Create connection pool for database tests.

    Skips the requesting test when PostgreSQL is not reachable.
    """
    settings = get_settings()
    try:
        with psycopg.connect(settings.database_url, connect_timeout=2):
            pass
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    assert PostgresTokenRepository(pool).ensure_schema()
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresTokenRepository:
    """Create repository instance for each test."""
    return PostgresTokenRepository(pool)


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean token table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM form_tokens")
        conn.commit()
    yield
