"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition tests.
Database fixtures (pool, repository, clean_database) live in tests/conftest.py.
"""

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresTokenRepository
from src.domain.codec import TokenCodec
from src.domain.lifecycle import TokenLifecycle


@pytest.fixture
def pg_lifecycle(pool: ConnectionPool) -> TokenLifecycle:
    """Token lifecycle backed by PostgreSQL."""
    return TokenLifecycle(
        codec=TokenCodec(secret_key="race-secret"),
        repository=PostgresTokenRepository(pool),
    )
