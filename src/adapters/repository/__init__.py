"""Repository adapters - Token store implementations."""

from psycopg_pool import ConnectionPool

from src.config.settings import Settings

from .memory import InMemoryTokenRepository
from .postgres import PostgresTokenRepository


def create_repository(
    settings: Settings, pool: ConnectionPool | None = None
) -> PostgresTokenRepository | InMemoryTokenRepository:
    """
    Create the token store selected by ``settings.token_store``.

    Raises:
        ValueError: For an unknown store type, or postgres without a pool
    """
    store = settings.token_store.lower()
    if store == "postgres":
        if pool is None:
            raise ValueError("A connection pool is required for the postgres token store")
        return PostgresTokenRepository(pool)
    elif store == "memory":
        return InMemoryTokenRepository()
    else:
        raise ValueError(f"Unsupported token store: {settings.token_store}")


__all__ = ["InMemoryTokenRepository", "PostgresTokenRepository", "create_repository"]
