"""
PostgreSQL repository adapter - Implements TokenRepository protocol.

This module provides the PostgreSQL implementation of the domain's
token store port using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **UNIQUE (token)**: Two concurrent inserts of the same ciphertext cannot
   both succeed; the loser surfaces as StorageError. The codec's entropy
   makes this effectively unreachable.

2. **No row locks**: exists() and delete() are single statements. A token
   validated by one request may be deleted by another before the first
   completes; whichever submission deletes first wins.

3. **Sweep**: purge_older_than() is a DELETE scoped by a timestamp range
   (backed by an index) and never locks the whole table, so it can run
   alongside live traffic.

All psycopg errors, including pool timeouts, are translated to StorageError.
"""

import logging
from datetime import datetime

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import StorageError
from src.domain.ports import as_utc

logger = logging.getLogger(__name__)

TABLE_NAME = "form_tokens"

SCHEMA_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id BIGSERIAL PRIMARY KEY,
        token VARCHAR(255) NOT NULL UNIQUE,
        salt CHAR(16) NOT NULL,
        "timestamp" TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS {TABLE_NAME}_timestamp_idx ON {TABLE_NAME} ("timestamp");
"""


class PostgresTokenRepository:
    """
    Implements TokenRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def ensure_schema(self) -> bool:
        """
        Create the token table and its timestamp index if absent.

        Returns:
            True if the table is usable, False if the DDL failed
        """
        try:
            with self._pool.connection() as conn:
                conn.execute(SCHEMA_SQL)
                conn.commit()
        except psycopg.Error as e:
            logger.error("Token table creation failed: %s", e)
            return False

        logger.info("Token table ready: %s", TABLE_NAME)
        return True

    def create(self, token: str, salt: str, issued_at: datetime | None = None) -> int:
        """
        Insert a new token row.

        A NULL issued_at falls back to the database clock.

        Returns:
            Id of the inserted row

        Raises:
            StorageError: On a duplicate token or database failure
        """
        sql = f"""
            INSERT INTO {TABLE_NAME} (token, salt, "timestamp")
            VALUES (%s, %s, COALESCE(%s::timestamptz, NOW()))
            RETURNING id
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (token, salt, as_utc(issued_at) if issued_at else None))
                row = cursor.fetchone()
                conn.commit()
        except psycopg.errors.UniqueViolation as e:
            raise StorageError("Token already exists") from e
        except psycopg.Error as e:
            raise StorageError(f"Token insert failed: {e}") from e

        return row[0]

    def exists(self, token: str) -> bool:
        """Return True if the token row is present."""
        sql = f"SELECT 1 FROM {TABLE_NAME} WHERE token = %s"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (token,))
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            raise StorageError(f"Token lookup failed: {e}") from e

        if row is None:
            logger.info("Token %s does not exist in the database", token)
            return False
        return True

    def delete(self, token: str) -> None:
        """Delete the token row; a missing row is not an error."""
        sql = f"DELETE FROM {TABLE_NAME} WHERE token = %s"

        try:
            with self._pool.connection() as conn:
                conn.execute(sql, (token,))
                conn.commit()
        except psycopg.Error as e:
            raise StorageError(f"Token delete failed: {e}") from e

    def purge_older_than(self, cutoff: datetime) -> int:
        """
        Delete rows issued strictly before the cutoff.

        Returns:
            Number of deleted rows
        """
        sql = f'DELETE FROM {TABLE_NAME} WHERE "timestamp" < %s'

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (as_utc(cutoff),))
                purged = cursor.rowcount
                conn.commit()
        except psycopg.Error as e:
            raise StorageError(f"Token purge failed: {e}") from e

        return purged
