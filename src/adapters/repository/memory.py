"""
In-memory repository adapter - Implements TokenRepository protocol.

Process-local token store for development and tests. Honours the same
contract as the PostgreSQL adapter, including the uniqueness constraint
on the token value. Timestamps are timezone-aware UTC; naive
inputs are read as UTC.
"""

import itertools
import threading
from datetime import datetime, timezone

from src.domain.exceptions import StorageError
from src.domain.ports import TokenRecord, as_utc


class InMemoryTokenRepository:
    """
    Implements TokenRepository protocol with a lock-guarded dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._records: dict[str, TokenRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def ensure_schema(self) -> bool:
        return True

    def create(self, token: str, salt: str, issued_at: datetime | None = None) -> int:
        with self._lock:
            if token in self._records:
                raise StorageError("Token already exists")
            record = TokenRecord(
                id=next(self._ids),
                token=token,
                salt=salt,
                issued_at=as_utc(issued_at) if issued_at else datetime.now(timezone.utc),
            )
            self._records[token] = record
            return record.id

    def exists(self, token: str) -> bool:
        with self._lock:
            return token in self._records

    def delete(self, token: str) -> None:
        with self._lock:
            self._records.pop(token, None)

    def purge_older_than(self, cutoff: datetime) -> int:
        cutoff = as_utc(cutoff)
        with self._lock:
            expired = [t for t, r in self._records.items() if r.issued_at < cutoff]
            for token in expired:
                del self._records[token]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
