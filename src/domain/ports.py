"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the value types shared across the domain.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol


class Verdict(str, Enum):
    """
    Outcome of submission validation.

    Uses str mixin so verdicts serialize directly into JSON responses.
    """

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


@dataclass(frozen=True)
class TokenRecord:
    """
    A persisted, currently valid token.

    Records are immutable between creation and deletion; there is no
    update operation.
    """

    id: int
    token: str
    salt: str
    issued_at: datetime


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime, reading naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TokenRepository(Protocol):
    """Port interface for token persistence."""

    def ensure_schema(self) -> bool:
        """
        Create the backing table if it does not exist.

        Idempotent. Never raises.

        Returns:
            True if the store is usable afterwards, False otherwise
        """
        ...

    def create(self, token: str, salt: str, issued_at: datetime | None = None) -> int:
        """
        Persist a freshly minted token.

        Args:
            token: Encrypted token value handed to the client
            salt: 16-character hex salt used as the cipher IV
            issued_at: Issuance time; None lets the store assign the current time

        Returns:
            Store-assigned record id

        Raises:
            StorageError: On a duplicate token or an unreachable store
        """
        ...

    def exists(self, token: str) -> bool:
        """
        Check whether a token is currently valid.

        Raises:
            StorageError: If the store is unreachable
        """
        ...

    def delete(self, token: str) -> None:
        """
        Consume a token. Deleting an absent token is not an error.

        Raises:
            StorageError: If the store is unreachable
        """
        ...

    def purge_older_than(self, cutoff: datetime) -> int:
        """
        Delete every token issued strictly before ``cutoff``.

        Returns:
            Number of deleted tokens

        Raises:
            StorageError: If the store is unreachable
        """
        ...
