"""
Token lifecycle - Issuance, consumption and expiry of form tokens.

Token Lifecycle
===============

    form render        -> mint + create   (one record per rendered form)
    accepted submit    -> delete          (token cannot be replayed)
    scheduled sweep    -> purge records older than the retention window
    refresh request    -> mint + create   (client replaces its stale token)

Failures in minting or storage never propagate out of the hooks: a form
rendered without a token falls back to the validator's missing-token path.
"""

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .codec import MintedToken, TokenCodec
from .exceptions import ConfigurationError, FormGuardError, StorageError
from .ports import TokenRepository, as_utc
from .validator import TOKEN_FIELD, USER_AGENT_FIELD

logger = logging.getLogger(__name__)

SESSION_PLAINTEXT_KEY = "original_token"


@dataclass
class TokenLifecycle:
    """
    Domain service wiring the codec to the token store.

    Retention defaults to 24 hours.
    """

    codec: TokenCodec
    repository: TokenRepository
    retention: timedelta = field(default=timedelta(hours=24))

    def issue(self) -> MintedToken:
        """
        Mint a token and persist it.

        Raises:
            ConfigurationError: If minting is unavailable
            StorageError: If the token could not be stored
        """
        minted = self.codec.mint()
        self.repository.create(minted.encrypted, minted.salt)
        return minted

    def on_form_render(
        self,
        user_agent: str | None,
        session: MutableMapping[str, str] | None = None,
    ) -> dict[str, str]:
        """
        Build the hidden fields for a form about to be rendered.

        The plaintext is cached in ``session`` when one is given. It is
        diagnostic only and never read during validation.

        Args:
            user_agent: User-Agent header of the rendering request
            session: Optional per-client session mapping

        Returns:
            ``{form_token, user_agent}``, or an empty dict if no token could be issued
        """
        try:
            minted = self.issue()
        except FormGuardError as e:
            logger.warning("Form rendered without token: %s", e)
            return {}

        if session is not None:
            session[SESSION_PLAINTEXT_KEY] = minted.plaintext

        return {TOKEN_FIELD: minted.encrypted, USER_AGENT_FIELD: user_agent or ""}

    def on_submission_accepted(self, token: str | None) -> bool:
        """
        Consume the token of an accepted submission.

        Returns:
            True if the delete was carried out, False if there was no token
            or the store failed
        """
        if not token:
            return False

        logger.info("Deleting token: %s", token)
        try:
            self.repository.delete(token)
        except StorageError as e:
            logger.error("Failed to delete token %s: %s", token, e)
            return False
        return True

    def on_scheduled_sweep(self, now: datetime | None = None) -> int:
        """
        Purge tokens older than the retention window.

        Args:
            now: Reference time, defaults to the current UTC time. A naive
                value is read as UTC.

        Returns:
            Number of purged tokens (0 if the store failed)
        """
        now = as_utc(now) if now else datetime.now(timezone.utc)
        cutoff = now - self.retention
        try:
            purged = self.repository.purge_older_than(cutoff)
        except StorageError as e:
            logger.error("Token sweep failed: %s", e)
            return 0

        logger.info("Token sweep removed %d token(s) issued before %s", purged, cutoff.isoformat())
        return purged

    def on_token_refresh_request(self) -> dict[str, str]:
        """
        Issue a replacement token for a client whose token was consumed.

        Returns:
            ``{"token": ...}`` on success, ``{"error": ...}`` on failure
        """
        try:
            minted = self.issue()
        except ConfigurationError as e:
            logger.warning("Token refresh unavailable: %s", e)
            return {"error": "Token generation unavailable"}
        except StorageError as e:
            logger.error("Token refresh failed to store token: %s", e)
            return {"error": "Token could not be stored"}

        return {"token": minted.encrypted}
