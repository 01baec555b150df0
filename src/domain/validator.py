"""
Submission validator - Ordered anti-spam rule pipeline.

Rules run in a fixed order and the first rule that produces a decision
wins; later rules do not run.

Rule Order
==========

1. missing_token        no form_token field          -> pass through prior verdict
2. invalid_token        token not in the store       -> REJECT
                        (legacy_permissive_tokens)   -> pass through prior verdict
3. user_agent_mismatch  posted UA != request UA      -> REJECT
4. capitalized_words    > N capitalized words        -> REJECT
5. blacklisted_keyword  message contains a keyword   -> REJECT
6. honeypot             confirm-phone/confirm-email  -> REJECT
7. (none)                                            -> prior verdict

A missing token passes through so that clients whose token minting failed
upstream are not hard-failed. An unknown token is rejected.

Validation never raises: every path returns a Decision, and each
non-default decision is logged once with the rule and matched value.
"""

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from .exceptions import StorageError
from .ports import TokenRepository, Verdict

logger = logging.getLogger(__name__)

TOKEN_FIELD = "form_token"
USER_AGENT_FIELD = "user_agent"
MESSAGE_FIELD = "your-message"
HONEYPOT_FIELDS = ("confirm-phone", "confirm-email")
DECOY_CHECKBOX_FIELD = "confirm-robot"

# Letter runs, allowing inner apostrophes and hyphens ("don't", "e-mail")
_WORD_RE = re.compile(r"[^\W\d_]+(?:['-][^\W\d_]+)*")


@dataclass(frozen=True)
class Submission:
    """Posted form fields plus the User-Agent header of the posting request."""

    fields: Mapping[str, str] = field(default_factory=dict)
    actual_user_agent: str | None = None

    def get(self, name: str) -> str | None:
        return self.fields.get(name)

    @property
    def token(self) -> str | None:
        return self.get(TOKEN_FIELD)

    @property
    def user_agent(self) -> str | None:
        return self.get(USER_AGENT_FIELD)

    @property
    def message(self) -> str:
        return self.get(MESSAGE_FIELD) or ""


@dataclass(frozen=True)
class Decision:
    """A verdict and the rule that produced it (None when no rule fired)."""

    verdict: Verdict
    rule: str | None = None
    matched: str | None = None


Rule = Callable[[Submission, Verdict], Decision | None]


def count_capitalized_words(message: str) -> int:
    """Count words whose first character is an uppercase letter."""
    return sum(1 for word in _WORD_RE.findall(message) if word[0].isupper())


class SubmissionValidator:
    """
    Runs the rule pipeline against a submission.

    Rules are plain callables held in ``self.rules``; each returns a
    Decision to stop the pipeline or None to continue.
    """

    def __init__(
        self,
        repository: TokenRepository,
        blacklist: frozenset[str] = frozenset(),
        max_capitalized_words: int = 3,
        legacy_permissive_tokens: bool = False,
    ) -> None:
        self._repository = repository
        # Sorted for a deterministic match when several keywords appear
        self._blacklist = tuple(sorted(blacklist))
        self._max_capitalized_words = max_capitalized_words
        self._legacy_permissive_tokens = legacy_permissive_tokens
        self.rules: list[Rule] = [
            self._check_token_present,
            self._check_token_valid,
            self._check_user_agent,
            self._check_capitalization,
            self._check_keywords,
            self._check_honeypots,
        ]

    def validate(self, submission: Submission, prior: Verdict = Verdict.ACCEPT) -> Verdict:
        """Return the verdict for a submission."""
        return self.evaluate(submission, prior).verdict

    def evaluate(self, submission: Submission, prior: Verdict = Verdict.ACCEPT) -> Decision:
        """
        Run the pipeline and return the full decision.

        Args:
            submission: Posted fields and actual User-Agent header
            prior: Verdict reached by upstream checks, returned on pass-through

        Returns:
            Decision naming the rule that fired, or ``Decision(prior)``
        """
        for rule in self.rules:
            decision = rule(submission, prior)
            if decision is None:
                continue
            if decision.verdict is Verdict.REJECT:
                logger.warning(
                    "Spam detected: rule=%s matched=%r", decision.rule, decision.matched
                )
            else:
                logger.info("Submission passed through: rule=%s", decision.rule)
            return decision
        return Decision(prior)

    def _check_token_present(self, submission: Submission, prior: Verdict) -> Decision | None:
        if not submission.token:
            return Decision(prior, "missing_token")
        return None

    def _check_token_valid(self, submission: Submission, prior: Verdict) -> Decision | None:
        try:
            valid = self._repository.exists(submission.token)
        except StorageError as e:
            logger.error("Token lookup failed, skipping token check: %s", e)
            return Decision(prior, "store_unavailable")

        if valid:
            return None
        if self._legacy_permissive_tokens:
            return Decision(prior, "invalid_token", submission.token)
        return Decision(Verdict.REJECT, "invalid_token", submission.token)

    def _check_user_agent(self, submission: Submission, prior: Verdict) -> Decision | None:
        posted = submission.user_agent
        if posted is not None and posted != (submission.actual_user_agent or ""):
            return Decision(Verdict.REJECT, "user_agent_mismatch", posted)
        return None

    def _check_capitalization(self, submission: Submission, prior: Verdict) -> Decision | None:
        count = count_capitalized_words(submission.message)
        if count > self._max_capitalized_words:
            return Decision(Verdict.REJECT, "capitalized_words", str(count))
        return None

    def _check_keywords(self, submission: Submission, prior: Verdict) -> Decision | None:
        message = submission.message.lower()
        for word in self._blacklist:
            if word in message:
                return Decision(Verdict.REJECT, "blacklisted_keyword", word)
        return None

    def _check_honeypots(self, submission: Submission, prior: Verdict) -> Decision | None:
        for name in HONEYPOT_FIELDS:
            if submission.get(name):
                return Decision(Verdict.REJECT, "honeypot", name)
        return None
