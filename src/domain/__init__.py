"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core logic of the form anti-spam gate: token
minting, the token lifecycle and the submission rule pipeline. It defines
its own port interfaces for infrastructure abstraction, ensuring true
hexagonal architecture decoupling.
"""

from .codec import MintedToken, TokenCodec
from .exceptions import ConfigurationError, FormGuardError, StorageError
from .lifecycle import TokenLifecycle
from .ports import TokenRecord, TokenRepository, Verdict, as_utc
from .validator import Decision, Submission, SubmissionValidator
from .wordlist import load_word_list

__all__ = [
    "ConfigurationError",
    "Decision",
    "FormGuardError",
    "MintedToken",
    "StorageError",
    "Submission",
    "SubmissionValidator",
    "TokenCodec",
    "TokenLifecycle",
    "TokenRecord",
    "TokenRepository",
    "Verdict",
    "as_utc",
    "load_word_list",
]
