"""
Domain exceptions - Semantic error types for the form gate.

This module defines domain-specific exceptions that communicate
failures without leaking infrastructure details. Heuristic rejections
are never raised: they are returned as a Decision.
"""


class FormGuardError(Exception):
    """Base class for form gate domain errors."""

    pass


class ConfigurationError(FormGuardError):
    """Secret key, random source or cipher backend unavailable - minting disabled."""

    pass


class StorageError(FormGuardError):
    """Token store unreachable or a uniqueness constraint was violated."""

    pass
