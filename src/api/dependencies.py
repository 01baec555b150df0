"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
The token store and the keyword list are created once during
the app lifespan and read from app.state.
"""

from datetime import timedelta

from fastapi import Depends, Request

from src.config.settings import Settings, get_settings
from src.domain.codec import TokenCodec
from src.domain.lifecycle import TokenLifecycle
from src.domain.ports import TokenRepository
from src.domain.validator import SubmissionValidator


def get_repository(request: Request) -> TokenRepository:
    """
    Get token store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_blacklist(request: Request) -> frozenset[str]:
    """Get the keyword blacklist loaded at startup (empty if never loaded)."""
    return getattr(request.app.state, "blacklist", frozenset())


def get_token_lifecycle(
    repository: TokenRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> TokenLifecycle:
    """Create the token lifecycle service with injected dependencies."""
    return TokenLifecycle(
        codec=TokenCodec(secret_key=settings.secret_key),
        repository=repository,
        retention=timedelta(hours=settings.token_ttl_hours),
    )


def get_submission_validator(
    repository: TokenRepository = Depends(get_repository),
    blacklist: frozenset[str] = Depends(get_blacklist),
    settings: Settings = Depends(get_settings),
) -> SubmissionValidator:
    """Create the submission validator with injected dependencies."""
    return SubmissionValidator(
        repository=repository,
        blacklist=blacklist,
        max_capitalized_words=settings.max_capitalized_words,
        legacy_permissive_tokens=settings.legacy_permissive_tokens,
    )
