"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from campus_events.clients import IntraAPIClient, IntraOAuthClient
from campus_events.core.config import AppSettings, get_settings
from campus_events.services import (
    AccessPolicy,
    AppTokenProvider,
    ParticipantRosterService,
    SessionCookieManager,
)

from .config import get_app_settings


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_oauth_client() -> IntraOAuthClient:
    """Create a singleton intranet OAuth client."""
    return IntraOAuthClient(_settings().intra)


@lru_cache()
def get_intra_api_client() -> IntraAPIClient:
    """Create a singleton intranet API client."""
    settings = _settings()
    return IntraAPIClient(settings.intra, settings.pagination)


@lru_cache()
def get_app_token_provider() -> AppTokenProvider:
    """Provide the shared client-credentials token cache."""
    return AppTokenProvider(get_oauth_client())


def get_roster_service(
    api_client: Annotated[IntraAPIClient, Depends(get_intra_api_client)],
) -> ParticipantRosterService:
    return ParticipantRosterService(api_client)


def get_session_manager(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> SessionCookieManager:
    """Build the cookie manager; the Secure flag follows the environment."""
    return SessionCookieManager(
        settings.session.cookie_name, secure=settings.is_production
    )


def get_access_policy(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> AccessPolicy:
    return AccessPolicy(
        settings.access.admin_logins, settings.access.participants_access
    )


__all__ = [
    "get_access_policy",
    "get_app_token_provider",
    "get_intra_api_client",
    "get_oauth_client",
    "get_roster_service",
    "get_session_manager",
]
