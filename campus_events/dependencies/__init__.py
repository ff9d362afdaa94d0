"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_access_policy,
    get_app_token_provider,
    get_intra_api_client,
    get_oauth_client,
    get_roster_service,
    get_session_manager,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_access_policy",
    "get_app_settings",
    "get_app_token_provider",
    "get_intra_api_client",
    "get_oauth_client",
    "get_roster_service",
    "get_session_manager",
]
