"""
42 intranet OAuth utilities.

These helpers build the consent URL and exchange authorization codes or client
credentials for bearer tokens.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from campus_events.core.config import IntraSettings
from campus_events.models.oauth import OAuthToken

logger = logging.getLogger(__name__)


class TokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class IntraOAuthClient:
    """Build intranet authorization URLs and request tokens."""

    def __init__(
        self,
        settings: IntraSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def authorize_endpoint(self) -> str:
        return f"{self._settings.api_base_url}/oauth/authorize"

    @property
    def token_endpoint(self) -> str:
        return f"{self._settings.api_base_url}/oauth/token"

    def build_authorization_url(self) -> str:
        """Construct the intranet OAuth consent URL."""
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": str(self._settings.redirect_uri),
            "response_type": "code",
            "scope": self._settings.scope,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> OAuthToken:
        """Exchange an authorization code for a user token."""
        payload = {
            "grant_type": "authorization_code",
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "code": code,
            "redirect_uri": str(self._settings.redirect_uri),
        }
        return await self._request_token(payload)

    async def client_credentials_token(self) -> OAuthToken:
        """Request an application token for anonymous reads."""
        payload = {
            "grant_type": "client_credentials",
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
        }
        return await self._request_token(payload)

    async def _request_token(self, payload: dict[str, str]) -> OAuthToken:
        grant_type = payload["grant_type"]
        async with httpx.AsyncClient(
            timeout=self._settings.request_timeout, transport=self._transport
        ) as client:
            response = await client.post(self.token_endpoint, data=payload)

        if not response.is_success:
            logger.warning(
                "Token exchange (%s) failed with status %s", grant_type, response.status_code
            )
            raise TokenExchangeError(response.text or f"HTTP {response.status_code}")

        try:
            return OAuthToken.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TokenExchangeError(
                "Incomplete token payload returned from the intranet."
            ) from exc


__all__ = ["IntraOAuthClient", "TokenExchangeError"]
