"""
Process-local cache for the client-credentials token used on anonymous reads.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from campus_events.clients import IntraOAuthClient
from campus_events.models.oauth import OAuthToken

logger = logging.getLogger(__name__)


class AppTokenProvider:
    """Hands out the application token, requesting a new one near expiry."""

    _REFRESH_WINDOW = timedelta(seconds=60)

    def __init__(self, oauth_client: IntraOAuthClient) -> None:
        self._oauth = oauth_client
        self._token: Optional[OAuthToken] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self, now: datetime) -> bool:
        return (
            self._token is not None
            and self._token.expires_at > now + self._REFRESH_WINDOW
        )

    async def get_access_token(self) -> str:
        async with self._lock:
            if not self._is_fresh(datetime.now(timezone.utc)):
                logger.info("Requesting client-credentials token")
                self._token = await self._oauth.client_credentials_token()
            return self._token.access_token

    def invalidate(self) -> None:
        self._token = None


__all__ = ["AppTokenProvider"]
