"""Session cookie helpers; the raw access token is the only auth state."""

from __future__ import annotations

from typing import Optional

from fastapi import Request, Response

from campus_events.models.oauth import OAuthToken


class SessionCookieManager:
    """Read, write and clear the HTTP-only session cookie."""

    def __init__(self, cookie_name: str, *, secure: bool = False) -> None:
        self.cookie_name = cookie_name
        self._secure = secure

    def read(self, request: Request) -> Optional[str]:
        """Return the stored token, or ``None`` when the visitor is anonymous."""
        return request.cookies.get(self.cookie_name) or None

    def store(self, response: Response, token: OAuthToken) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token.access_token,
            max_age=token.expires_in,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )


__all__ = ["SessionCookieManager"]
