"""Schemas related to the OAuth login flow."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AuthCodePayload(BaseModel):
    """Body sent by the front-end to finish the code exchange."""

    code: Optional[str] = Field(
        None, description="Authorization code returned by the intranet consent screen."
    )


class AuthProcessResult(BaseModel):
    success: bool = True


class AuthStatus(BaseModel):
    authenticated: bool


__all__ = ["AuthCodePayload", "AuthProcessResult", "AuthStatus"]
