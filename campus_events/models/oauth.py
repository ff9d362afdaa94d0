"""
Domain models for OAuth tokens issued by the intranet.
"""

import time
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OAuthToken(BaseModel):
    """Token payload returned by ``/oauth/token``."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., ge=0, description="Lifetime in seconds.")
    refresh_token: Optional[str] = None
    scope: str = ""
    created_at: int = Field(
        default_factory=lambda: int(time.time()),
        description="Unix timestamp at which the token was issued.",
    )

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.created_at + self.expires_in, tz=timezone.utc)


__all__ = ["OAuthToken"]
