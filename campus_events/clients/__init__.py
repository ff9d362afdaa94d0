"""Expose constructed client wrappers."""

from .intra_api import (
    IntraAPIClient,
    IntraAPIError,
    InvalidResponseShapeError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    UpstreamError,
)
from .intra_auth import IntraOAuthClient, TokenExchangeError

__all__ = [
    "IntraAPIClient",
    "IntraAPIError",
    "IntraOAuthClient",
    "InvalidResponseShapeError",
    "NotFoundError",
    "RateLimitedError",
    "TokenExchangeError",
    "UnauthorizedError",
    "UpstreamError",
]
