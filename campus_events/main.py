"""
FastAPI application entrypoint for the campus events dashboard.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_events.api.routes import router as api_router
from campus_events.clients import IntraAPIError, TokenExchangeError
from campus_events.core.config import get_settings
from campus_events.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", "")


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query, path or body input as a 400 ``{"error": ...}``."""
    details = "; ".join(_describe_validation_error(error) for error in exc.errors())
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={"error": f"Invalid request: {details}"},
    )


async def _upstream_error_handler(request: Request, exc: IntraAPIError) -> JSONResponse:
    logger.warning(
        "%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, type(exc).__name__
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _token_error_handler(request: Request, exc: TokenExchangeError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content={"error": f"Failed to get client credentials token: {exc}"},
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Campus Events Dashboard",
        version="0.1.0",
        description="Browse campus events and attendee lists from the 42 intranet.",
    )
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(IntraAPIError, _upstream_error_handler)
    app.add_exception_handler(TokenExchangeError, _token_error_handler)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
