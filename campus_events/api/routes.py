"""
FastAPI routes for the campus events dashboard.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Annotated, Any, Awaitable, Callable, List, Optional, TypeVar
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from campus_events.clients import TokenExchangeError, UnauthorizedError
from campus_events.dependencies import (
    get_access_policy,
    get_app_settings,
    get_app_token_provider,
    get_intra_api_client,
    get_oauth_client,
    get_roster_service,
    get_session_manager,
)
from campus_events.models.intra import Event, EventUser, User
from campus_events.schemas import (
    AuthCodePayload,
    AuthProcessResult,
    AuthStatus,
    UpcomingEvent,
    UpcomingEventsPage,
)
from campus_events.services import (
    event_status,
    export_filename,
    export_participants_csv,
    kind_label,
    paginate,
    search_events,
    search_participants,
    upcoming_events,
)
from campus_events.services.listing import DEFAULT_PAGE_SIZE

router = APIRouter()
logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_AUTHENTICATED = "Not authenticated"
ADMIN_REQUIRED = "Admin access required"


def _frontend_url(request: Request, settings: Any, path: str) -> str:
    base = str(settings.frontend_base_url or request.base_url).rstrip("/")
    return f"{base}{path}"


def _require_session(request: Request, session: Any) -> str:
    token = session.read(request)
    if not token:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail=NOT_AUTHENTICATED)
    return token


async def _read_as_visitor(
    request: Request,
    session: Any,
    app_tokens: Any,
    call: Callable[[str], Awaitable[T]],
) -> T:
    """
    Run ``call`` with the session token, or with the application token for
    anonymous visitors.

    A cached application token the intranet has revoked is dropped and the
    call is retried once with a newly granted one.
    """
    token = session.read(request)
    if token:
        return await call(token)
    try:
        return await call(await app_tokens.get_access_token())
    except UnauthorizedError:
        logger.warning("Application token rejected upstream, requesting a new one")
        app_tokens.invalidate()
        return await call(await app_tokens.get_access_token())


async def _read_participants(
    request: Request,
    session: Any,
    app_tokens: Any,
    api_client: Any,
    policy: Any,
    call: Callable[[str], Awaitable[T]],
) -> T:
    if not policy.participants_require_admin:
        return await _read_as_visitor(request, session, app_tokens, call)

    token = _require_session(request, session)
    user = await api_client.fetch_current_user(token)
    if not policy.is_admin(user.login):
        logger.info("Refused attendee list to non-admin login %s", user.login)
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=ADMIN_REQUIRED)
    return await call(token)


def _as_upcoming(event: Event) -> UpcomingEvent:
    return UpcomingEvent.model_validate(
        {
            **event.model_dump(),
            "status": event_status(event),
            "kind_label": kind_label(event.kind),
        }
    )


async def _read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
        )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/login")
async def login(
    oauth_client: Annotated[Any, Depends(get_oauth_client)],
) -> RedirectResponse:
    """Send the browser to the intranet consent screen."""
    return RedirectResponse(
        url=oauth_client.build_authorization_url(), status_code=HTTPStatus.FOUND
    )


@router.get("/auth/callback")
async def oauth_callback(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_oauth_client)],
    session: Annotated[Any, Depends(get_session_manager)],
    settings: Annotated[Any, Depends(get_app_settings)],
    code: Optional[str] = Query(default=None, description="Authorization code."),
    error: Optional[str] = Query(default=None, description="Error reported by the intranet."),
) -> RedirectResponse:
    """Complete the browser redirect leg of the OAuth flow."""
    if error:
        return RedirectResponse(
            url=_frontend_url(request, settings, f"/?error={quote(error)}"),
            status_code=HTTPStatus.FOUND,
        )
    if not code:
        return RedirectResponse(
            url=_frontend_url(request, settings, "/?error=no_code"),
            status_code=HTTPStatus.FOUND,
        )

    try:
        token = await oauth_client.exchange_authorization_code(code)
    except TokenExchangeError as exc:
        logger.warning("Auth callback exchange failed: %s", exc)
        return RedirectResponse(
            url=_frontend_url(request, settings, "/?error=token_error"),
            status_code=HTTPStatus.FOUND,
        )

    response = RedirectResponse(
        url=_frontend_url(request, settings, "/dashboard"), status_code=HTTPStatus.FOUND
    )
    session.store(response, token)
    return response


@router.post("/auth/process", response_model=AuthProcessResult)
async def process_auth_code(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_oauth_client)],
    session: Annotated[Any, Depends(get_session_manager)],
) -> Response:
    """Exchange a code posted by the front-end and open the session."""
    # Parsed here so a missing or empty body reads as a missing code.
    try:
        payload = AuthCodePayload.model_validate(await _read_json_body(request))
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())
    code = payload.code
    if not code:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="Code is required")

    try:
        token = await oauth_client.exchange_authorization_code(code)
    except TokenExchangeError as exc:
        logger.warning("Auth process exchange failed: %s", exc)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"error": f"Failed to get access token: {exc}"},
        )

    response = JSONResponse(content=AuthProcessResult(success=True).model_dump())
    session.store(response, token)
    return response


@router.get("/auth/logout")
async def logout(
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    settings: Annotated[Any, Depends(get_app_settings)],
) -> RedirectResponse:
    response = RedirectResponse(
        url=_frontend_url(request, settings, "/"), status_code=HTTPStatus.FOUND
    )
    session.clear(response)
    return response


@router.get("/auth/check", response_model=AuthStatus)
async def check_auth(
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
) -> AuthStatus:
    return AuthStatus(authenticated=session.read(request) is not None)


@router.get("/auth/me", response_model=User)
async def current_user(
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    api_client: Annotated[Any, Depends(get_intra_api_client)],
) -> User:
    """Return the intranet profile behind the session cookie."""
    token = _require_session(request, session)
    return await api_client.fetch_current_user(token)


@router.get("/events", response_model=List[Event])
async def list_campus_events(
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    app_tokens: Annotated[Any, Depends(get_app_token_provider)],
    api_client: Annotated[Any, Depends(get_intra_api_client)],
    settings: Annotated[Any, Depends(get_app_settings)],
    campus_id: Optional[int] = Query(default=None, description="Campus to filter on."),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=30, ge=1),
) -> List[Event]:
    """List campus events; anonymous visitors read through the application token."""
    campus = campus_id if campus_id is not None else settings.default_campus_id
    return await _read_as_visitor(
        request,
        session,
        app_tokens,
        lambda token: api_client.fetch_campus_events(token, campus, page, per_page),
    )


@router.get("/events/upcoming", response_model=UpcomingEventsPage)
async def list_upcoming_events(
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    app_tokens: Annotated[Any, Depends(get_app_token_provider)],
    api_client: Annotated[Any, Depends(get_intra_api_client)],
    settings: Annotated[Any, Depends(get_app_settings)],
    campus_id: Optional[int] = Query(default=None, description="Campus to filter on."),
    q: Optional[str] = Query(default=None, description="Search name, description and location."),
    page: int = Query(default=1, ge=1),
) -> UpcomingEventsPage:
    """Future campus events, soonest first, searched and paged by 30."""
    campus = campus_id if campus_id is not None else settings.default_campus_id
    events = await _read_as_visitor(
        request,
        session,
        app_tokens,
        lambda token: api_client.fetch_all_campus_events(token, campus),
    )
    matching = search_events(upcoming_events(events), q)
    result = paginate(matching, page=page, per_page=DEFAULT_PAGE_SIZE)
    return UpcomingEventsPage(
        events=[_as_upcoming(event) for event in result.items],
        page=result.page,
        per_page=result.per_page,
        total=result.total,
        total_pages=result.total_pages,
    )


@router.get("/events/{event_id}", response_model=Event)
async def get_event(
    event_id: int,
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    app_tokens: Annotated[Any, Depends(get_app_token_provider)],
    api_client: Annotated[Any, Depends(get_intra_api_client)],
) -> Event:
    return await _read_as_visitor(
        request,
        session,
        app_tokens,
        lambda token: api_client.fetch_event(token, event_id),
    )


@router.get("/events/{event_id}/users", response_model=List[EventUser])
async def list_event_users(
    event_id: int,
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    app_tokens: Annotated[Any, Depends(get_app_token_provider)],
    api_client: Annotated[Any, Depends(get_intra_api_client)],
    policy: Annotated[Any, Depends(get_access_policy)],
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=100, ge=1),
    q: Optional[str] = Query(default=None, description="Search login and names on this page."),
) -> List[EventUser]:
    """List one page of attendees, subject to the configured access policy."""
    attendees = await _read_participants(
        request,
        session,
        app_tokens,
        api_client,
        policy,
        lambda token: api_client.fetch_event_users(token, event_id, page, per_page),
    )
    return search_participants(attendees, q)


@router.get("/events/{event_id}/users/export")
async def export_event_users(
    event_id: int,
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    app_tokens: Annotated[Any, Depends(get_app_token_provider)],
    api_client: Annotated[Any, Depends(get_intra_api_client)],
    policy: Annotated[Any, Depends(get_access_policy)],
    roster: Annotated[Any, Depends(get_roster_service)],
) -> Response:
    """Download the full attendee roster as CSV."""
    async def load(token: str):
        event = await api_client.fetch_event(token, event_id)
        return event, await roster.collect(token, event_id)

    event, attendees = await _read_participants(
        request, session, app_tokens, api_client, policy, load
    )
    filename = export_filename(event, event_id)
    ascii_name = filename.encode("ascii", "ignore").decode("ascii")
    return Response(
        content=export_participants_csv(attendees),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": (
                f"attachment; filename=\"{ascii_name}\"; "
                f"filename*=UTF-8''{quote(filename)}"
            )
        },
    )


__all__ = ["router"]
