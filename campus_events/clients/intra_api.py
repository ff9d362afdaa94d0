"""
Read-only client for the 42 intranet REST API.

Every call carries the caller's bearer token. Non-2xx responses are turned
into a structured error per status so handlers never need to inspect
messages.
"""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from campus_events.core.config import IntraSettings, PaginationSettings
from campus_events.models.intra import Event, EventUser, User
from campus_events.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)

_EVENT_LIST = TypeAdapter(List[Event])
_EVENT_USER_LIST = TypeAdapter(List[EventUser])


class IntraAPIError(Exception):
    """Base class for upstream failures; ``status_code`` is what we answer with."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        upstream_status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status
        self.body = body


class UnauthorizedError(IntraAPIError):
    status_code = HTTPStatus.UNAUTHORIZED


class NotFoundError(IntraAPIError):
    status_code = HTTPStatus.NOT_FOUND


class RateLimitedError(IntraAPIError):
    status_code = HTTPStatus.TOO_MANY_REQUESTS


class UpstreamError(IntraAPIError):
    """Any other non-2xx answer."""


class InvalidResponseShapeError(IntraAPIError):
    """The upstream answered 2xx with a body we cannot use."""


_ERRORS_BY_STATUS: dict[int, type[IntraAPIError]] = {
    HTTPStatus.UNAUTHORIZED: UnauthorizedError,
    HTTPStatus.NOT_FOUND: NotFoundError,
    HTTPStatus.TOO_MANY_REQUESTS: RateLimitedError,
}


def _error_message(response: httpx.Response, action: str) -> str:
    if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
        return "429 Too Many Requests (Spam Rate Limit Exceeded)"

    fallback = f"Failed to {action}: {response.status_code} {response.reason_phrase}"
    text = response.text
    try:
        payload = response.json()
    except ValueError:
        return text or fallback
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message)
    return text or fallback


def raise_for_upstream_status(response: httpx.Response, action: str) -> None:
    """Raise the matching ``IntraAPIError`` subclass for a non-2xx response."""
    if response.is_success:
        return
    error_cls = _ERRORS_BY_STATUS.get(response.status_code, UpstreamError)
    message = _error_message(response, action)
    logger.warning(
        "Upstream call to %s failed with status %s", action, response.status_code
    )
    raise error_cls(message, upstream_status=response.status_code, body=response.text)


class IntraAPIClient:
    """Typed wrappers around the intranet endpoints the dashboard reads."""

    def __init__(
        self,
        settings: IntraSettings,
        pagination: PaginationSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._settings = settings
        self._pagination = pagination
        self._transport = transport
        self._retry = retry_config or RetryConfig()

    async def _get(
        self,
        token: str,
        path: str,
        *,
        action: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self._settings.api_base_url}/v2{path}"
        headers = {"Authorization": f"Bearer {token}"}
        async with httpx.AsyncClient(
            timeout=self._settings.request_timeout, transport=self._transport
        ) as client:
            response = await request_with_retry(
                client.get,
                url,
                params=params,
                headers=headers,
                retry_config=self._retry,
            )

        raise_for_upstream_status(response, action)
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidResponseShapeError(
                "Invalid response format: body is not JSON",
                upstream_status=response.status_code,
                body=response.text,
            ) from exc

    @staticmethod
    def _parse(model: type[BaseModel] | TypeAdapter, payload: Any) -> Any:
        try:
            if isinstance(model, TypeAdapter):
                return model.validate_python(payload)
            return model.model_validate(payload)
        except ValidationError as exc:
            raise InvalidResponseShapeError(
                f"Invalid response format: {exc.error_count()} validation error(s)"
            ) from exc

    @staticmethod
    def _ensure_list(payload: Any, what: str) -> list:
        if not isinstance(payload, list):
            logger.error("Intranet returned non-array response for %s", what)
            raise InvalidResponseShapeError("Invalid response format: expected array")
        return payload

    async def fetch_current_user(self, token: str) -> User:
        """Return the user the token belongs to."""
        payload = await self._get(token, "/me", action="fetch current user")
        return self._parse(User, payload)

    async def fetch_event(self, token: str, event_id: int) -> Event:
        payload = await self._get(token, f"/events/{event_id}", action="fetch event")
        return self._parse(Event, payload)

    async def fetch_event_users(
        self, token: str, event_id: int, page: int = 1, per_page: int = 100
    ) -> List[EventUser]:
        """Return one page of an event's RSVPs."""
        payload = await self._get(
            token,
            f"/events/{event_id}/events_users",
            action="fetch event users",
            params={"page": page, "per_page": per_page},
        )
        return self._parse(_EVENT_USER_LIST, self._ensure_list(payload, "event users"))

    async def fetch_events(
        self, token: str, page: int = 1, per_page: int = 30
    ) -> List[Event]:
        """Return one page of all events, most recent first, without campus filtering."""
        payload = await self._get(
            token,
            "/events",
            action="fetch all events",
            params={"page": page, "per_page": per_page, "sort": "-begin_at"},
        )
        return self._parse(_EVENT_LIST, self._ensure_list(payload, "events"))

    async def fetch_campus_events(
        self, token: str, campus_id: int = 1, page: int = 1, per_page: int = 30
    ) -> List[Event]:
        """
        Return up to ``per_page`` events held on ``campus_id``.

        The events endpoint cannot filter by campus, so a single page is
        over-fetched and filtered here. Large requests switch to
        :meth:`fetch_all_campus_events`.
        """
        if per_page >= self._pagination.aggregate_threshold:
            return await self.fetch_all_campus_events(token, campus_id)

        upstream_per_page = min(
            per_page * self._pagination.overfetch_factor, self._pagination.page_size
        )
        events = await self.fetch_events(token, page=page, per_page=upstream_per_page)
        return [event for event in events if event.held_on_campus(campus_id)][:per_page]

    async def fetch_all_campus_events(self, token: str, campus_id: int = 1) -> List[Event]:
        """
        Walk the events listing page by page and keep those held on ``campus_id``.

        Stops on a short or empty page, after ``max_pages`` requests, or on a
        429, in which case whatever was collected so far is returned. Sleeps
        ``page_delay_seconds`` between full pages.
        """
        page_size = self._pagination.page_size
        max_pages = self._pagination.max_pages
        collected: List[Event] = []

        for page in range(1, max_pages + 1):
            try:
                events = await self.fetch_events(token, page=page, per_page=page_size)
            except RateLimitedError:
                logger.warning(
                    "Rate limit reached on page %s, returning %s campus events",
                    page,
                    len(collected),
                )
                break

            collected.extend(event for event in events if event.held_on_campus(campus_id))
            logger.debug(
                "Scanned events page %s (%s raw, %s kept so far)",
                page,
                len(events),
                len(collected),
            )

            if len(events) < page_size:
                break
            if page < max_pages:
                await asyncio.sleep(self._pagination.page_delay_seconds)

        return collected


__all__ = [
    "IntraAPIClient",
    "IntraAPIError",
    "InvalidResponseShapeError",
    "NotFoundError",
    "RateLimitedError",
    "UnauthorizedError",
    "UpstreamError",
    "raise_for_upstream_status",
]
