"""
In-memory helpers behind the dashboard listings.

The intranet offers neither campus filtering nor free-text search on the
endpoints we use, so the dashboard fetches a batch and narrows it here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, Iterable, List, Optional, Sequence, TypeVar

from campus_events.models.intra import Event, EventKind, EventUser

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 30

_KIND_LABELS = {
    EventKind.EVENT: "Event",
    EventKind.WORKSHOP: "Workshop",
    EventKind.CONFERENCE: "Conference",
    EventKind.HACKATHON: "Hackathon",
    EventKind.MEET_UP: "Meet-up",
    EventKind.ASSOCIATION: "Association",
    EventKind.EXTERN: "External",
    EventKind.PARTNERSHIP: "Partnership",
}


class EventStatus(str, Enum):
    ENDED = "ended"
    UPCOMING = "upcoming"
    ONGOING = "ongoing"


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def event_status(event: Event, now: Optional[datetime] = None) -> EventStatus:
    current = _now(now)
    if event.end_at < current:
        return EventStatus.ENDED
    if event.begin_at > current:
        return EventStatus.UPCOMING
    return EventStatus.ONGOING


def kind_label(kind: EventKind | str) -> str:
    try:
        return _KIND_LABELS[EventKind(kind)]
    except ValueError:
        return str(kind)


def upcoming_events(events: Iterable[Event], now: Optional[datetime] = None) -> List[Event]:
    """Events that have not started yet, soonest first."""
    current = _now(now)
    return sorted(
        (event for event in events if event.begin_at > current),
        key=lambda event: event.begin_at,
    )


def _matches(query: str, *fields: Optional[str]) -> bool:
    return any(field and query in field.lower() for field in fields)


def search_events(events: Sequence[Event], query: Optional[str]) -> List[Event]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(events)
    return [
        event
        for event in events
        if _matches(needle, event.name, event.description, event.location)
    ]


def search_participants(
    event_users: Sequence[EventUser], query: Optional[str]
) -> List[EventUser]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(event_users)
    return [
        entry
        for entry in event_users
        if _matches(
            needle,
            entry.user.login,
            entry.user.displayname,
            entry.user.first_name,
            entry.user.last_name,
        )
    ]


def paginate(items: Sequence[T], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    if page < 1:
        raise ValueError("page must be >= 1")
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    start = (page - 1) * per_page
    return Page(
        items=list(items[start : start + per_page]),
        page=page,
        per_page=per_page,
        total=len(items),
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "EventStatus",
    "Page",
    "event_status",
    "kind_label",
    "paginate",
    "search_events",
    "search_participants",
    "upcoming_events",
]
