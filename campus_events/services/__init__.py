"""Service layer exports."""

from .access import AccessPolicy
from .app_token import AppTokenProvider
from .listing import (
    EventStatus,
    Page,
    event_status,
    kind_label,
    paginate,
    search_events,
    search_participants,
    upcoming_events,
)
from .roster import ParticipantRosterService, export_filename, export_participants_csv
from .session import SessionCookieManager

__all__ = [
    "AccessPolicy",
    "AppTokenProvider",
    "EventStatus",
    "Page",
    "ParticipantRosterService",
    "SessionCookieManager",
    "event_status",
    "export_filename",
    "export_participants_csv",
    "kind_label",
    "paginate",
    "search_events",
    "search_participants",
    "upcoming_events",
]
