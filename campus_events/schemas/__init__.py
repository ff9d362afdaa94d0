"""Public schema exports."""

from .auth import AuthCodePayload, AuthProcessResult, AuthStatus
from .events import UpcomingEvent, UpcomingEventsPage

__all__ = [
    "AuthCodePayload",
    "AuthProcessResult",
    "AuthStatus",
    "UpcomingEvent",
    "UpcomingEventsPage",
]
