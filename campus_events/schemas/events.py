"""Response schemas for the dashboard event listings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from campus_events.models.intra import Event
from campus_events.services.listing import EventStatus


class UpcomingEvent(Event):
    """A listed event with its display status and kind label."""

    status: EventStatus
    kind_label: str


class UpcomingEventsPage(BaseModel):
    """One page of upcoming campus events after search."""

    events: List[UpcomingEvent] = Field(default_factory=list)
    page: int
    per_page: int
    total: int = Field(..., description="Matching events across all pages.")
    total_pages: int


__all__ = ["UpcomingEvent", "UpcomingEventsPage"]
