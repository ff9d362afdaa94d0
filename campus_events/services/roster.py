"""
Attendee roster collection and CSV export.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from typing import Iterable, List, Optional

from campus_events.clients import IntraAPIClient
from campus_events.models.intra import Event, EventUser

logger = logging.getLogger(__name__)

CSV_HEADER = ("Login", "Last name", "First name", "Email")


def export_participants_csv(event_users: Iterable[EventUser]) -> str:
    """Render attendees as CSV: one header line, then one quoted row each."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for entry in event_users:
        user = entry.user
        writer.writerow(
            [
                user.login,
                user.last_name or "",
                user.first_name or "",
                user.email or "",
            ]
        )
    return buffer.getvalue()


def export_filename(event: Optional[Event], event_id: int) -> str:
    label = event.name if event is not None and event.name else str(event_id)
    # Header-safe: quotes, separators and control characters are dropped.
    safe = re.sub(r'[\x00-\x1f"\\/;]+', "", label).strip() or str(event_id)
    return f"participants-{safe}.csv"


class ParticipantRosterService:
    """Collect every attendee page of an event."""

    PAGE_SIZE = 100

    def __init__(self, api_client: IntraAPIClient) -> None:
        self._api = api_client

    async def collect(self, token: str, event_id: int) -> List[EventUser]:
        """Read pages of 100 until a short page, so the export is never truncated."""
        attendees: List[EventUser] = []
        page = 1
        while True:
            batch = await self._api.fetch_event_users(
                token, event_id, page=page, per_page=self.PAGE_SIZE
            )
            attendees.extend(batch)
            if len(batch) < self.PAGE_SIZE:
                break
            page += 1
        logger.info(
            "Collected %s attendees for event %s over %s pages", len(attendees), event_id, page
        )
        return attendees


__all__ = [
    "CSV_HEADER",
    "ParticipantRosterService",
    "export_filename",
    "export_participants_csv",
]
