"""
Read-only projections of the 42 intranet API resources.

Fields the dashboard does not use are still accepted and passed through to
clients unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventKind(str, Enum):
    EVENT = "event"
    WORKSHOP = "workshop"
    CONFERENCE = "conference"
    HACKATHON = "hackathon"
    MEET_UP = "meet_up"
    ASSOCIATION = "association"
    EXTERN = "extern"
    PARTNERSHIP = "partnership"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Event(BaseModel):
    """An intranet event as returned by ``/v2/events``."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    kind: Union[EventKind, str] = EventKind.EVENT
    max_people: Optional[int] = None
    nbr_subscribers: int = 0
    begin_at: datetime
    end_at: datetime
    campus_ids: List[int] = Field(default_factory=list)
    cursus_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("campus_ids", "cursus_ids", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("kind", mode="before")
    @classmethod
    def _known_kind(cls, value):
        # Kinds added upstream after this list was written stay as raw strings.
        try:
            return EventKind(value)
        except ValueError:
            return value

    @field_validator("begin_at", "end_at", "created_at", "updated_at")
    @classmethod
    def _ensure_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def held_on_campus(self, campus_id: int) -> bool:
        return campus_id in self.campus_ids


class UserImageVersions(BaseModel):
    model_config = ConfigDict(extra="allow")

    large: Optional[str] = None
    medium: Optional[str] = None
    small: Optional[str] = None
    micro: Optional[str] = None


class UserImage(BaseModel):
    model_config = ConfigDict(extra="allow")

    link: Optional[str] = None
    versions: UserImageVersions = Field(default_factory=UserImageVersions)


class User(BaseModel):
    """An intranet user, either the session identity or an event participant."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int
    login: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    usual_full_name: Optional[str] = None
    usual_first_name: Optional[str] = None
    displayname: Optional[str] = None
    kind: Optional[str] = None
    url: Optional[str] = None
    phone: Optional[str] = None
    image: UserImage = Field(default_factory=UserImage)
    staff: Optional[bool] = Field(None, alias="staff?")
    alumni: Optional[bool] = Field(None, alias="alumni?")
    active: Optional[bool] = Field(None, alias="active?")
    correction_point: Optional[int] = None
    wallet: Optional[int] = None
    pool_month: Optional[str] = None
    pool_year: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    alumnized_at: Optional[datetime] = None


class EventUser(BaseModel):
    """One RSVP: the join between an event and a user."""

    model_config = ConfigDict(extra="allow")

    id: int
    event_id: int
    user_id: int
    user: User


__all__ = [
    "Event",
    "EventKind",
    "EventUser",
    "User",
    "UserImage",
    "UserImageVersions",
]
