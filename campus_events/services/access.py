"""Authorization rules for attendee data."""

from __future__ import annotations

from typing import Iterable


class AccessPolicy:
    """Decide who may read participant lists."""

    ADMIN = "admin"
    PUBLIC = "public"

    def __init__(self, admin_logins: Iterable[str], participants_access: str = ADMIN) -> None:
        if participants_access not in (self.ADMIN, self.PUBLIC):
            raise ValueError(f"Unknown participants access policy: {participants_access!r}")
        self._admin_logins = frozenset(admin_logins)
        self._participants_access = participants_access

    @property
    def participants_require_admin(self) -> bool:
        return self._participants_access == self.ADMIN

    def is_admin(self, login: str | None) -> bool:
        return bool(login) and login in self._admin_logins


__all__ = ["AccessPolicy"]
