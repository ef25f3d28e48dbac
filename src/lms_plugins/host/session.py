"""Per-user session state."""

from __future__ import annotations

import threading
from typing import Any


class SessionStore:
    """Holds one mutable session dict per user id.

    Plugins treat the returned dict like the framework session object:
    report filters live under the report mode key, the active-group cache
    under ``"activegroup"``.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, userid: int) -> dict[str, Any]:
        with self._lock:
            return self._sessions.setdefault(userid, {})

    def reset(self, userid: int | None = None) -> None:
        with self._lock:
            if userid is None:
                self._sessions.clear()
            else:
                self._sessions.pop(userid, None)


def report_filters(session: dict[str, Any], mode: str) -> dict[str, str]:
    """Return the filter bucket a report *mode* keeps in the session."""
    return session.setdefault(mode, {})


def set_initials_filter(
    session: dict[str, Any],
    mode: str,
    contextid: int,
    *,
    first: str | None = None,
    last: str | None = None,
) -> None:
    """Store the first/last name initials filter for a report page."""
    bucket = report_filters(session, mode)
    if first is not None:
        bucket[f"filterfirstname-{contextid}"] = first
    if last is not None:
        bucket[f"filtersurname-{contextid}"] = last
