"""Per-request view of the host: who is asking, their session, the query."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from lms_plugins.host.store import Platform
from lms_plugins.model.entities import User


@dataclass
class RequestState:
    platform: Platform
    user: User
    session: dict[str, Any]
    params: Mapping[str, Any] = field(default_factory=dict)
