"""
Request dependencies
====================
The site (platform, sessions, renderer) is process-wide; each request gets a
``RequestState`` for the user named in the ``X-User-Id`` header.
Tests replace ``get_site`` through ``app.dependency_overrides``.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from lms_plugins.exceptions import LmsError, RecordNotFoundError, RequiredCapabilityError
from lms_plugins.host import Platform, Renderer, SessionStore, StringManager
from lms_plugins.host.request import RequestState
from lms_plugins.host.seed import load_site
from lms_plugins.web_api.config import settings

logger = logging.getLogger(__name__)


@dataclass
class Site:
    platform: Platform = field(default_factory=Platform)
    sessions: SessionStore = field(default_factory=SessionStore)
    renderer: Renderer = field(default_factory=lambda: Renderer(StringManager(settings.LANG)))


_site: Optional[Site] = None


def get_site() -> Site:
    global _site
    if _site is None:
        platform = load_site(settings.SITE_FILE) if settings.SITE_FILE else Platform()
        _site = Site(platform=platform)
    return _site


def get_renderer(site: Site = Depends(get_site)) -> Renderer:
    return site.renderer


def get_request_state(
    request: Request,
    site: Site = Depends(get_site),
    x_user_id: Optional[int] = Header(default=None),
) -> RequestState:
    """Resolve the current user and bind their session and query parameters."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        user = site.platform.get_user(x_user_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=401, detail=f"Unknown user: {x_user_id}") from None
    return RequestState(
        platform=site.platform,
        user=user,
        session=site.sessions.get(user.id),
        params=dict(request.query_params),
    )


def http_error(e: LmsError) -> HTTPException:
    """Map a plugin error onto an HTTP status."""
    if isinstance(e, RequiredCapabilityError):
        status = 403
    elif isinstance(e, RecordNotFoundError):
        status = 404
    else:
        status = 400
    return HTTPException(status_code=status, detail=e.to_dict())
