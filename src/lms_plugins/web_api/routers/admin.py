"""
Admin Router
============
Read and save plugin settings pages.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from lms_plugins.admin.settings import AdminSettingsPage
from lms_plugins.admin.tree import build_admin_tree
from lms_plugins.host import Renderer
from lms_plugins.host.request import RequestState
from lms_plugins.web_api.deps import get_renderer, get_request_state
from lms_plugins.web_api.schemas.admin import SettingsPageResponse, SettingsWriteRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _page(section: str, state: RequestState, output: Renderer) -> AdminSettingsPage:
    tree = build_admin_tree(state.platform, state.user, output.strings)
    page = tree.get(section)
    if page is None:
        raise HTTPException(status_code=404, detail=f"Unknown settings section: {section}")
    if not state.platform.has_capability(page.required_capability,
                                         state.platform.context_system(), state.user):
        raise HTTPException(status_code=403, detail="Site configuration rights required")
    return page


@router.get("/settings/{section}", response_model=SettingsPageResponse)
def read_settings(
    section: str,
    state: RequestState = Depends(get_request_state),
    output: Renderer = Depends(get_renderer),
):
    """Current values of every setting on the page."""
    page = _page(section, state, output)
    return page.export(state.platform.config)


@router.post("/settings/{section}", response_model=SettingsPageResponse)
def write_settings(
    section: str,
    body: SettingsWriteRequest,
    state: RequestState = Depends(get_request_state),
    output: Renderer = Depends(get_renderer),
):
    """
    Save the submitted settings. Rejected values come back in `errors`
    and leave the stored value unchanged.
    """
    page = _page(section, state, output)
    config = state.platform.config
    errors = {}
    for fullname, value in body.settings.items():
        try:
            setting = page.get(fullname)
        except KeyError:
            errors[fullname] = "Unknown setting"
            continue
        error = setting.write_setting(config, value)
        if error:
            errors[fullname] = error
        else:
            logger.info("user %s saved %s", state.user.id, fullname)
    return {**page.export(config), "errors": errors}
