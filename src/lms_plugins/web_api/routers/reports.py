"""
Reports Router
==============
Toolbar widgets shown above course and report pages.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from lms_plugins.exceptions import LmsError
from lms_plugins.group import GroupSelector
from lms_plugins.host import Renderer
from lms_plugins.host.renderer import Page, build_url
from lms_plugins.host.request import RequestState
from lms_plugins.model import CAP_QUIZ_VIEW_REPORTS
from lms_plugins.output import ReportActionBar
from lms_plugins.output.report_action_bar import REPORT_SLUG, NavigationMenu
from lms_plugins.web_api.deps import get_renderer, get_request_state, http_error

router = APIRouter()

REPORT_MODES = ("overview", "responses", "statistics")


@router.get("/group/selector")
def group_selector(
    courseid: int = Query(..., description="Course id"),
    cmid: Optional[int] = Query(default=None, description="Activity course module id"),
    state: RequestState = Depends(get_request_state),
    output: Renderer = Depends(get_renderer),
):
    """
    Template data for the group selector, or null when groups are off.

    `group` and `groupsearchvalue` query parameters are read by the selector.
    """
    try:
        course = state.platform.get_course(courseid)
        cm = state.platform.get_cm(cmid) if cmid is not None else None
        return {"groupselector": GroupSelector(state, course, cm).export_for_template(output)}
    except LmsError as e:
        raise http_error(e) from e


@router.get("/report/action-bar")
def report_action_bar(
    id: int = Query(..., description="Quiz course module id"),
    mode: str = Query(default="overview"),
    state: RequestState = Depends(get_request_state),
    output: Renderer = Depends(get_renderer),
):
    """
    Template data for the quiz report action bar.

    The `amd` list holds the client-side module calls the page must make.
    """
    platform = state.platform
    try:
        cm = platform.get_cm(id)
        platform.require_capability(CAP_QUIZ_VIEW_REPORTS, platform.context_module(cm.id), state.user)
        gs = output.strings.get_string
        menus = NavigationMenu(
            options=[(build_url(REPORT_SLUG, {"id": cm.id, "mode": m}), gs(f"{m}report", "quiz"))
                     for m in REPORT_MODES],
            selected=build_url(REPORT_SLUG, {"id": cm.id, "mode": mode}),
            label=gs("reportnavigation", "quiz"),
        )
        page = Page(url=build_url(REPORT_SLUG, {"id": cm.id, "mode": mode}))
        bar = ReportActionBar(state, cm.course, page, mode, cm, menus)
        data = bar.export_for_template(output)
    except LmsError as e:
        raise http_error(e) from e
    data["amd"] = page.requires.amd_calls
    return data
