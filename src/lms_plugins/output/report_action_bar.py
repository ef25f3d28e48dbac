"""Renderer class for the report pages' action bar."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from lms_plugins.host.renderer import Page, Renderer, build_url, optional_param
from lms_plugins.host.request import RequestState
from lms_plugins.host.session import report_filters
from lms_plugins.model import CAP_ACCESS_ALL_GROUPS, GroupMode
from lms_plugins.model.entities import Context, CourseModule
from lms_plugins.output.comboboxsearch import ComboboxSearch
from lms_plugins.output.user_search import partial_user_search

logger = logging.getLogger(__name__)

REPORT_SLUG = "/mod/quiz/report.php"


class ActionBarMenus(Protocol):
    def export_for_template(self, output: Renderer) -> dict[str, Any]: ...


@dataclass
class NavigationMenu:
    """URL select listing the reports available on the page."""

    options: list[tuple[str, str]]
    selected: Optional[str] = None
    label: str = ""

    def export_for_template(self, output: Renderer) -> dict[str, Any]:
        return {
            "generalnavselector": {
                "label": self.label,
                "options": [
                    {"url": url, "name": name, "selected": url == self.selected}
                    for url, name in self.options
                ],
            }
        }


@dataclass
class InitialsContent:
    buttoncontent: str
    buttonheader: Optional[str]
    dropdowncontent: str


class ReportActionBar:
    """Toolbar shown above report pages: navigation, initials, groups, user search.

    The context is the module context when *cm* is given, otherwise the
    course context.
    """

    def __init__(
        self,
        request: RequestState,
        courseid: Optional[int],
        page: Page,
        mode: str,
        cm: Optional[CourseModule],
        menus: Optional[ActionBarMenus],
        urlroot: Optional[str] = None,
    ) -> None:
        self.request = request
        self.courseid = courseid
        self.page = page
        self.mode = mode
        self.cm = cm
        self.menus = menus
        self.urlroot = urlroot or REPORT_SLUG
        self.usersearch = optional_param(request.params, "gpr_search", "")

        platform = request.platform
        if cm is None:
            self.context = platform.context_course(courseid)
        else:
            self.context = platform.context_module(cm.id)

    def get_content_for_initial_bar(self, output: Renderer) -> ComboboxSearch:
        itemid = self.cm.id if self.cm is not None else self.courseid
        initials = self.initials_selector(output, itemid, self.context, self.urlroot, self.mode, {})
        return ComboboxSearch(
            False,
            initials.buttoncontent,
            initials.dropdowncontent,
            "initials-selector",
            "initialswidget",
            "initialsdropdown",
            initials.buttonheader,
        )

    def initials_selector(
        self,
        output: Renderer,
        itemid: int,
        context: Context,
        slug: str,
        searchprefix: str = "gpr",
        urlparams: Optional[dict[str, Any]] = None,
    ) -> InitialsContent:
        """Build the initials bar filter.

        The dropdown posts back through the client-side initials widget, so
        the page must keep loading that module.
        """
        params = self.request.params
        searchvalue = optional_param(params, f"{searchprefix}_search", None)
        userid = optional_param(params, f"{searchprefix}_userid", None, cast=int)
        url = build_url(slug, {"id": itemid})

        filters = report_filters(self.request.session, self.mode)
        firstinitial = filters.get(f"filterfirstname-{context.id}", "")
        lastinitial = filters.get(f"filtersurname-{context.id}", "")

        initialsbar = partial_user_search(output, url, firstinitial, lastinitial, True)

        strings = output.strings
        currentfilter = ""
        if firstinitial and lastinitial:
            currentfilter = strings.get_string(
                "filterbothactive", "grades", {"first": firstinitial, "last": lastinitial})
        elif firstinitial:
            currentfilter = strings.get_string("filterfirstactive", "grades", {"first": firstinitial})
        elif lastinitial:
            currentfilter = strings.get_string("filterlastactive", "grades", {"last": lastinitial})

        self.page.requires.js_call_amd(
            "core_grades/searchwidget/initials", "init",
            [slug, userid, searchvalue, urlparams or {}],
        )

        dropdowncontent = output.render_from_template("grades/initials_dropdown_form", {
            "courseid": self.courseid,
            "initialsbars": output.markup(initialsbar),
        })
        return InitialsContent(
            buttoncontent=currentfilter or strings.get_string("filterbyname", "grades"),
            buttonheader=strings.get_string("name") if currentfilter else None,
            dropdowncontent=dropdowncontent,
        )

    def group_selector(self, output: Renderer, groupactionbaseurl: Optional[str] = None) -> Optional[ComboboxSearch]:
        """Group selector trigger for the activity, or None without group mode."""
        if self.cm is None:
            return None
        platform = self.request.platform
        user = self.request.user
        groupmode = platform.get_activity_groupmode(self.cm)
        if not groupmode:
            return None

        sbody = output.render_from_template("group/searchbody", {
            "courseid": self.courseid or 0,
            "cmid": self.cm.id,
            "currentvalue": optional_param(self.request.params, "groupsearchvalue", ""),
            "instance": output.random_instance(),
        })

        strings = output.strings
        if groupmode == GroupMode.VISIBLEGROUPS:
            label = strings.get_string("selectgroupsvisible")
        else:
            label = strings.get_string("selectgroupsseparate")

        data: dict[str, Any] = {
            "name": "group",
            "label": label,
            "courseid": self.courseid or 0,
            "groupactionbaseurl": groupactionbaseurl,
        }

        aag = platform.has_capability(CAP_ACCESS_ALL_GROUPS, self.context, user)
        if groupmode == GroupMode.VISIBLEGROUPS or aag:
            # Any group in grouping.
            allowedgroups = platform.get_all_groups(
                self.cm.course, 0, self.cm.groupingid, participationonly=True)
        else:
            # Only assigned groups.
            allowedgroups = platform.get_all_groups(
                self.cm.course, user.id, self.cm.groupingid, participationonly=True)

        activegroup = platform.get_activity_group(
            self.cm, user, self.request.session,
            update=True, allowedgroups=allowedgroups,
            changegroup=optional_param(self.request.params, "group", -1, cast=int),
        )
        data["group"] = activegroup
        if activegroup:
            data["selectedgroup"] = output.format_string(platform.get_group(activegroup).name)
        elif activegroup == 0:
            data["selectedgroup"] = strings.get_string("allparticipants")

        return ComboboxSearch(
            False,
            output.render_from_template("group/group_selector", data),
            sbody,
            "group-search",
            "groupsearchwidget",
            "groupsearchdropdown overflow-auto w-100",
        )

    def search_user(self, output: Renderer) -> ComboboxSearch:
        resetlink = build_url(self.urlroot, {"id": self.cm.id if self.cm else self.courseid})
        searchinput = output.render_from_template("user/user_selector", {
            "currentvalue": self.usersearch,
            "courseid": self.courseid,
            "resetlink": resetlink,
            "group": 0,
        })
        return ComboboxSearch(
            True,
            searchinput,
            None,
            "user-search dropdown d-flex",
            None,
            "usersearchdropdown overflow-auto",
            None,
            False,
        )

    def export_for_template(self, output: Renderer) -> dict[str, Any]:
        generalnavselector: Any = {}
        if self.menus is not None:
            generalnavselector = self.menus.export_for_template(output)
        if isinstance(generalnavselector, dict) and "generalnavselector" in generalnavselector:
            generalnavselector = generalnavselector["generalnavselector"]

        data = {
            "generalnavselector": generalnavselector,
            "initialselector": self.get_content_for_initial_bar(output).export_for_template(output),
            "usersearch": self.search_user(output).export_for_template(output),
        }
        groupselector = self.group_selector(output)
        if groupselector is not None:
            data["groupselector"] = groupselector.export_for_template(output)
        return data
