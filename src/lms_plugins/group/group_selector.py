"""General groups bar on the action bar menu."""

from __future__ import annotations

import logging
from typing import Any, Optional

from lms_plugins.host.renderer import Renderer, optional_param
from lms_plugins.host.request import RequestState
from lms_plugins.model import CAP_ACCESS_ALL_GROUPS, GroupMode
from lms_plugins.model.entities import Context, Course, CourseModule
from lms_plugins.output.comboboxsearch import ComboboxSearch

logger = logging.getLogger(__name__)


class GroupSelector:
    """Group selector for a course page or, when *cm* is given, an activity page."""

    def __init__(
        self,
        request: RequestState,
        course: Course,
        cm: Optional[CourseModule] = None,
        groupactionbaseurl: Optional[str] = None,
    ) -> None:
        self.request = request
        self.course = course
        self.cm = cm
        self.groupactionbaseurl = groupactionbaseurl

    def export_for_template(self, output: Renderer) -> Optional[dict[str, Any]]:
        """Template data for the selector, or None when groups are not in use."""
        if self.groupactionbaseurl is not None:
            logger.warning(
                "The groupactionbaseurl argument has been deprecated. "
                "Please remove it from your method calls."
            )

        platform = self.request.platform
        if self.cm is None:
            groupmode = GroupMode(self.course.groupmode)
        else:
            groupmode = platform.get_activity_groupmode(self.cm)
        if not groupmode:
            return None

        sbody = output.render_from_template("group/searchbody", {
            "courseid": self.course.id,
            "cmid": self.cm.id if self.cm else None,
            "currentvalue": optional_param(self.request.params, "groupsearchvalue", ""),
            "instance": output.random_instance(),
        })

        strings = output.strings
        if groupmode == GroupMode.VISIBLEGROUPS:
            label = strings.get_string("selectgroupsvisible")
        else:
            label = strings.get_string("selectgroupsseparate")

        buttondata: dict[str, Any] = {"label": label}
        context, activegroup = self._get_group_info(groupmode)
        buttondata["group"] = activegroup
        if activegroup:
            group = platform.get_group(activegroup)
            buttondata["selectedgroup"] = output.format_string(group.name)
        elif activegroup == 0:
            buttondata["selectedgroup"] = strings.get_string("allparticipants")

        dropdown = ComboboxSearch(
            False,
            output.render_from_template("group/group_selector", buttondata),
            sbody,
            "group-search",
            "groupsearchwidget",
            "groupsearchdropdown overflow-auto",
            None,
            True,
            label,
            "group",
            activegroup,
        )
        return dropdown.export_for_template(output)

    def _get_group_info(self, groupmode: GroupMode) -> tuple[Context, Optional[int]]:
        """Context (course or module) and the active group for the current user."""
        platform = self.request.platform
        user = self.request.user
        cm = self.cm

        if cm is None:
            context = platform.context_course(self.course.id)
            groupingid = self.course.defaultgroupingid
        else:
            context = platform.context_module(cm.id)
            groupingid = cm.groupingid

        canaccessallgroups = platform.has_capability(CAP_ACCESS_ALL_GROUPS, context, user)
        if groupmode == GroupMode.VISIBLEGROUPS or canaccessallgroups:
            allowedgroups = platform.get_all_groups(
                self.course.id, 0, groupingid, participationonly=cm is not None)
        else:
            allowedgroups = platform.get_all_groups(
                self.course.id, user.id, groupingid, participationonly=cm is not None)

        changegroup = optional_param(self.request.params, "group", -1, cast=int)
        if cm is None:
            activegroup = platform.get_course_group(
                self.course, user, self.request.session,
                update=True, allowedgroups=allowedgroups, changegroup=changegroup)
        else:
            activegroup = platform.get_activity_group(
                cm, user, self.request.session,
                update=True, allowedgroups=allowedgroups, changegroup=changegroup)
        return context, activegroup
