"""Tests for the report action bar: initials filter, user search, groups, navigation."""

import pytest

from lms_plugins.host.renderer import Page
from lms_plugins.host.session import set_initials_filter
from lms_plugins.model import GroupMode
from lms_plugins.output.report_action_bar import REPORT_SLUG, NavigationMenu, ReportActionBar


@pytest.fixture
def bar_for(quiz_site, make_request, platform):
    def _make(user=None, cm=quiz_site.cm, menus=None, **params):
        request = make_request(user or quiz_site.teacher, **params)
        return ReportActionBar(request, quiz_site.course.id, Page(), "overview", cm, menus)
    return _make


class TestInitialsSelector:
    def test_no_filter(self, bar_for, output):
        bar = bar_for()
        content = bar.get_content_for_initial_bar(output)
        assert content.buttoncontent == "Filter by name"
        assert content.buttonheader is None
        assert content.parentclasses == "initials-selector"
        assert 'data-current=""' in content.dropdowncontent

    def test_first_initial_active(self, bar_for, output):
        bar = bar_for()
        set_initials_filter(bar.request.session, "overview", bar.context.id, first="A")
        content = bar.get_content_for_initial_bar(output)
        assert content.buttoncontent == "First (A)"
        assert content.buttonheader == "Name"
        assert 'data-current="A"' in content.dropdowncontent

    def test_last_initial_active(self, bar_for, output):
        bar = bar_for()
        set_initials_filter(bar.request.session, "overview", bar.context.id, last="Z")
        assert bar.get_content_for_initial_bar(output).buttoncontent == "Last (Z)"

    def test_both_initials_active(self, bar_for, output):
        bar = bar_for()
        set_initials_filter(bar.request.session, "overview", bar.context.id, first="A", last="B")
        assert bar.get_content_for_initial_bar(output).buttoncontent == "First (A) Last (B)"

    def test_filters_are_per_context(self, bar_for, output, platform, quiz_site):
        bar = bar_for()
        course_ctx = platform.context_course(quiz_site.course.id)
        set_initials_filter(bar.request.session, "overview", course_ctx.id, first="A")
        assert bar.get_content_for_initial_bar(output).buttoncontent == "Filter by name"

    def test_registers_client_module(self, bar_for, output, quiz_site):
        bar = bar_for(gpr_search="sam", gpr_userid="7")
        bar.get_content_for_initial_bar(output)
        assert bar.page.requires.amd_calls == [{
            "module": "core_grades/searchwidget/initials",
            "function": "init",
            "args": [REPORT_SLUG, 7, "sam", {}],
        }]


class TestUserSearch:
    def test_renders_later_without_button(self, bar_for, output, quiz_site):
        data = bar_for(gpr_search="<i>Sam</i>").search_user(output).export_for_template(output)
        assert data["rendercontentlater"] is True
        assert data["usebutton"] is False
        assert data["dropdowncontent"] is None
        assert 'value="Sam"' in data["buttoncontent"]
        assert f"{REPORT_SLUG}?id={quiz_site.cm.id}" in data["buttoncontent"]

    def test_course_level_reset_link(self, bar_for, output, quiz_site):
        data = bar_for(cm=None).search_user(output).export_for_template(output)
        assert f"{REPORT_SLUG}?id={quiz_site.course.id}" in data["buttoncontent"]


class TestGroupSelector:
    def test_none_without_module(self, bar_for, output):
        assert bar_for(cm=None).group_selector(output) is None

    def test_none_without_group_mode(self, bar_for, output):
        assert bar_for().group_selector(output) is None

    def test_present_for_grouped_activity(self, gen, quiz_site, make_request, output):
        group = gen.create_group(quiz_site.course, "Red", members=[quiz_site.student])
        quiz_site.cm.groupmode = GroupMode.SEPARATEGROUPS
        request = make_request(quiz_site.student)
        bar = ReportActionBar(request, quiz_site.course.id, Page(), "overview", quiz_site.cm, None)
        selector = bar.group_selector(output)
        assert selector.dropdownclasses == "groupsearchdropdown overflow-auto w-100"
        assert "Red" in selector.buttoncontent
        assert f'data-group="{group.id}"' in selector.buttoncontent


class TestExport:
    def test_navigation_menu_is_flattened(self, bar_for, output):
        menus = NavigationMenu(options=[("/a", "A"), ("/b", "B")], selected="/b", label="Reports")
        data = bar_for(menus=menus).export_for_template(output)
        assert data["generalnavselector"]["label"] == "Reports"
        assert [o["selected"] for o in data["generalnavselector"]["options"]] == [False, True]
        assert "groupselector" not in data
        assert set(data) == {"generalnavselector", "initialselector", "usersearch"}

    def test_no_menus(self, bar_for, output):
        assert bar_for().export_for_template(output)["generalnavselector"] == {}

    def test_course_context_without_module(self, bar_for, platform, quiz_site):
        assert bar_for(cm=None).context == platform.context_course(quiz_site.course.id)
