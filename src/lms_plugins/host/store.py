"""In-memory host data layer.

``Platform`` owns every record the plugins touch: users, courses, course
modules and their contexts, groups, quizzes with their slots, sections,
grade items and overall feedback.  It also answers capability checks and
the group-membership questions the selectors ask.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Iterable, Optional

from lms_plugins.admin.filters import FilterRegistry
from lms_plugins.admin.settings import ConfigStore
from lms_plugins.exceptions import (
    CodingError,
    RecordNotFoundError,
    RequiredCapabilityError,
)
from lms_plugins.model import ContextLevel, GroupMode
from lms_plugins.model.entities import (
    Context,
    Course,
    CourseModule,
    Group,
    Grouping,
    Quiz,
    QuizFeedback,
    QuizGradeItem,
    QuizSection,
    QuizSlot,
    User,
)

logger = logging.getLogger(__name__)

SYSTEM_CONTEXT_ID = 1


class Platform:
    """Process-local stand-in for the host application's data layer."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids: dict[str, int] = defaultdict(int)
        self.users: dict[int, User] = {}
        self.courses: dict[int, Course] = {}
        self.cms: dict[int, CourseModule] = {}
        self.contexts: dict[int, Context] = {}
        self.groups: dict[int, Group] = {}
        self.groupings: dict[int, Grouping] = {}
        self.quizzes: dict[int, Quiz] = {}
        self.sections: dict[int, QuizSection] = {}
        self.slots: dict[int, QuizSlot] = {}
        self.gradeitems: dict[int, QuizGradeItem] = {}
        self.feedbacks: dict[int, QuizFeedback] = {}
        # contextid -> userid -> capabilities granted there
        self._grants: dict[int, dict[int, set[str]]] = defaultdict(lambda: defaultdict(set))
        self._coursectx: dict[int, int] = {}
        self._modulectx: dict[int, int] = {}
        self.config = ConfigStore()
        self.filters = FilterRegistry.with_defaults()

        self.contexts[SYSTEM_CONTEXT_ID] = Context(SYSTEM_CONTEXT_ID, ContextLevel.SYSTEM, 0)
        self._ids["context"] = SYSTEM_CONTEXT_ID

    # ── id allocation ───────────────────────────────────────────────

    def next_id(self, table: str) -> int:
        with self._lock:
            self._ids[table] += 1
            return self._ids[table]

    # ── users, courses, modules, contexts ───────────────────────────

    def add_user(self, username: str, **fields: Any) -> User:
        user = User(id=self.next_id("user"), username=username, **fields)
        self.users[user.id] = user
        return user

    def add_course(self, shortname: str, **fields: Any) -> Course:
        course = Course(id=self.next_id("course"), shortname=shortname, **fields)
        self.courses[course.id] = course
        ctx = Context(self.next_id("context"), ContextLevel.COURSE, course.id, SYSTEM_CONTEXT_ID)
        self.contexts[ctx.id] = ctx
        self._coursectx[course.id] = ctx.id
        return course

    def add_cm(self, courseid: int, modname: str, instance: int, **fields: Any) -> CourseModule:
        self.get_course(courseid)
        cm = CourseModule(
            id=self.next_id("course_modules"), course=courseid,
            modname=modname, instance=instance, **fields,
        )
        self.cms[cm.id] = cm
        ctx = Context(
            self.next_id("context"), ContextLevel.MODULE, cm.id,
            self._coursectx[courseid],
        )
        self.contexts[ctx.id] = ctx
        self._modulectx[cm.id] = ctx.id
        return cm

    def get_user(self, userid: int) -> User:
        return self._get(self.users, "user", userid)

    def get_course(self, courseid: int) -> Course:
        return self._get(self.courses, "course", courseid)

    def get_cm(self, cmid: int) -> CourseModule:
        return self._get(self.cms, "course_modules", cmid)

    def get_context(self, contextid: int) -> Context:
        return self._get(self.contexts, "context", contextid)

    def context_system(self) -> Context:
        return self.contexts[SYSTEM_CONTEXT_ID]

    def context_course(self, courseid: int) -> Context:
        self.get_course(courseid)
        return self.contexts[self._coursectx[courseid]]

    def context_module(self, cmid: int) -> Context:
        self.get_cm(cmid)
        return self.contexts[self._modulectx[cmid]]

    def context_chain(self, context: Context) -> Iterable[Context]:
        """Yield *context* and then each of its parents."""
        current: Optional[Context] = context
        while current is not None:
            yield current
            current = self.contexts.get(current.parentid) if current.parentid else None

    @staticmethod
    def _get(table: dict, name: str, recordid: Any):
        try:
            return table[int(recordid)]
        except (KeyError, TypeError, ValueError):
            raise RecordNotFoundError(name, recordid) from None

    # ── capabilities ────────────────────────────────────────────────

    def assign_capability(self, userid: int, capability: str, context: Context) -> None:
        self._grants[context.id][userid].add(capability)

    def has_capability(self, capability: str, context: Context, user: User) -> bool:
        if user.siteadmin:
            return True
        return any(
            capability in self._grants[ctx.id].get(user.id, ())
            for ctx in self.context_chain(context)
        )

    def require_capability(self, capability: str, context: Context, user: User) -> None:
        if not self.has_capability(capability, context, user):
            logger.info("user %s lacks %s in context %s", user.id, capability, context.id)
            raise RequiredCapabilityError(capability, context.id)

    # ── groups ──────────────────────────────────────────────────────

    def add_group(self, courseid: int, name: str, **fields: Any) -> Group:
        self.get_course(courseid)
        group = Group(id=self.next_id("groups"), courseid=courseid, name=name, **fields)
        self.groups[group.id] = group
        return group

    def add_grouping(self, courseid: int, name: str, groupids: Iterable[int] = ()) -> Grouping:
        grouping = Grouping(self.next_id("groupings"), courseid, name, set(groupids))
        self.groupings[grouping.id] = grouping
        return grouping

    def add_member(self, groupid: int, userid: int) -> None:
        self.get_group(groupid).members.add(userid)

    def get_group(self, groupid: int) -> Group:
        return self._get(self.groups, "groups", groupid)

    def get_activity_groupmode(self, cm: CourseModule) -> GroupMode:
        """Group mode of an activity, honouring a course-level forced mode."""
        course = self.get_course(cm.course)
        if course.groupmodeforce:
            return GroupMode(course.groupmode)
        return GroupMode(cm.groupmode)

    def get_all_groups(
        self,
        courseid: int,
        userid: int = 0,
        groupingid: int = 0,
        participationonly: bool = False,
    ) -> dict[int, Group]:
        """Groups in a course keyed by id, ordered by name.

        *userid* limits the result to that user's groups, *groupingid* to the
        members of one grouping.
        """
        ingrouping = self.groupings[groupingid].groupids if groupingid in self.groupings else None
        found = [
            g for g in self.groups.values()
            if g.courseid == courseid
            and (not userid or userid in g.members)
            and (ingrouping is None or g.id in ingrouping)
            and (not participationonly or g.participation)
        ]
        found.sort(key=lambda g: (g.name.lower(), g.id))
        return {g.id: g for g in found}

    def get_activity_group(
        self,
        cm: CourseModule,
        user: User,
        session: dict,
        *,
        update: bool = False,
        allowedgroups: Optional[dict[int, Group]] = None,
        changegroup: int = -1,
    ) -> Optional[int]:
        """Resolve the active group of an activity for *user*.

        Returns ``None`` when the activity does not use groups, 0 for
        "all participants", otherwise a group id.
        """
        groupmode = self.get_activity_groupmode(cm)
        if not groupmode:
            return None
        context = self.context_module(cm.id)
        return self._active_group(
            cm.course, groupmode, cm.groupingid, context, user, session,
            update=update, allowedgroups=allowedgroups, changegroup=changegroup,
        )

    def get_course_group(
        self,
        course: Course,
        user: User,
        session: dict,
        *,
        update: bool = False,
        allowedgroups: Optional[dict[int, Group]] = None,
        changegroup: int = -1,
    ) -> Optional[int]:
        """Course-level counterpart of :meth:`get_activity_group`."""
        groupmode = GroupMode(course.groupmode)
        if not groupmode:
            return None
        context = self.context_course(course.id)
        return self._active_group(
            course.id, groupmode, course.defaultgroupingid, context, user, session,
            update=update, allowedgroups=allowedgroups, changegroup=changegroup,
        )

    def _active_group(
        self,
        courseid: int,
        groupmode: GroupMode,
        groupingid: int,
        context: Context,
        user: User,
        session: dict,
        *,
        update: bool,
        allowedgroups: Optional[dict[int, Group]],
        changegroup: int,
    ) -> int:
        seeall = (groupmode == GroupMode.VISIBLEGROUPS
                  or self.has_capability("moodle/site:accessallgroups", context, user))
        if allowedgroups is None:
            allowedgroups = self.get_all_groups(
                courseid, 0 if seeall else user.id, groupingid,
            )
        cache = (
            session.setdefault("activegroup", {})
            .setdefault(courseid, {})
            .setdefault(int(groupmode), {})
        )

        if update and changegroup >= 0:
            if changegroup == 0:
                if seeall:
                    cache[groupingid] = 0
            elif changegroup in allowedgroups:
                cache[groupingid] = changegroup

        if groupingid in cache:
            current = cache[groupingid]
            if not (current in allowedgroups or (current == 0 and seeall)):
                del cache[groupingid]

        if groupingid not in cache:
            if seeall or not allowedgroups:
                cache[groupingid] = 0
            else:
                cache[groupingid] = next(iter(allowedgroups))
        return cache[groupingid]

    # ── quizzes ─────────────────────────────────────────────────────

    def get_quiz(self, quizid: int) -> Quiz:
        return self._get(self.quizzes, "quiz", quizid)

    def get_quiz_cm(self, quizid: int) -> CourseModule:
        quiz = self.get_quiz(quizid)
        for cm in self.cms.values():
            if cm.modname == "quiz" and cm.instance == quiz.id:
                return cm
        raise CodingError(f"Quiz {quizid} is not attached to a course module.")

    def quiz_context(self, quizid: int) -> Context:
        return self.context_module(self.get_quiz_cm(quizid).id)

    def get_slot(self, slotid: int, quizid: Optional[int] = None) -> QuizSlot:
        slot = self._get(self.slots, "quiz_slots", slotid)
        if quizid is not None and slot.quizid != int(quizid):
            raise RecordNotFoundError("quiz_slots", slotid)
        return slot

    def get_section(self, sectionid: int, quizid: Optional[int] = None) -> QuizSection:
        section = self._get(self.sections, "quiz_sections", sectionid)
        if quizid is not None and section.quizid != int(quizid):
            raise RecordNotFoundError("quiz_sections", sectionid)
        return section

    def get_grade_item(self, gradeitemid: int, quizid: Optional[int] = None) -> QuizGradeItem:
        item = self._get(self.gradeitems, "quiz_grade_items", gradeitemid)
        if quizid is not None and item.quizid != int(quizid):
            raise RecordNotFoundError("quiz_grade_items", gradeitemid)
        return item

    def quiz_slots(self, quizid: int) -> list[QuizSlot]:
        return sorted((s for s in self.slots.values() if s.quizid == quizid),
                      key=lambda s: s.slot)

    def quiz_sections(self, quizid: int) -> list[QuizSection]:
        return sorted((s for s in self.sections.values() if s.quizid == quizid),
                      key=lambda s: s.firstslot)

    def quiz_grade_items(self, quizid: int) -> list[QuizGradeItem]:
        return sorted((g for g in self.gradeitems.values() if g.quizid == quizid),
                      key=lambda g: (g.sortorder, g.id))

    def grade_item_feedbacks(self, quizid: int, gradeitemid: Optional[int]) -> list[QuizFeedback]:
        """Feedback bands of a grade item, highest band first."""
        return sorted(
            (f for f in self.feedbacks.values()
             if f.quizid == quizid and f.gradeitemid == gradeitemid),
            key=lambda f: f.mingrade, reverse=True,
        )

    def get_slot_by_number(self, quizid: int, slotnumber: int) -> QuizSlot:
        for slot in self.quiz_slots(quizid):
            if slot.slot == slotnumber:
                return slot
        raise RecordNotFoundError("quiz_slots", f"quizid={quizid} slot={slotnumber}")

    def section_slots(self, section: QuizSection) -> list[QuizSlot]:
        """Slots that belong to *section* (up to the next section's first slot)."""
        sections = self.quiz_sections(section.quizid)
        index = [s.id for s in sections].index(section.id)
        upper = sections[index + 1].firstslot if index + 1 < len(sections) else None
        return [
            s for s in self.quiz_slots(section.quizid)
            if s.slot >= section.firstslot and (upper is None or s.slot < upper)
        ]

    def recompute_quiz_sumgrades(self, quizid: int) -> float:
        quiz = self.get_quiz(quizid)
        quiz.sumgrades = sum(s.maxmark for s in self.quiz_slots(quizid))
        return quiz.sumgrades
