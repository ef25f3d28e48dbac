"""Test data generator for the in-memory platform.

Builds courses, users, groups and quizzes with sensible defaults so tests
and seeded sites only spell out what they care about.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from lms_plugins.host.store import Platform
from lms_plugins.model import CAP_QUIZ_MANAGE, CAP_QUIZ_VIEW_REPORTS, GroupMode
from lms_plugins.model.entities import (
    Course,
    CourseModule,
    Group,
    Grouping,
    Quiz,
    QuizGradeItem,
    QuizSection,
    QuizSlot,
    User,
)

# Capabilities an editing teacher gets in their course.
TEACHER_CAPABILITIES = (CAP_QUIZ_MANAGE, CAP_QUIZ_VIEW_REPORTS)


class DataGenerator:
    def __init__(self, platform: Platform) -> None:
        self.platform = platform
        self._counts: dict[str, int] = {}

    def _next(self, kind: str) -> int:
        self._counts[kind] = self._counts.get(kind, 0) + 1
        return self._counts[kind]

    # ── people and courses ──────────────────────────────────────────

    def create_user(self, username: Optional[str] = None, **fields: Any) -> User:
        n = self._next("user")
        fields.setdefault("firstname", f"Firstname{n}")
        fields.setdefault("lastname", f"Lastname{n}")
        return self.platform.add_user(username or f"username{n}", **fields)

    def create_course(self, shortname: Optional[str] = None, **fields: Any) -> Course:
        n = self._next("course")
        fields.setdefault("fullname", f"Test course {n}")
        if "groupmode" in fields:
            fields["groupmode"] = GroupMode(fields["groupmode"])
        return self.platform.add_course(shortname or f"tc_{n}", **fields)

    def enrol_teacher(self, user: User, course: Course) -> None:
        context = self.platform.context_course(course.id)
        for capability in TEACHER_CAPABILITIES:
            self.platform.assign_capability(user.id, capability, context)

    def create_group(self, course: Course, name: Optional[str] = None,
                     members: Iterable[User] = (), **fields: Any) -> Group:
        group = self.platform.add_group(course.id, name or f"Group {self._next('group')}", **fields)
        for user in members:
            self.platform.add_member(group.id, user.id)
        return group

    def create_grouping(self, course: Course, name: Optional[str] = None,
                        groups: Iterable[Group] = ()) -> Grouping:
        return self.platform.add_grouping(
            course.id, name or f"Grouping {self._next('grouping')}", [g.id for g in groups])

    # ── quizzes ─────────────────────────────────────────────────────

    def create_quiz(self, course: Course, name: Optional[str] = None, *, grade: float = 10.0,
                    groupmode: int = GroupMode.NOGROUPS, groupingid: int = 0) -> tuple[Quiz, CourseModule]:
        """A quiz, its course module and its first (untitled) section."""
        platform = self.platform
        quiz = Quiz(
            id=platform.next_id("quiz"),
            course=course.id,
            name=name or f"Quiz {self._next('quiz')}",
            grade=float(grade),
        )
        platform.quizzes[quiz.id] = quiz
        cm = platform.add_cm(course.id, "quiz", quiz.id,
                             groupmode=GroupMode(groupmode), groupingid=groupingid)
        self.create_section(quiz, 1)
        return quiz, cm

    def add_question(self, quiz: Quiz, name: Optional[str] = None, *,
                     maxmark: float = 1.0, page: Optional[int] = None) -> QuizSlot:
        platform = self.platform
        slots = platform.quiz_slots(quiz.id)
        number = len(slots) + 1
        slot = QuizSlot(
            id=platform.next_id("quiz_slots"),
            quizid=quiz.id,
            slot=number,
            page=page or (slots[-1].page if slots else 1),
            maxmark=float(maxmark),
            questionname=name or f"Question {number}",
        )
        platform.slots[slot.id] = slot
        platform.recompute_quiz_sumgrades(quiz.id)
        return slot

    def create_section(self, quiz: Quiz, firstslot: int, heading: str = "",
                       shufflequestions: bool = False) -> QuizSection:
        """Start a section at *firstslot*; a section already starting there is updated."""
        platform = self.platform
        for section in platform.quiz_sections(quiz.id):
            if section.firstslot == firstslot:
                section.heading = heading
                section.shufflequestions = shufflequestions
                return section
        section = QuizSection(
            id=platform.next_id("quiz_sections"),
            quizid=quiz.id,
            firstslot=firstslot,
            heading=heading,
            shufflequestions=shufflequestions,
        )
        platform.sections[section.id] = section
        return section

    def create_grade_item(self, quiz: Quiz, name: str, slots: Iterable[QuizSlot] = ()) -> QuizGradeItem:
        platform = self.platform
        sortorder = len(platform.quiz_grade_items(quiz.id)) + 1
        item = QuizGradeItem(platform.next_id("quiz_grade_items"), quiz.id, sortorder, name)
        platform.gradeitems[item.id] = item
        for slot in slots:
            slot.quizgradeitemid = item.id
        return item
