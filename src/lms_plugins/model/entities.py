"""Thin host records.

These mirror the rows the host data layer stores.  Nothing here owns any
behaviour beyond simple serialisation; the plugins read them and hand
changes back to :class:`lms_plugins.host.store.Platform`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from . import ContextLevel, GroupMode, TextFormat


@dataclass
class Context:
    id: int
    contextlevel: ContextLevel
    instanceid: int
    parentid: Optional[int] = None


@dataclass
class User:
    id: int
    username: str
    firstname: str = ""
    lastname: str = ""
    siteadmin: bool = False

    @property
    def fullname(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()


@dataclass
class Course:
    id: int
    shortname: str
    fullname: str = ""
    groupmode: GroupMode = GroupMode.NOGROUPS
    groupmodeforce: bool = False
    defaultgroupingid: int = 0


@dataclass
class CourseModule:
    """A course module (activity) record."""

    id: int
    course: int
    modname: str
    instance: int
    groupmode: GroupMode = GroupMode.NOGROUPS
    groupingid: int = 0


@dataclass
class Group:
    id: int
    courseid: int
    name: str
    participation: bool = True
    members: set[int] = field(default_factory=set)


@dataclass
class Grouping:
    id: int
    courseid: int
    name: str
    groupids: set[int] = field(default_factory=set)


@dataclass
class Quiz:
    id: int
    course: int
    name: str
    grade: float = 10.0
    sumgrades: float = 0.0


@dataclass
class QuizSection:
    id: int
    quizid: int
    firstslot: int
    heading: str = ""
    shufflequestions: bool = False


@dataclass
class QuizSlot:
    """A question placed in a quiz."""

    id: int
    quizid: int
    slot: int
    page: int = 1
    maxmark: float = 1.0
    questionname: str = ""
    quizgradeitemid: Optional[int] = None
    displaynumber: Optional[str] = None


@dataclass
class QuizGradeItem:
    id: int
    quizid: int
    sortorder: int
    name: str


@dataclass
class QuizFeedback:
    """One overall-feedback band of a grade item.

    The band applies to marks in ``[mingrade, maxgrade)``.
    """

    id: int
    quizid: int
    gradeitemid: Optional[int]
    feedbacktext: str = ""
    feedbacktextformat: TextFormat = TextFormat.HTML
    mingrade: float = 0.0
    maxgrade: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["feedbacktextformat"] = int(self.feedbacktextformat)
        return d
