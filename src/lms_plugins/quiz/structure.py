"""Quiz structure: grade items, slot assignments, sections, feedback bands."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from lms_plugins.exceptions import CodingError, InvalidParameterError
from lms_plugins.host.store import Platform
from lms_plugins.host.strings import StringManager
from lms_plugins.model import TextFormat
from lms_plugins.model.entities import (
    QuizFeedback,
    QuizGradeItem,
    QuizSection,
    QuizSlot,
)

logger = logging.getLogger(__name__)


def _text_format(value: Any, position: int) -> TextFormat:
    try:
        return TextFormat(int(value))
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(
            "Invalid parameter value detected",
            debuginfo=f"feedback {position}: unknown text format {value!r}",
        ) from e


class QuizStructure:
    """Read and change the grading structure of one quiz."""

    def __init__(self, platform: Platform, quizid: int, strings: Optional[StringManager] = None) -> None:
        self.platform = platform
        self.quiz = platform.get_quiz(quizid)
        self.strings = strings or StringManager()

    @property
    def quizid(self) -> int:
        return self.quiz.id

    # ── queries ─────────────────────────────────────────────────────

    def get_slots(self) -> list[QuizSlot]:
        return self.platform.quiz_slots(self.quizid)

    def get_sections(self) -> list[QuizSection]:
        return self.platform.quiz_sections(self.quizid)

    def get_grade_items(self) -> list[QuizGradeItem]:
        return self.platform.quiz_grade_items(self.quizid)

    def has_grade_items(self) -> bool:
        return bool(self.get_grade_items())

    def is_grade_item_used(self, gradeitemid: int) -> bool:
        return any(s.quizgradeitemid == gradeitemid for s in self.get_slots())

    def get_slot_by_number(self, slotnumber: int) -> QuizSlot:
        return self.platform.get_slot_by_number(self.quizid, slotnumber)

    def grade_item_max_mark(self, gradeitemid: int) -> float:
        """Sum of the marks of the slots assigned to a grade item."""
        return sum(s.maxmark for s in self.get_slots() if s.quizgradeitemid == gradeitemid)

    def grade_item_grade(self, gradeitemid: int) -> float:
        """Maximum grade used for the grade item's feedback boundaries."""
        return self.grade_item_max_mark(gradeitemid) or self.quiz.grade

    # ── grade items ─────────────────────────────────────────────────

    def _default_name(self, name: Optional[str]) -> str:
        name = (name or "").strip()
        return name or self.strings.get_string("gradeitemdefaultname", "quiz")

    def create_grade_item(self, name: str = "") -> QuizGradeItem:
        items = self.get_grade_items()
        sortorder = max((g.sortorder for g in items), default=0) + 1
        item = QuizGradeItem(
            id=self.platform.next_id("quiz_grade_items"),
            quizid=self.quizid,
            sortorder=sortorder,
            name=self._default_name(name),
        )
        self.platform.gradeitems[item.id] = item
        logger.info("quiz %s: created grade item %s (%s)", self.quizid, item.id, item.name)
        return item

    def update_grade_item(self, gradeitemid: int, name: str) -> QuizGradeItem:
        item = self.platform.get_grade_item(gradeitemid, self.quizid)
        item.name = self._default_name(name)
        return item

    def delete_grade_item(self, gradeitemid: int) -> None:
        item = self.platform.get_grade_item(gradeitemid, self.quizid)
        if self.is_grade_item_used(item.id):
            raise InvalidParameterError(
                self.strings.get_string("cannotdeletegradeitemused", "quiz", item.name))
        del self.platform.gradeitems[item.id]
        for feedback in self.platform.grade_item_feedbacks(self.quizid, item.id):
            del self.platform.feedbacks[feedback.id]
        self._renumber_grade_items()
        logger.info("quiz %s: deleted grade item %s", self.quizid, item.id)

    def _renumber_grade_items(self) -> None:
        for sortorder, item in enumerate(self.get_grade_items(), start=1):
            item.sortorder = sortorder

    def update_slot_grade_item(self, slot: QuizSlot, gradeitemid: Optional[int]) -> bool:
        """Point *slot* at a grade item (falsy id clears it).  Returns True on change."""
        newid = int(gradeitemid) if gradeitemid else None
        if newid is not None:
            self.platform.get_grade_item(newid, self.quizid)
        if slot.quizgradeitemid == newid:
            return False
        slot.quizgradeitemid = newid
        return True

    def update_slot_maxmark(self, slot: QuizSlot, maxmark: float) -> bool:
        maxmark = float(maxmark)
        if maxmark < 0:
            raise InvalidParameterError(f"Invalid maximum mark {maxmark} for slot {slot.slot}.")
        if slot.maxmark == maxmark:
            return False
        slot.maxmark = maxmark
        self.platform.recompute_quiz_sumgrades(self.quizid)
        return True

    def create_grade_item_per_section(self) -> list[QuizGradeItem]:
        """One grade item per section, named after it, with its slots assigned."""
        if self.has_grade_items():
            raise CodingError(self.strings.get_string("gradeitemsalreadyexist", "quiz"))
        created = []
        for number, section in enumerate(self.get_sections(), start=1):
            name = section.heading.strip() or self.strings.get_string("sectionnoname", "quiz", number)
            item = self.create_grade_item(name)
            for slot in self.platform.section_slots(section):
                slot.quizgradeitemid = item.id
            created.append(item)
        return created

    # ── sections ────────────────────────────────────────────────────

    def set_section_heading(self, sectionid: int, heading: str) -> QuizSection:
        section = self.platform.get_section(sectionid, self.quizid)
        section.heading = heading
        return section

    def set_section_shuffle(self, sectionid: int, shuffle: bool) -> QuizSection:
        section = self.platform.get_section(sectionid, self.quizid)
        section.shufflequestions = bool(shuffle)
        return section

    # ── overall feedback ────────────────────────────────────────────

    def get_feedbacks(self, gradeitemid: int) -> list[QuizFeedback]:
        return self.platform.grade_item_feedbacks(self.quizid, gradeitemid)

    def replace_feedbacks(
        self,
        gradeitemid: int,
        boundaries: Sequence[float],
        feedbacks: Iterable[dict[str, Any]],
    ) -> list[QuizFeedback]:
        """Store one band per feedback; band *i* spans ``[boundaries[i], boundaries[i-1])``.

        The top band ends at grade + 1 and the bottom band starts at 0.
        Every entry is checked before the stored bands are touched.
        """
        self.platform.get_grade_item(gradeitemid, self.quizid)
        grade = self.grade_item_grade(gradeitemid)

        bounds = [grade + 1, *boundaries, 0.0]
        bands = []
        for i, feedback in enumerate(feedbacks):
            if i + 1 >= len(bounds):
                raise CodingError("More feedback texts than boundaries allow.")
            bands.append((
                str(feedback.get("text") or ""),
                _text_format(feedback.get("format", TextFormat.HTML), i),
                float(bounds[i + 1]),
                float(bounds[i]),
            ))

        self.delete_feedbacks(gradeitemid)
        saved = []
        for text, textformat, mingrade, maxgrade in bands:
            record = QuizFeedback(
                id=self.platform.next_id("quiz_feedback"),
                quizid=self.quizid,
                gradeitemid=gradeitemid,
                feedbacktext=text,
                feedbacktextformat=textformat,
                mingrade=mingrade,
                maxgrade=maxgrade,
            )
            self.platform.feedbacks[record.id] = record
            saved.append(record)
        return saved

    def delete_feedbacks(self, gradeitemid: int) -> None:
        for old in self.get_feedbacks(gradeitemid):
            del self.platform.feedbacks[old.id]
