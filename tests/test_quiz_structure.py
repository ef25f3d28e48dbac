"""Tests for QuizStructure: grade items, slot assignments and feedback bands."""

import pytest

from lms_plugins.exceptions import CodingError, InvalidParameterError, RecordNotFoundError
from lms_plugins.quiz import QuizStructure


@pytest.fixture
def structure(platform, quiz_site, strings):
    return QuizStructure(platform, quiz_site.quiz.id, strings)


class TestGradeItems:
    def test_create_uses_default_name_for_blank(self, structure):
        item = structure.create_grade_item("   ")
        assert item.name == "New grade item"
        assert item.sortorder == 1
        assert structure.has_grade_items()

    def test_sortorder_increments(self, structure):
        first = structure.create_grade_item("A")
        second = structure.create_grade_item("B")
        assert (first.sortorder, second.sortorder) == (1, 2)
        assert [g.name for g in structure.get_grade_items()] == ["A", "B"]

    def test_update_name(self, structure):
        item = structure.create_grade_item("Old")
        structure.update_grade_item(item.id, " New ")
        assert item.name == "New"
        structure.update_grade_item(item.id, "")
        assert item.name == "New grade item"

    def test_update_item_of_other_quiz(self, structure, gen, quiz_site):
        other, _ = gen.create_quiz(quiz_site.course, "Other")
        foreign = QuizStructure(structure.platform, other.id).create_grade_item("X")
        with pytest.raises(RecordNotFoundError):
            structure.update_grade_item(foreign.id, "Y")

    def test_delete_renumbers(self, structure):
        a = structure.create_grade_item("A")
        b = structure.create_grade_item("B")
        c = structure.create_grade_item("C")
        structure.delete_grade_item(a.id)
        assert [(g.id, g.sortorder) for g in structure.get_grade_items()] == [(b.id, 1), (c.id, 2)]

    def test_delete_used_item_is_refused(self, structure, quiz_site):
        item = structure.create_grade_item("Used")
        structure.update_slot_grade_item(quiz_site.slots[0], item.id)
        with pytest.raises(InvalidParameterError, match="Used"):
            structure.delete_grade_item(item.id)

    def test_delete_removes_feedback(self, structure, platform):
        item = structure.create_grade_item("A")
        structure.replace_feedbacks(item.id, [5.0], [{"text": "hi"}, {"text": "lo"}])
        structure.delete_grade_item(item.id)
        assert platform.feedbacks == {}


class TestSlots:
    def test_assign_and_clear(self, structure, quiz_site):
        item = structure.create_grade_item("A")
        slot = quiz_site.slots[1]
        assert structure.update_slot_grade_item(slot, item.id) is True
        assert structure.update_slot_grade_item(slot, item.id) is False
        assert structure.is_grade_item_used(item.id)
        assert structure.update_slot_grade_item(slot, 0) is True
        assert slot.quizgradeitemid is None

    def test_assign_unknown_item(self, structure, quiz_site):
        with pytest.raises(RecordNotFoundError):
            structure.update_slot_grade_item(quiz_site.slots[0], 9999)

    def test_maxmark_updates_sumgrades(self, structure, quiz_site):
        assert structure.update_slot_maxmark(quiz_site.slots[0], 3) is True
        assert quiz_site.quiz.sumgrades == 6.0
        assert structure.update_slot_maxmark(quiz_site.slots[0], 3.0) is False

    def test_negative_maxmark(self, structure, quiz_site):
        with pytest.raises(InvalidParameterError):
            structure.update_slot_maxmark(quiz_site.slots[0], -1)

    def test_grade_item_grade_falls_back_to_quiz_grade(self, structure, quiz_site):
        item = structure.create_grade_item("A")
        assert structure.grade_item_grade(item.id) == 10.0
        structure.update_slot_grade_item(quiz_site.slots[0], item.id)
        structure.update_slot_grade_item(quiz_site.slots[1], item.id)
        assert structure.grade_item_max_mark(item.id) == 2.0
        assert structure.grade_item_grade(item.id) == 2.0

    def test_get_slot_by_number(self, structure, quiz_site):
        assert structure.get_slot_by_number(3) is quiz_site.slots[2]
        with pytest.raises(RecordNotFoundError):
            structure.get_slot_by_number(9)


class TestPerSection:
    def test_one_item_per_section(self, structure, gen, quiz_site):
        gen.create_section(quiz_site.quiz, 1, "Listening")
        gen.create_section(quiz_site.quiz, 3, "")
        items = structure.create_grade_item_per_section()
        assert [i.name for i in items] == ["Listening", "Section 2"]
        assert [s.quizgradeitemid for s in quiz_site.slots] == [items[0].id] * 2 + [items[1].id] * 2

    def test_refused_when_items_exist(self, structure):
        structure.create_grade_item("A")
        with pytest.raises(CodingError):
            structure.create_grade_item_per_section()


class TestSections:
    def test_heading_and_shuffle(self, structure, platform, quiz_site):
        section = structure.get_sections()[0]
        structure.set_section_heading(section.id, "Part A")
        structure.set_section_shuffle(section.id, 1)
        assert (section.heading, section.shufflequestions) == ("Part A", True)

    def test_section_of_other_quiz(self, structure, gen, quiz_site):
        other, _ = gen.create_quiz(quiz_site.course)
        section = QuizStructure(structure.platform, other.id).get_sections()[0]
        with pytest.raises(RecordNotFoundError):
            structure.set_section_heading(section.id, "x")


class TestFeedbackBands:
    def test_bands_span_boundaries(self, structure):
        item = structure.create_grade_item("A")
        saved = structure.replace_feedbacks(item.id, [7.0, 3.0],
                                            [{"text": "top"}, {"text": "mid"}, {"text": "low"}])
        assert [(f.feedbacktext, f.mingrade, f.maxgrade) for f in saved] == [
            ("top", 7.0, 11.0), ("mid", 3.0, 7.0), ("low", 0.0, 3.0),
        ]
        assert [f.feedbacktext for f in structure.get_feedbacks(item.id)] == ["top", "mid", "low"]

    def test_replace_discards_previous_bands(self, structure, platform):
        item = structure.create_grade_item("A")
        structure.replace_feedbacks(item.id, [5.0], [{"text": "a"}, {"text": "b"}])
        structure.replace_feedbacks(item.id, [], [{"text": "only"}])
        assert [(f.feedbacktext, f.mingrade) for f in structure.get_feedbacks(item.id)] == [("only", 0.0)]
        assert len(platform.feedbacks) == 1

    def test_too_many_texts(self, structure):
        item = structure.create_grade_item("A")
        with pytest.raises(CodingError):
            structure.replace_feedbacks(item.id, [], [{"text": "a"}, {"text": "b"}])

    def test_delete_feedbacks(self, structure):
        item = structure.create_grade_item("A")
        structure.replace_feedbacks(item.id, [], [{"text": "x"}])
        structure.delete_feedbacks(item.id)
        assert structure.get_feedbacks(item.id) == []
