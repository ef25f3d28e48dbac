"""Tests for the section title and shuffle services on a two-section quiz."""

import json

import pytest

from lms_plugins.exceptions import (
    CodingError,
    InvalidParameterError,
    RecordNotFoundError,
    RequiredCapabilityError,
)
from lms_plugins.services import call_service


@pytest.fixture
def sectioned(gen, quiz_site):
    """Quiz 1 split into Listening (Q1, Q2) and Reading (Q3, Q4), one grade item each."""
    quiz = quiz_site.quiz
    listening = gen.create_section(quiz, 1, "Listening")
    reading = gen.create_section(quiz, 3, "Reading", shufflequestions=True)
    gen.create_grade_item(quiz, "Listening", quiz_site.slots[:2])
    gen.create_grade_item(quiz, "Reading", quiz_site.slots[2:])
    return listening, reading


@pytest.fixture
def call(make_request, output, quiz_site):
    def _call(methodname, user=None, **args):
        request = make_request(user or quiz_site.teacher)
        return call_service(request, output, methodname, args)
    return _call


class TestSectionTitle:
    def test_get_title(self, call, sectioned, quiz_site):
        listening, _ = sectioned
        assert call("mod_quiz_get_section_title", id=listening.id, quizid=quiz_site.quiz.id) == {
            "instancesection": "Listening",
        }

    def test_update_title_strips_tags(self, call, sectioned, quiz_site):
        _, reading = sectioned
        result = call("mod_quiz_update_section_title", id=reading.id, quizid=quiz_site.quiz.id,
                      newheading="<b>Reading</b> <i>part</i>")
        assert result == {"instancesection": "Reading part"}
        assert reading.heading == "Reading part"

    def test_section_from_other_quiz(self, call, gen, quiz_site):
        other, _ = gen.create_quiz(quiz_site.course)
        section = gen.create_section(other, 1, "Elsewhere")
        with pytest.raises(RecordNotFoundError):
            call("mod_quiz_get_section_title", id=section.id, quizid=quiz_site.quiz.id)

    def test_student_cannot_rename(self, call, sectioned, quiz_site):
        listening, _ = sectioned
        with pytest.raises(RequiredCapabilityError):
            call("mod_quiz_update_section_title", user=quiz_site.student, id=listening.id,
                 quizid=quiz_site.quiz.id, newheading="Hacked")
        assert listening.heading == "Listening"


class TestShuffle:
    @pytest.mark.parametrize("value,expected", [(1, "1"), (True, "1"), ("1", "1"),
                                                (0, "0"), (False, "0"), ("0", "0")])
    def test_accepted_values(self, call, sectioned, quiz_site, value, expected):
        listening, _ = sectioned
        result = call("mod_quiz_update_shuffle_questions", id=listening.id,
                      quizid=quiz_site.quiz.id, newshuffle=value)
        assert result == {"instancesection": expected}
        assert listening.shufflequestions is (expected == "1")

    @pytest.mark.parametrize("value", [2, "yes", None])
    def test_rejected_values(self, call, sectioned, quiz_site, value):
        _, reading = sectioned
        with pytest.raises(InvalidParameterError):
            call("mod_quiz_update_shuffle_questions", id=reading.id,
                 quizid=quiz_site.quiz.id, newshuffle=value)
        assert reading.shufflequestions is True


class TestSectionedGradingPage:
    def test_page_reports_multiple_sections(self, call, sectioned, quiz_site):
        data = json.loads(call("mod_quiz_get_edit_grading_page_data", quizid=quiz_site.quiz.id))
        assert data["hasmultiplesections"] is True
        assert [g["rawname"] for g in data["gradeitems"]] == ["Listening", "Reading"]
        assert [g["summarks"] for g in data["gradeitems"]] == [2.0, 2.0]
        assert all(not g["candelete"] for g in data["gradeitems"])

    def test_reset_then_auto_setup(self, call, sectioned, platform, quiz_site):
        quizid = quiz_site.quiz.id
        items = platform.quiz_grade_items(quizid)
        call("mod_quiz_update_slots", quizid=quizid,
             slots=[{"id": s.id, "quizgradeitemid": 0} for s in quiz_site.slots])
        call("mod_quiz_delete_grade_items", quizid=quizid,
             quizgradeitems=[{"id": g.id} for g in items])
        assert platform.quiz_grade_items(quizid) == []

        call("mod_quiz_create_grade_item_per_section", quizid=quizid)
        names = [g.name for g in platform.quiz_grade_items(quizid)]
        assert names == ["Listening", "Reading"]

    def test_auto_setup_refused_with_items(self, call, sectioned, quiz_site):
        with pytest.raises(CodingError):
            call("mod_quiz_create_grade_item_per_section", quizid=quiz_site.quiz.id)
