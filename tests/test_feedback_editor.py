"""Tests for the overall feedback modal state and the fragments that feed it."""

import pytest

from lms_plugins.exceptions import InvalidParameterError, RequiredCapabilityError
from lms_plugins.model.entities import QuizFeedback
from lms_plugins.quiz import QuizStructure
from lms_plugins.quiz.feedback_editor import (
    Editor,
    FeedbackEditor,
    feedback_summary,
    parse_feedback_items,
)
from lms_plugins.quiz.feedback_form import OverallFeedbackForm
from lms_plugins.quiz.fragments import FRAGMENTS


def two_band_form(strings):
    feedbacks = [
        QuizFeedback(id=1, quizid=1, gradeitemid=5, feedbacktext="Top", mingrade=5, maxgrade=11),
        QuizFeedback(id=2, quizid=1, gradeitemid=5, feedbacktext="Low", mingrade=0, maxgrade=5),
    ]
    form = OverallFeedbackForm({"context": None, "feedbacks": feedbacks, "gradeItemId": 5, "grade": 10.0},
                               strings)
    form.set_data({"grade": 10.0})
    return form


@pytest.fixture
def modal(strings):
    return FeedbackEditor.from_form(two_band_form(strings), quizid=1, contextid=9)


class TestBuild:
    def test_from_form(self, modal):
        assert modal.gradeitemid == 5
        assert (modal.top.editorno, modal.top.text, modal.top.itemid) == (0, "Top", 1)
        assert len(modal.rows) == 1
        row = modal.rows[0]
        assert (row.index, row.boundary, row.editor.editorno, row.editor.text) == (0, "50%", 1, "Low")

    def test_from_html_matches_from_form(self, strings, output, modal):
        html = two_band_form(strings).render(output)
        parsed = FeedbackEditor.from_html(html, 1, 5, 9, strings)
        assert parsed.top == modal.top
        assert parsed.rows == modal.rows

    def test_parse_fragment_block(self, strings, output):
        html = output.render_from_template("quiz/feedback_block", {"elements": []})
        assert parse_feedback_items(html) == []

    def test_row_ids(self, modal):
        row = modal.rows[0]
        assert row.name == "feedbackboundaries[0]"
        assert row.input_id == "id_feedbackboundaries_0"
        assert row.label_id == "id_feedbackboundaries_0_label"
        assert row.fitem_id == "fitem_id_feedbackboundaries_0"
        assert row.error_id == "id_error_feedbackboundaries_0"


class TestRows:
    def test_insert_renumbers_following_rows(self, modal):
        old = modal.rows[0]
        new = modal.insert_after(0)
        assert new.editor.editorno == 2
        assert modal.rows == [new, old]
        assert (new.index, old.index) == (0, 1)
        assert old.name == "feedbackboundaries[1]"
        assert modal.editor_count == 3

    def test_insert_at_end(self, modal):
        new = modal.insert_after(1, Editor(7, text="given"))
        assert modal.rows[-1] is new
        assert new.index == 1
        assert new.editor.text == "given"

    @pytest.mark.parametrize("after", [-1, 2])
    def test_insert_out_of_range(self, modal, after):
        with pytest.raises(IndexError):
            modal.insert_after(after)

    def test_remove_renumbers(self, modal):
        modal.insert_after(0)
        modal.insert_after(0)
        removed = modal.remove(0)
        assert removed.editor.editorno == 3
        assert [r.index for r in modal.rows] == [0, 1]
        assert [r.editor.editorno for r in modal.rows] == [2, 1]

    def test_dividers(self, modal):
        labels = [d.label for d in modal.dividers]
        assert labels == ["Add overall feedback after position 0",
                          "Add overall feedback after position 1"]


class TestSave:
    def test_collect_form_data(self, modal):
        modal.insert_after(1)
        modal.rows[1].boundary = "20%"
        modal.rows[1].editor.text = "Very low"
        assert modal.collect_form_data() == [
            {"boundary": "100%", "feedback": {"itemid": 1, "format": 1, "text": "Top"}},
            {"boundary": "50%", "feedback": {"itemid": 2, "format": 1, "text": "Low"}},
            {"boundary": "20%", "feedback": {"itemid": 0, "format": 1, "text": "Very low"}},
        ]

    def test_apply_errors_marks_and_clears(self, modal):
        modal.insert_after(1)
        assert modal.apply_errors({"feedbackboundaries[0]": "bad", "feedbacktext[2]": "junk"}) is False
        assert modal.rows[0].error == "bad"
        assert modal.rows[1].editor.error == "junk"
        assert modal.apply_errors({}) is True
        assert modal.rows[0].error == ""
        assert modal.rows[1].editor.error == ""

    def test_open_close(self, modal):
        assert modal.footer_disabled
        modal.open()
        assert modal.is_open and not modal.footer_disabled
        modal.close()
        assert not modal.is_open


class TestSummary:
    @pytest.mark.parametrize("total,key,level", [
        (0, "t/add", "-"),
        (1, "t/edit", "1 level"),
        (4, "t/edit", "4 levels"),
    ])
    def test_summary(self, strings, total, key, level):
        summary = feedback_summary(total, strings)
        assert (summary.key, summary.level_label) == (key, level)

    def test_titles(self, strings):
        assert feedback_summary(0, strings).title == "Add overall feedback"
        assert feedback_summary(2, strings).title == "Edit overall feedback (2 levels)"


# ============================================================================
# Fragments
# ============================================================================

class TestFragments:
    @pytest.fixture
    def item(self, gen, quiz_site):
        return gen.create_grade_item(quiz_site.quiz, "Listening", quiz_site.slots[:2])

    def _context(self, platform, quiz_site):
        return platform.context_module(quiz_site.cm.id)

    def test_load_data_renders_stored_bands(self, platform, make_request, output, quiz_site, item):
        QuizStructure(platform, quiz_site.quiz.id).replace_feedbacks(
            item.id, [1.0], [{"text": "Good"}, {"text": "Try again"}])
        load = FRAGMENTS[("mod_quiz", "load_overall_feedback_data")]
        html = load(make_request(quiz_site.teacher), output, self._context(platform, quiz_site),
                    {"quizId": quiz_site.quiz.id, "gradeItemId": item.id})
        parsed = FeedbackEditor.from_html(html, quiz_site.quiz.id, item.id, 0)
        assert parsed.top.text == "Good"
        assert [(r.boundary, r.editor.text) for r in parsed.rows] == [("50%", "Try again")]

    def test_load_data_checks_quiz(self, platform, gen, make_request, output, quiz_site, item):
        other, _ = gen.create_quiz(quiz_site.course)
        load = FRAGMENTS[("mod_quiz", "load_overall_feedback_data")]
        with pytest.raises(InvalidParameterError):
            load(make_request(quiz_site.teacher), output, self._context(platform, quiz_site),
                 {"quizId": other.id, "gradeItemId": item.id})

    def test_load_data_requires_manage(self, platform, make_request, output, quiz_site, item):
        load = FRAGMENTS[("mod_quiz", "load_overall_feedback_data")]
        with pytest.raises(RequiredCapabilityError):
            load(make_request(quiz_site.student), output, self._context(platform, quiz_site),
                 {"quizId": quiz_site.quiz.id, "gradeItemId": item.id})

    def test_load_block(self, platform, make_request, output, quiz_site, item):
        load = FRAGMENTS[("mod_quiz", "load_overall_feedback_form")]
        html = load(make_request(quiz_site.teacher), output, self._context(platform, quiz_site),
                    {"after": 1, "no": 3, "gradeitemid": item.id})
        assert 'name="feedbackboundaries[1]"' in html
        assert f'name="feedbacktext[3][{item.id}][text]"' in html
        assert 'data-after="2"' in html
        [(boundary, editor)] = parse_feedback_items(html)
        assert (boundary, editor.editorno, editor.text) == ("", 3, "")

    def test_load_block_bad_argument(self, platform, make_request, output, quiz_site, item):
        load = FRAGMENTS[("mod_quiz", "load_overall_feedback_form")]
        with pytest.raises(InvalidParameterError):
            load(make_request(quiz_site.teacher), output, self._context(platform, quiz_site),
                 {"after": "x", "no": 3, "gradeitemid": item.id})
