"""Tests for the overall feedback form: definition, defaults and rendering."""

from lms_plugins.model import TextFormat
from lms_plugins.model.entities import QuizFeedback
from lms_plugins.quiz.feedback_form import OverallFeedbackForm


def band(id, mingrade, maxgrade, text="", gradeitemid=5):
    return QuizFeedback(id=id, quizid=1, gradeitemid=gradeitemid, feedbacktext=text,
                        feedbacktextformat=TextFormat.HTML, mingrade=mingrade, maxgrade=maxgrade)


def make_form(strings, feedbacks, grade=10.0):
    return OverallFeedbackForm(
        {"context": None, "feedbacks": feedbacks, "gradeItemId": 5, "grade": grade}, strings)


class TestDefinition:
    """Element layout: 100% static, top editor, one row per stored band, 0% static."""

    def test_no_feedback_has_only_the_top_editor(self, strings):
        form = make_form(strings, [])
        assert [(e.type, e.name) for e in form.elements] == [
            ("static", "gradeboundarystatic1"),
            ("editor", "feedbacktext[0][5]"),
            ("html", "divider_0"),
            ("static", "gradeboundarystatic2"),
        ]

    def test_top_band_gets_no_boundary_row(self, strings):
        form = make_form(strings, [band(1, 5, 11), band(2, 0, 5)])
        names = [e.name for e in form.elements]
        assert names == [
            "gradeboundarystatic1", "feedbacktext[0][5]", "divider_0",
            "feedbackboundaries[0]", "feedbacktext[1][5]", "divider_1",
            "gradeboundarystatic2",
        ]

    def test_dividers_carry_their_position(self, strings):
        form = make_form(strings, [band(1, 7, 11), band(2, 3, 7), band(3, 0, 3)])
        dividers = [e.attributes["afterindex"] for e in form.elements if e.type == "html"]
        assert dividers == [0, 1, 2]

    def test_static_values(self, strings):
        form = make_form(strings, [])
        assert form.elements[0].value == "100%"
        assert form.elements[-1].value == "0%"
        assert form.elements[0].label == "Grade boundary"


class TestDataPreprocessing:
    def test_fills_editors_and_boundaries(self, strings):
        form = make_form(strings, [band(1, 5, 11, "Top"), band(2, 0, 5, "Bottom")])
        toform = {"grade": 10.0}
        form.data_preprocessing(toform)
        assert toform["feedbacktext[0][5]"] == {"text": "Top", "format": 1, "itemid": 1}
        assert toform["feedbacktext[1][5]"] == {"text": "Bottom", "format": 1, "itemid": 2}
        assert toform["feedbackboundaries[0]"] == "50%"
        assert "feedbackboundaries[1]" not in toform

    def test_missing_top_band_is_prepended_blank(self, strings):
        form = make_form(strings, [band(4, 5, 8, "Middle"), band(5, 0, 5, "Low")])
        toform = {"grade": 10.0}
        form.data_preprocessing(toform)
        assert toform["feedbacktext[0][5]"]["text"] == ""
        assert toform["feedbacktext[0][5]"]["itemid"] == 3
        assert toform["feedbackboundaries[0]"] == "80%"
        assert toform["feedbacktext[1][5]"]["text"] == "Middle"
        assert toform["feedbackboundaries[1]"] == "50%"

    def test_fractional_percentages(self, strings):
        form = make_form(strings, [band(1, 1, 4), band(2, 0, 1)], grade=3.0)
        toform = {"grade": 3.0}
        form.data_preprocessing(toform)
        assert toform["feedbackboundaries[0]"] == "33.333333%"

    def test_no_feedback_leaves_values_alone(self, strings):
        form = make_form(strings, [])
        toform = {"grade": 10.0}
        form.data_preprocessing(toform)
        assert toform == {"grade": 10.0}

    def test_set_data_updates_elements(self, strings):
        form = make_form(strings, [band(1, 5, 11, "Top"), band(2, 0, 5)])
        form.set_data({"grade": 10.0})
        values = {e.name: e.value for e in form.elements}
        assert values["feedbackboundaries[0]"] == "50%"
        assert values["feedbacktext[0][5]"]["text"] == "Top"
        assert form.get_data()["grade"] == 10.0


class TestRender:
    def test_render_contains_fields_and_footer(self, strings, output):
        form = make_form(strings, [band(1, 5, 11, "<b>Top</b>"), band(2, 0, 5)])
        form.set_data({"grade": 10.0})
        html = form.render(output)
        assert 'name="feedbackboundaries[0]"' in html
        assert 'value="50%"' in html
        assert 'name="feedbacktext[0][5][text]"' in html
        assert "&lt;b&gt;Top&lt;/b&gt;" in html
        assert 'data-action="save"' in html
        assert 'data-action="cancel"' in html
        assert 'data-after="1"' in html

    def test_render_shows_errors(self, strings, output):
        form = make_form(strings, [band(1, 5, 11), band(2, 0, 5)])
        html = form.render(output, {"feedbackboundaries[0]": "Bad boundary"})
        assert 'id="id_error_feedbackboundaries_0"' in html
        assert "invalid-feedback d-block" in html
        assert "Bad boundary" in html

    def test_divider_label(self, strings, output):
        html = make_form(strings, []).render(output)
        assert 'aria-label="Add overall feedback after position 0"' in html
