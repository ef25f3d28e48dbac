"""HTML fragments loaded into the overall feedback modal."""

from __future__ import annotations

from typing import Any, Mapping

from lms_plugins.exceptions import InvalidParameterError
from lms_plugins.host.renderer import Renderer
from lms_plugins.host.request import RequestState
from lms_plugins.model import CAP_QUIZ_MANAGE
from lms_plugins.model.entities import Context
from lms_plugins.quiz.feedback_form import (
    FormElement,
    OverallFeedbackForm,
    boundary_field,
    element_context,
    feedback_field,
)
from lms_plugins.quiz.structure import QuizStructure


def _int_arg(args: Mapping[str, Any], name: str) -> int:
    try:
        return int(args[name])
    except KeyError:
        raise InvalidParameterError(f"Missing fragment argument {name}") from None
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Fragment argument {name} must be an integer") from None


def _quiz_for_context(request: RequestState, context: Context) -> int:
    platform = request.platform
    cm = platform.get_cm(context.instanceid)
    platform.require_capability(CAP_QUIZ_MANAGE, context, request.user)
    return cm.instance


def load_overall_feedback_data(request: RequestState, output: Renderer, context: Context,
                               args: Mapping[str, Any]) -> str:
    """The whole feedback form of one grade item, filled from stored bands."""
    quizid = _int_arg(args, "quizId")
    if quizid != _quiz_for_context(request, context):
        raise InvalidParameterError("Quiz does not belong to this context")
    structure = QuizStructure(request.platform, quizid, output.strings)
    gradeitem = request.platform.get_grade_item(_int_arg(args, "gradeItemId"), quizid)
    grade = structure.grade_item_grade(gradeitem.id)

    form = OverallFeedbackForm({
        "context": context,
        "feedbacks": structure.get_feedbacks(gradeitem.id),
        "gradeItemId": gradeitem.id,
        "grade": grade,
    }, output.strings)
    form.set_data({"grade": grade})
    return form.render(output)


def load_overall_feedback_form(request: RequestState, output: Renderer, context: Context,
                               args: Mapping[str, Any]) -> str:
    """One empty boundary/editor/divider block to insert below divider ``after``."""
    quizid = _quiz_for_context(request, context)
    after = _int_arg(args, "after")
    editorno = _int_arg(args, "no")
    gradeitem = request.platform.get_grade_item(_int_arg(args, "gradeitemid"), quizid)

    gs = output.strings.get_string
    elements = [
        FormElement("text", boundary_field(after), gs("gradeboundary", "quiz"), attributes={"size": 10}),
        FormElement("editor", feedback_field(editorno, gradeitem.id), gs("feedback", "quiz"),
                    attributes={"rows": 3}),
        FormElement("html", f"divider_{after + 1}", attributes={"afterindex": after + 1}),
    ]
    return output.render_from_template("quiz/feedback_block", {
        "elements": [element_context(e, {}) for e in elements],
    })


FRAGMENTS = {
    ("mod_quiz", "load_overall_feedback_data"): load_overall_feedback_data,
    ("mod_quiz", "load_overall_feedback_form"): load_overall_feedback_form,
}
