"""Quiz web-service functions.

Each function takes the request state and renderer followed by the
method's own arguments, and returns JSON-friendly data.  Every function
requires ``mod/quiz:manage`` in the quiz's module context.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import jsonschema

from lms_plugins.contracts.load import validate_instance
from lms_plugins.exceptions import InvalidParameterError
from lms_plugins.host.renderer import Renderer, strip_tags
from lms_plugins.host.request import RequestState
from lms_plugins.model import CAP_QUIZ_MANAGE
from lms_plugins.quiz.feedback_editor import feedback_summary
from lms_plugins.quiz.feedback_form import OverallFeedbackForm
from lms_plugins.quiz.structure import QuizStructure

logger = logging.getLogger(__name__)

FORMDATA_SCHEMA = "feedback_formdata.schema.json"


def _structure(request: RequestState, output: Renderer, quizid: int) -> QuizStructure:
    platform = request.platform
    context = platform.quiz_context(int(quizid))
    platform.require_capability(CAP_QUIZ_MANAGE, context, request.user)
    return QuizStructure(platform, int(quizid), output.strings)


# ── grade items ─────────────────────────────────────────────────────


def create_grade_items(request: RequestState, output: Renderer, quizid: int,
                       quizgradeitems: list[dict[str, Any]]) -> None:
    structure = _structure(request, output, quizid)
    for item in quizgradeitems:
        structure.create_grade_item(item.get("name", ""))


def update_grade_items(request: RequestState, output: Renderer, quizid: int,
                       quizgradeitems: list[dict[str, Any]]) -> None:
    structure = _structure(request, output, quizid)
    for item in quizgradeitems:
        structure.update_grade_item(int(item["id"]), strip_tags(item.get("name", "")))


def delete_grade_items(request: RequestState, output: Renderer, quizid: int,
                       quizgradeitems: list[dict[str, Any]]) -> None:
    structure = _structure(request, output, quizid)
    for item in quizgradeitems:
        structure.delete_grade_item(int(item["id"]))


def update_slots(request: RequestState, output: Renderer, quizid: int,
                 slots: list[dict[str, Any]]) -> None:
    structure = _structure(request, output, quizid)
    platform = request.platform
    for data in slots:
        slot = platform.get_slot(int(data["id"]), structure.quizid)
        if "quizgradeitemid" in data:
            structure.update_slot_grade_item(slot, data["quizgradeitemid"])
        if data.get("maxmark") is not None:
            structure.update_slot_maxmark(slot, data["maxmark"])
        if "displaynumber" in data:
            slot.displaynumber = strip_tags(data["displaynumber"] or "") or None


def create_grade_item_per_section(request: RequestState, output: Renderer, quizid: int) -> None:
    _structure(request, output, quizid).create_grade_item_per_section()


def get_edit_grading_page_data(request: RequestState, output: Renderer, quizid: int) -> str:
    """JSON-encoded context for the ``quiz/edit_grading_page`` template."""
    structure = _structure(request, output, quizid)
    return json.dumps(grading_page_context(structure, output, request))


def grading_page_context(structure: QuizStructure, output: Renderer,
                         request: Optional[RequestState] = None) -> dict[str, Any]:
    gs = output.strings.get_string
    gradeitems = structure.get_grade_items()
    contextid = structure.platform.quiz_context(structure.quizid).id

    items = []
    for item in gradeitems:
        total = len(structure.get_feedbacks(item.id))
        summary = feedback_summary(total, output.strings)
        isused = structure.is_grade_item_used(item.id)
        items.append({
            "id": item.id,
            "displayname": output.format_string(item.name),
            "rawname": item.name,
            "summarks": structure.grade_item_max_mark(item.id),
            "isused": isused,
            "candelete": not isused,
            "editlabel": gs("gradeitemnewname", "quiz", item.name),
            "editicontitle": gs("gradeitemedit", "quiz", item.name),
            "deleteicontitle": gs("gradeitemdelete", "quiz", item.name),
            "feedbackicon": summary.key,
            "feedbacktitle": summary.title,
            "feedbacklevels": summary.level_label,
            "contextid": contextid,
        })

    slots = []
    for slot in structure.get_slots():
        choices = [{
            "id": "",
            "choice": gs("gradeitemnoneselected", "quiz"),
            "isselected": slot.quizgradeitemid is None,
        }]
        choices.extend({
            "id": item.id,
            "choice": item.name,
            "isselected": slot.quizgradeitemid == item.id,
        } for item in gradeitems)
        slots.append({
            "id": slot.id,
            "displaynumber": slot.displaynumber or str(slot.slot),
            "displayname": slot.questionname,
            "maxmark": slot.maxmark,
            "choices": choices,
        })

    return {
        "quizid": structure.quizid,
        "contextid": contextid,
        "gradeitems": items,
        "hasgradeitems": bool(items),
        "nogradeitems": not items,
        "slots": slots,
        "hasslots": bool(slots),
        "hasmultiplesections": len(structure.get_sections()) > 1,
    }


# ── overall feedback ────────────────────────────────────────────────


def save_overall_feedback_per_grade_item(request: RequestState, output: Renderer, formdata: str,
                                         quizid: int, gradeitemid: int) -> dict[str, Any]:
    """Validate and store the feedback bands of one grade item.

    *formdata* is a JSON list; entry 0 is the top (100%) feedback, entry
    ``i + 1`` is boundary row *i*.  Returns ``{"errors": <json>, "total": n}``.
    """
    structure = _structure(request, output, quizid)
    platform = request.platform
    item = platform.get_grade_item(int(gradeitemid), structure.quizid)
    try:
        entries = json.loads(formdata)
        validate_instance(entries, FORMDATA_SCHEMA)
    except jsonschema.ValidationError as e:
        raise InvalidParameterError("Invalid parameter value detected",
                                    debuginfo=f"formdata: {e.message}") from e
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"formdata is not valid JSON: {e}") from e

    top, rows = entries[0] or {}, entries[1:]
    grade = structure.grade_item_grade(item.id)
    form = OverallFeedbackForm({
        "context": platform.quiz_context(structure.quizid),
        "feedbacks": structure.get_feedbacks(item.id),
        "gradeItemId": item.id,
        "grade": grade,
    }, output.strings)
    errors, rows = form.validation({"grade": grade, "formdata": rows})
    if errors:
        return {"errors": json.dumps(errors), "total": len(structure.get_feedbacks(item.id))}

    used = 0
    while used < len(rows) and isinstance(rows[used].get("boundary"), float):
        used += 1
    boundaries = [rows[i]["boundary"] for i in range(used)]
    texts = [top.get("feedback") or {}] + [rows[i].get("feedback") or {} for i in range(used)]

    if not boundaries and not str(texts[0].get("text") or "").strip():
        structure.delete_feedbacks(item.id)
        total = 0
    else:
        total = len(structure.replace_feedbacks(item.id, boundaries, texts))
    logger.info("quiz %s: saved %d feedback band(s) for grade item %s",
                structure.quizid, total, item.id)
    return {"errors": "[]", "total": total}


# ── sections ────────────────────────────────────────────────────────


def get_section_title(request: RequestState, output: Renderer, id: int, quizid: int) -> dict[str, Any]:
    structure = _structure(request, output, quizid)
    section = request.platform.get_section(int(id), structure.quizid)
    return {"instancesection": section.heading}


def update_section_title(request: RequestState, output: Renderer, id: int, quizid: int,
                         newheading: str) -> dict[str, Any]:
    structure = _structure(request, output, quizid)
    section = structure.set_section_heading(int(id), strip_tags(newheading))
    return {"instancesection": section.heading}


def update_shuffle_questions(request: RequestState, output: Renderer, id: int, quizid: int,
                             newshuffle: Any) -> dict[str, Any]:
    structure = _structure(request, output, quizid)
    try:
        shuffle = int(newshuffle)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"newshuffle must be 0 or 1, got {newshuffle!r}") from e
    section = structure.set_section_shuffle(int(id), bool(shuffle))
    return {"instancesection": str(int(section.shufflequestions))}
