"""Editing form for the overall feedback of one quiz grade item.

Field naming
------------
``feedbacktext[0][<gradeitemid>]``   feedback for the top band (up to 100%)
``feedbackboundaries[i]``            lower boundary of band *i*
``feedbacktext[i+1][<gradeitemid>]`` feedback for the band below boundary *i*

Validation works on *rows*: row *i* pairs ``feedbackboundaries[i]`` with
``feedbacktext[i+1]``.  The top feedback is not part of any row.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from lms_plugins.host.renderer import Renderer
from lms_plugins.host.strings import StringManager
from lms_plugins.model import TextFormat
from lms_plugins.model.entities import QuizFeedback

logger = logging.getLogger(__name__)

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: Any) -> bool:
    """True for numbers and numeric strings (``"12"``, ``" 3.5"``, ``"1e2"``)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(_NUMERIC.match(value))


def _is_blank(value: Any) -> bool:
    """Blank field: missing, false, numeric zero, whitespace or ``"0"``."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)):
        return value == 0
    return str(value).strip() in ("", "0")


def format_percent(value: float) -> str:
    """``50.0`` → ``"50%"``, ``33.33333333`` → ``"33.333333%"``."""
    rounded = round(value, 6)
    if rounded == int(rounded):
        return f"{int(rounded)}%"
    return f"{rounded!r}%"


def boundary_field(index: int) -> str:
    return f"feedbackboundaries[{index}]"


def feedback_field(index: int, gradeitemid: Optional[int] = None) -> str:
    if gradeitemid is None:
        return f"feedbacktext[{index}]"
    return f"feedbacktext[{index}][{gradeitemid}]"


@dataclass
class FormElement:
    """One element of the form, in display order."""

    type: str               # static | editor | text | html
    name: str
    label: str = ""
    value: Any = None
    attributes: dict[str, Any] = field(default_factory=dict)


class OverallFeedbackForm:
    """Overall feedback editor for a grade item.

    ``customdata`` keys: ``context``, ``feedbacks`` (highest band first),
    ``gradeItemId`` and ``grade``.
    """

    def __init__(self, customdata: Mapping[str, Any], strings: Optional[StringManager] = None) -> None:
        self._customdata = dict(customdata)
        self._customdata.setdefault("feedbacks", [])
        self.strings = strings or StringManager()
        self._data: dict[str, Any] = {}
        self.elements: list[FormElement] = []
        self.definition()

    @property
    def gradeitemid(self) -> int:
        return self._customdata["gradeItemId"]

    # ── definition ──────────────────────────────────────────────────

    def definition(self) -> list[FormElement]:
        customdata = self._customdata
        gradeitemid = customdata["gradeItemId"]
        gs = self.strings.get_string
        elements = [
            FormElement("static", "gradeboundarystatic1", gs("gradeboundary", "quiz"), "100%"),
            FormElement("editor", feedback_field(0, gradeitemid), gs("feedback", "quiz"),
                        attributes={"rows": 3}),
            FormElement("html", "divider_0", attributes={"afterindex": 0}),
        ]

        index = 0
        for feedback in customdata["feedbacks"]:
            if feedback.maxgrade > customdata["grade"]:
                continue
            elements.append(FormElement("text", boundary_field(index), gs("gradeboundary", "quiz"),
                                        attributes={"size": 10}))
            elements.append(FormElement("editor", feedback_field(index + 1, gradeitemid),
                                        gs("feedback", "quiz"), attributes={"rows": 3}))
            elements.append(FormElement("html", f"divider_{index + 1}",
                                        attributes={"afterindex": index + 1}))
            index += 1

        elements.append(FormElement("static", "gradeboundarystatic2", gs("gradeboundary", "quiz"), "0%"))
        self.elements = elements
        return elements

    # ── defaults ────────────────────────────────────────────────────

    def set_data(self, defaultvalues: Any) -> None:
        if not isinstance(defaultvalues, Mapping):
            defaultvalues = vars(defaultvalues)
        toform = dict(defaultvalues)
        self.data_preprocessing(toform)
        self._data.update(toform)
        for element in self.elements:
            if element.name in toform:
                element.value = toform[element.name]

    def data_preprocessing(self, toform: dict[str, Any]) -> None:
        """Fill editor and boundary defaults from the stored feedback bands."""
        feedbacks: list[QuizFeedback] = list(self._customdata["feedbacks"])
        if not feedbacks:
            return

        grade = toform["grade"]
        first = feedbacks[0]
        if first.maxgrade < grade:
            # No feedback stored for the band that reaches 100%; show a blank one.
            feedbacks.insert(0, QuizFeedback(
                id=first.id - 1,
                quizid=first.quizid,
                gradeitemid=first.gradeitemid,
                feedbacktext="",
                feedbacktextformat=first.feedbacktextformat,
                mingrade=first.maxgrade,
                maxgrade=grade + 1,
            ))

        for key, feedback in enumerate(feedbacks):
            toform[feedback_field(key, feedback.gradeitemid)] = {
                "text": feedback.feedbacktext,
                "format": int(feedback.feedbacktextformat),
                "itemid": feedback.id or 0,
            }
            if feedback.mingrade > 0:
                toform[boundary_field(key)] = format_percent(100.0 * feedback.mingrade / grade)

    def get_data(self) -> dict[str, Any]:
        return dict(self._data)

    # ── validation ──────────────────────────────────────────────────

    def validation(self, data: Mapping[str, Any], files: Any = None) -> tuple[dict[str, str], list[dict[str, Any]]]:
        """Check boundary rows; return ``(errors, normalised rows)``."""
        return validate_boundaries(float(data["grade"]), data["formdata"], self.strings)

    # ── rendering ───────────────────────────────────────────────────

    def render(self, output: Renderer, errors: Optional[Mapping[str, str]] = None) -> str:
        return output.render_from_template("quiz/overallfeedback_form", {
            "gradeitemid": self._customdata["gradeItemId"],
            "elements": [element_context(e, errors or {}) for e in self.elements],
        })


def element_context(element: FormElement, errors: Mapping[str, str]) -> dict[str, Any]:
    value = element.value
    text, fmt, itemid = "", int(TextFormat.HTML), 0
    if element.type == "editor" and isinstance(value, Mapping):
        text = value.get("text", "")
        fmt = value.get("format", fmt)
        itemid = value.get("itemid", 0)
    ident = re.sub(r"[\[\]]+", "_", element.name).strip("_")
    shortname = element.name.split("]")[0] + "]" if element.type == "editor" else element.name
    return {
        "type": element.type,
        "name": element.name,
        "id": f"id_{ident}",
        "label": element.label,
        "value": value if element.type in ("text", "static") else None,
        "text": text,
        "format": fmt,
        "itemid": itemid,
        "error": errors.get(shortname, ""),
        "attributes": element.attributes,
    }


def validate_boundaries(
    grade: float,
    formdata: Sequence[Mapping[str, Any]],
    strings: Optional[StringManager] = None,
) -> tuple[dict[str, str], list[dict[str, Any]]]:
    """Validate ordered boundary rows against the grade *grade*.

    Rows are walked until the first blank boundary.  A trailing ``%`` marks a
    percentage of *grade*; the row's ``boundary`` is replaced by the absolute
    value.  Boundaries must lie strictly inside ``(0, grade)`` and strictly
    decrease.  Any boundary or feedback text after the walked prefix is junk.
    """
    strings = strings or StringManager()
    gs = strings.get_string
    errors: dict[str, str] = {}
    rows = [copy.deepcopy(dict(r)) for r in formdata]

    numboundaries = 0
    for key, row in enumerate(rows):
        raw = row.get("boundary")
        if _is_blank(raw):
            break
        boundary: Any = str(raw).strip()

        if boundary.endswith("%"):
            boundary = boundary[:-1].strip()
            if is_numeric(boundary):
                boundary = float(boundary) * grade / 100.0
            else:
                errors[boundary_field(key)] = gs("feedbackerrorboundaryformat", "quiz", key + 1)
        elif is_numeric(boundary):
            boundary = float(boundary)
        else:
            errors[boundary_field(key)] = gs("feedbackerrorboundaryformat", "quiz", key + 1)

        if isinstance(boundary, float):
            if boundary <= 0 or boundary >= grade:
                errors[boundary_field(key)] = gs("feedbackerrorboundaryoutofrange", "quiz", key + 1)
            previous = rows[key - 1]["boundary"] if key > 0 else None
            if isinstance(previous, float) and boundary >= previous:
                errors[boundary_field(key)] = gs("feedbackerrororder", "quiz", key + 1)

        row["boundary"] = boundary
        numboundaries += 1

    # Nothing may be filled in after the last used boundary.
    for i in range(numboundaries, len(rows)):
        if not _is_blank(rows[i].get("boundary")):
            errors[boundary_field(i)] = gs("feedbackerrorjunkinboundary", "quiz", i + 1)
    for i in range(numboundaries, len(rows)):
        feedback = rows[i].get("feedback") or {}
        if not _is_blank(feedback.get("text")):
            errors[feedback_field(i + 1)] = gs("feedbackerrorjunkinfeedback", "quiz", i + 1)

    if errors:
        logger.debug("overall feedback rejected: %s", sorted(errors))
    return errors, rows
