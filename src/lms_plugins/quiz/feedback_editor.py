"""State of the overall feedback modal while a teacher edits it.

The modal holds the top (100%) feedback editor followed by boundary rows.
Each row is a boundary text field and the editor for the band below it.
Dividers sit after every editor and carry the position a new row is
inserted at.  Rows keep their editor number for life; boundary names are
renumbered whenever a row is added or removed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from bs4 import BeautifulSoup

from lms_plugins.host.strings import StringManager
from lms_plugins.model import TextFormat
from lms_plugins.quiz.feedback_form import OverallFeedbackForm, boundary_field, feedback_field

logger = logging.getLogger(__name__)

_EDITOR_NAME = re.compile(r"^feedbacktext\[(\d+)\]")

# Placeholder sent for the 100% entry; the server ignores it.
TOP_BOUNDARY = "100%"


@dataclass(frozen=True)
class FeedbackSummary:
    """Icon, menu title and level label shown for a grade item's feedback."""

    key: str
    title: str
    level_label: str


def feedback_summary(total: int, strings: Optional[StringManager] = None) -> FeedbackSummary:
    strings = strings or StringManager()
    gs = strings.get_string
    if total == 0:
        return FeedbackSummary("t/add", gs("addoverallfeedback", "quiz"), "-")
    if total == 1:
        return FeedbackSummary("t/edit", gs("editoverallfeedback1level", "quiz"),
                               gs("overallfeedback1level", "quiz", 1))
    return FeedbackSummary("t/edit", gs("editoverallfeedbacknlevels", "quiz", total),
                           gs("overallfeedbacknlevels", "quiz", total))


@dataclass
class Editor:
    editorno: int
    text: str = ""
    format: int = int(TextFormat.HTML)
    itemid: int = 0
    error: str = ""

    def value(self) -> dict[str, Any]:
        return {"itemid": self.itemid, "format": self.format, "text": self.text}


@dataclass
class BoundaryRow:
    index: int
    editor: Editor
    boundary: str = ""
    error: str = ""

    @property
    def name(self) -> str:
        return boundary_field(self.index)

    @property
    def input_id(self) -> str:
        return f"id_feedbackboundaries_{self.index}"

    @property
    def label_id(self) -> str:
        return f"{self.input_id}_label"

    @property
    def fitem_id(self) -> str:
        return f"fitem_{self.input_id}"

    @property
    def error_id(self) -> str:
        return f"id_error_feedbackboundaries_{self.index}"


@dataclass
class Divider:
    after: int
    label: str


@dataclass
class FeedbackEditor:
    quizid: int
    gradeitemid: int
    contextid: int
    top: Editor = field(default_factory=lambda: Editor(0))
    rows: list[BoundaryRow] = field(default_factory=list)
    strings: StringManager = field(default_factory=StringManager, repr=False)
    is_open: bool = False
    footer_disabled: bool = True

    @classmethod
    def from_form(cls, form: OverallFeedbackForm, quizid: int, contextid: int) -> "FeedbackEditor":
        """Build the modal state from a form that has had ``set_data`` applied."""
        editor = cls(quizid, form.gradeitemid, contextid, strings=form.strings)
        pending: Optional[str] = None
        editorno = 0
        for element in form.elements:
            if element.type == "text":
                pending = "" if element.value is None else str(element.value)
            elif element.type == "editor":
                value = element.value if isinstance(element.value, Mapping) else {}
                ed = Editor(
                    editorno,
                    text=str(value.get("text", "")),
                    format=int(value.get("format", TextFormat.HTML)),
                    itemid=int(value.get("itemid", 0) or 0),
                )
                if editorno == 0:
                    editor.top = ed
                else:
                    editor.rows.append(BoundaryRow(len(editor.rows), ed, pending or ""))
                pending = None
                editorno += 1
        return editor

    @classmethod
    def from_html(cls, html: str, quizid: int, gradeitemid: int, contextid: int,
                  strings: Optional[StringManager] = None) -> "FeedbackEditor":
        """Build the modal state from the rendered feedback form."""
        editor = cls(quizid, gradeitemid, contextid, strings=strings or StringManager())
        for boundary, ed in parse_feedback_items(html):
            if boundary is None and ed.editorno == 0:
                editor.top = ed
            else:
                editor.rows.append(BoundaryRow(len(editor.rows), ed, boundary or ""))
        return editor

    # ── modal ───────────────────────────────────────────────────────

    def open(self) -> None:
        self.is_open = True
        self.footer_disabled = False

    def close(self) -> None:
        self.is_open = False

    # ── structure ───────────────────────────────────────────────────

    @property
    def editor_count(self) -> int:
        return 1 + len(self.rows)

    @property
    def dividers(self) -> list[Divider]:
        gs = self.strings.get_string
        return [
            Divider(key, gs("insertfeedbackbefore", "quiz", {"afterindex": key}))
            for key in range(self.editor_count)
        ]

    def insert_after(self, after: int, editor: Optional[Editor] = None) -> BoundaryRow:
        """Add an empty row below divider *after* and renumber what follows."""
        after = int(after)
        if not 0 <= after <= len(self.rows):
            raise IndexError(f"No divider at position {after}")
        row = BoundaryRow(after, editor or Editor(self.editor_count))
        self.rows.insert(after, row)
        self.reindex(after)
        return row

    def remove(self, index: int) -> BoundaryRow:
        row = self.rows.pop(index)
        self.reindex(index)
        return row

    def reindex(self, after: int) -> None:
        for key, row in enumerate(self.rows):
            if key >= after:
                row.index = key

    # ── saving ──────────────────────────────────────────────────────

    def collect_form_data(self) -> list[dict[str, Any]]:
        """Payload for ``mod_quiz_save_overall_feedback_per_grade_item``."""
        data = [{"boundary": TOP_BOUNDARY, "feedback": self.top.value()}]
        data.extend({"boundary": row.boundary, "feedback": row.editor.value()} for row in self.rows)
        return data

    def apply_errors(self, errors: Mapping[str, str]) -> bool:
        """Show the messages in *errors* and clear every other field.

        Returns True when there were no errors.
        """
        for row in self.rows:
            row.error = errors.get(row.name, "")
            row.editor.error = errors.get(feedback_field(row.index + 1), "")
        if errors:
            logger.debug("feedback modal for grade item %s has %d error(s)",
                         self.gradeitemid, len(errors))
        return not errors


def parse_feedback_items(html: str) -> list[tuple[Optional[str], Editor]]:
    """Read ``(boundary value, editor)`` pairs from rendered form items.

    The boundary is None for an editor with no boundary field before it.
    """
    soup = BeautifulSoup(html, "html.parser")
    items: list[tuple[Optional[str], Editor]] = []
    boundary: Optional[str] = None
    for fitem in soup.find_all("div", class_="fitem"):
        holder = fitem.find(attrs={"data-fieldtype": True})
        fieldtype = holder["data-fieldtype"] if holder else None
        if fieldtype == "text":
            field_input = fitem.find("input", attrs={"name": re.compile(r"^feedbackboundaries")})
            boundary = field_input.get("value", "") if field_input else ""
        elif fieldtype == "editor":
            textarea = fitem.find("textarea")
            match = _EDITOR_NAME.match(textarea.get("name", "")) if textarea else None
            fmt = fitem.find("input", attrs={"name": re.compile(r"\[format\]$")})
            itemid = fitem.find("input", attrs={"name": re.compile(r"\[itemid\]$")})
            items.append((boundary, Editor(
                int(match.group(1)) if match else len(items),
                text=textarea.get_text() if textarea else "",
                format=int(fmt["value"]) if fmt else int(TextFormat.HTML),
                itemid=int(itemid["value"] or 0) if itemid else 0,
            )))
            boundary = None
    return items
