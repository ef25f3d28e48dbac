"""Controller for the quiz "Grade items" editing page.

Drives the page through the web-service endpoint the way the browser does:
every change is sent together with ``mod_quiz_get_edit_grading_page_data``
in one batch, and the page region is re-rendered from that last result.
Any failure goes to a single exception callback; nothing is retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import httpx

from lms_plugins.exceptions import LmsError
from lms_plugins.host.renderer import Renderer
from lms_plugins.quiz.feedback_editor import FeedbackEditor, feedback_summary, parse_feedback_items

logger = logging.getLogger(__name__)

PAGE_DATA_METHOD = "mod_quiz_get_edit_grading_page_data"
SERVICE_PATH = "/lib/ajax/service"


class ServiceCallError(LmsError):
    """A call in a batch came back with ``error: true``."""

    def __init__(self, methodname: str, exception: dict[str, Any]) -> None:
        super().__init__(exception.get("message", "Unknown error"), debuginfo=exception.get("debuginfo"))
        self.errorcode = exception.get("errorcode", self.errorcode)
        self.methodname = methodname


@dataclass
class ActiveEdit:
    """The grade item whose name is being edited in place."""

    gradeitemid: int
    oldname: str
    value: str


class GradingPageClient:
    def __init__(
        self,
        quizid: int,
        userid: int,
        *,
        base_url: str = "http://localhost:8000",
        transport: Optional[httpx.BaseTransport] = None,
        renderer: Optional[Renderer] = None,
        on_exception: Optional[Callable[[Exception], None]] = None,
        behat_site_running: bool = False,
    ) -> None:
        self.quizid = quizid
        self.http = httpx.Client(base_url=base_url, transport=transport,
                                 headers={"X-User-Id": str(userid)})
        self.renderer = renderer or Renderer()
        self.on_exception = on_exception
        self.behat_site_running = behat_site_running
        self.context: dict[str, Any] = {}
        self.html = ""
        self.editing: Optional[ActiveEdit] = None
        self.modal: Optional[FeedbackEditor] = None

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "GradingPageClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── transport ───────────────────────────────────────────────────

    def fetch_many(self, calls: Sequence[dict[str, Any]]) -> list[Any]:
        """Run *calls* as one batch and return each call's data."""
        payload = [{"index": i, **call} for i, call in enumerate(calls)]
        response = self.http.post(SERVICE_PATH, json=payload)
        response.raise_for_status()
        results = response.json()
        for call, result in zip(calls, results):
            if result.get("error"):
                raise ServiceCallError(call["methodname"], result.get("exception") or {})
        return [result.get("data") for result in results]

    def call_services_and_return_rendering_data(self, calls: Sequence[dict[str, Any]]) -> dict[str, Any]:
        calls = list(calls)
        calls.append({"methodname": PAGE_DATA_METHOD, "args": {"quizid": calls[0]["args"]["quizid"]}})
        return json.loads(self.fetch_many(calls)[-1])

    def notify_exception(self, error: Exception) -> None:
        logger.warning("grading page action failed: %s", error)
        if self.on_exception is not None:
            self.on_exception(error)

    def _perform(self, *calls: dict[str, Any]) -> bool:
        try:
            self.re_render(self.call_services_and_return_rendering_data(calls))
        except (httpx.HTTPError, LmsError, ValueError) as e:
            self.notify_exception(e)
            return False
        return True

    def re_render(self, context: dict[str, Any]) -> None:
        self.context = context
        self.html = self.renderer.render_from_template("quiz/edit_grading_page", context)

    # ── page actions ────────────────────────────────────────────────

    def load(self) -> bool:
        try:
            data = self.fetch_many([{"methodname": PAGE_DATA_METHOD, "args": {"quizid": self.quizid}}])
            self.re_render(json.loads(data[0]))
        except (httpx.HTTPError, LmsError, ValueError) as e:
            self.notify_exception(e)
            return False
        return True

    def add_grade_item(self) -> bool:
        return self._perform({
            "methodname": "mod_quiz_create_grade_items",
            "args": {"quizid": self.quizid, "quizgradeitems": [{"name": ""}]},
        })

    def delete_grade_item(self, gradeitemid: int) -> bool:
        return self._perform({
            "methodname": "mod_quiz_delete_grade_items",
            "args": {"quizid": self.quizid, "quizgradeitems": [{"id": gradeitemid}]},
        })

    def change_slot_grade_item(self, slotid: int, gradeitemid: Optional[int]) -> bool:
        return self._perform({
            "methodname": "mod_quiz_update_slots",
            "args": {"quizid": self.quizid, "slots": [{"id": slotid, "quizgradeitemid": gradeitemid}]},
        })

    def auto_setup(self) -> bool:
        return self._perform({
            "methodname": "mod_quiz_create_grade_item_per_section",
            "args": {"quizid": self.quizid},
        })

    def reset_all(self) -> bool:
        """Unassign every slot, then delete every grade item, in one batch."""
        calls = []
        slotresets = [{"id": slot["id"], "quizgradeitemid": 0} for slot in self.context.get("slots", [])]
        if slotresets:
            calls.append({
                "methodname": "mod_quiz_update_slots",
                "args": {"quizid": self.quizid, "slots": slotresets},
            })
        calls.append({
            "methodname": "mod_quiz_delete_grade_items",
            "args": {
                "quizid": self.quizid,
                "quizgradeitems": [{"id": item["id"]} for item in self.context.get("gradeitems", [])],
            },
        })
        return self._perform(*calls)

    # ── in-place name editing ───────────────────────────────────────

    def _grade_item(self, gradeitemid: int) -> dict[str, Any]:
        for item in self.context.get("gradeitems", []):
            if item["id"] == gradeitemid:
                return item
        raise KeyError(gradeitemid)

    def start_edit(self, gradeitemid: int) -> ActiveEdit:
        """Open the name editor; any other open editor is closed first."""
        self.cancel_edit()
        rawname = self._grade_item(gradeitemid)["rawname"]
        self.editing = ActiveEdit(gradeitemid, rawname, rawname)
        return self.editing

    def cancel_edit(self) -> None:
        self.editing = None

    def focus_out(self) -> None:
        # Automated browser runs fire focus-out too often.
        if not self.behat_site_running:
            self.cancel_edit()

    def commit_edit(self, newname: Optional[str] = None) -> bool:
        if self.editing is None:
            return False
        edit, self.editing = self.editing, None
        return self._perform({
            "methodname": "mod_quiz_update_grade_items",
            "args": {
                "quizid": self.quizid,
                "quizgradeitems": [{"id": edit.gradeitemid,
                                    "name": edit.value if newname is None else newname}],
            },
        })

    # ── overall feedback modal ──────────────────────────────────────

    def _fragment(self, callback: str, contextid: int, args: dict[str, Any]) -> str:
        response = self.http.post(f"/fragment/mod_quiz/{callback}",
                                  json={"contextid": contextid, "args": args})
        response.raise_for_status()
        return response.json()["html"]

    def open_feedback(self, gradeitemid: int) -> Optional[FeedbackEditor]:
        item = self._grade_item(gradeitemid)
        try:
            html = self._fragment("load_overall_feedback_data", item["contextid"],
                                  {"quizId": self.quizid, "gradeItemId": gradeitemid})
        except httpx.HTTPError as e:
            self.notify_exception(e)
            return None
        self.modal = FeedbackEditor.from_html(html, self.quizid, gradeitemid, item["contextid"],
                                              self.renderer.strings)
        self.modal.open()
        return self.modal

    def add_feedback_row(self, after: int) -> bool:
        modal = self.modal
        if modal is None:
            return False
        try:
            html = self._fragment("load_overall_feedback_form", modal.contextid, {
                "after": after, "no": modal.editor_count, "gradeitemid": modal.gradeitemid,
            })
        except httpx.HTTPError as e:
            self.notify_exception(e)
            return False
        _, editor = parse_feedback_items(html)[0]
        modal.insert_after(after, editor)
        return True

    def save_feedback(self) -> bool:
        """Save the modal; it stays open while the server reports errors."""
        modal = self.modal
        if modal is None:
            return False
        modal.footer_disabled = True
        try:
            result = self.fetch_many([{
                "methodname": "mod_quiz_save_overall_feedback_per_grade_item",
                "args": {
                    "formdata": json.dumps(modal.collect_form_data()),
                    "quizid": self.quizid,
                    "gradeitemid": modal.gradeitemid,
                },
            }])[0]
            errors = json.loads(result["errors"])
        except (httpx.HTTPError, LmsError, ValueError) as e:
            modal.footer_disabled = False
            self.notify_exception(e)
            return False

        modal.footer_disabled = False
        if not modal.apply_errors(errors or {}):
            return False
        summary = feedback_summary(int(result["total"]), self.renderer.strings)
        item = self._grade_item(modal.gradeitemid)
        item.update(feedbackicon=summary.key, feedbacktitle=summary.title,
                    feedbacklevels=summary.level_label)
        self.re_render(self.context)
        modal.close()
        self.modal = None
        return True

    def cancel_feedback(self) -> None:
        if self.modal is not None:
            self.modal.close()
        self.modal = None
