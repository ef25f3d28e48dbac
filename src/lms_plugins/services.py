"""Web-service registry and batch dispatcher.

A batch is a list of ``{"index", "methodname", "args"}`` calls.  Calls run
in order; each produces ``{"error": False, "data": ...}`` or
``{"error": True, "exception": {...}}``.  Once a call fails the remaining
calls are not run and report the same exception.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

import jsonschema

from lms_plugins.contracts.load import validate_service_args
from lms_plugins.exceptions import InvalidParameterError, LmsError, UnknownServiceError
from lms_plugins.host.renderer import Renderer
from lms_plugins.host.request import RequestState
from lms_plugins.quiz import external

logger = logging.getLogger(__name__)

ServiceFunction = Callable[..., Any]

SERVICES: dict[str, ServiceFunction] = {
    "mod_quiz_create_grade_items": external.create_grade_items,
    "mod_quiz_update_grade_items": external.update_grade_items,
    "mod_quiz_delete_grade_items": external.delete_grade_items,
    "mod_quiz_update_slots": external.update_slots,
    "mod_quiz_create_grade_item_per_section": external.create_grade_item_per_section,
    "mod_quiz_get_edit_grading_page_data": external.get_edit_grading_page_data,
    "mod_quiz_save_overall_feedback_per_grade_item": external.save_overall_feedback_per_grade_item,
    "mod_quiz_get_section_title": external.get_section_title,
    "mod_quiz_update_section_title": external.update_section_title,
    "mod_quiz_update_shuffle_questions": external.update_shuffle_questions,
}


def call_service(request: RequestState, output: Renderer, methodname: str,
                 args: Mapping[str, Any]) -> Any:
    """Validate *args* and run one service function."""
    function = SERVICES.get(methodname)
    if function is None:
        raise UnknownServiceError(f"Web service {methodname} is not available.")
    try:
        validate_service_args(methodname, dict(args))
    except jsonschema.ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path) or "args"
        raise InvalidParameterError(
            "Invalid parameter value detected", debuginfo=f"{path}: {e.message}") from e
    return function(request, output, **args)


def execute_batch(request: RequestState, output: Renderer,
                  calls: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    responses: list[dict[str, Any]] = []
    failure: dict[str, Any] | None = None
    for call in calls:
        if failure is not None:
            responses.append({"error": True, "exception": failure})
            continue
        methodname = call.get("methodname", "")
        try:
            data = call_service(request, output, methodname, call.get("args") or {})
        except LmsError as e:
            logger.warning("service %s failed for user %s: %s",
                           methodname, request.user.id, e.message)
            failure = e.to_dict()
            responses.append({"error": True, "exception": failure})
        else:
            responses.append({"error": False, "data": data})
    return responses
