"""Load the bundled JSON schemas and validate service arguments against them.

Usage::

    from lms_plugins.contracts.load import validate_service_args

    validate_service_args("mod_quiz_update_slots", {"quizid": 3, "slots": [...]})
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

import jsonschema

SCHEMA_DIR = "data/schemas"
SERVICES_SCHEMA = "services.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by filename."""
    path = resources.files("lms_plugins").joinpath(SCHEMA_DIR, name)
    return json.loads(path.read_text(encoding="utf-8"))


def validate_instance(instance: Any, schema_name: str) -> None:
    """Validate *instance* against the named schema.

    Raises ``jsonschema.ValidationError`` on failure.
    """
    jsonschema.validate(instance=instance, schema=load_schema(schema_name))


def service_names() -> list[str]:
    """Methods that have an argument schema."""
    defs = load_schema(SERVICES_SCHEMA)["$defs"]
    return sorted(name for name, d in defs.items() if d.get("type") == "object")


def validate_service_args(methodname: str, args: Any) -> None:
    """Validate the ``args`` of one web-service call.

    Raises ``KeyError`` for a method without a schema and
    ``jsonschema.ValidationError`` for bad arguments.
    """
    schema = load_schema(SERVICES_SCHEMA)
    definition = schema["$defs"][methodname]
    jsonschema.validate(
        instance=args,
        schema={"$defs": schema["$defs"], **definition},
    )
