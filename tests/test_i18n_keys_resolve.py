from __future__ import annotations

import re
from pathlib import Path

import pytest

from lms_plugins.host.strings import StringManager
from lms_plugins.web_api.routers.reports import REPORT_MODES

PKG_ROOT = Path(__file__).resolve().parents[1] / "src" / "lms_plugins"

# get_string('id') / get_string('id', 'component') in templates.
_TEMPLATE_CALL = re.compile(r"get_string\(\s*'(\w+)'\s*(?:,\s*'(\w+)')?")
# gs("id", "component", ...) / get_string("id") in Python, literal arguments only.
_PY_CALL = re.compile(r"""\b(?:gs|get_string)\(\s*["'](\w+)["']\s*(?:,\s*["'](\w+)["']|\))""")


def _template_keys() -> set[tuple[str, str]]:
    keys = set()
    for path in (PKG_ROOT / "templates").rglob("*.html"):
        for identifier, component in _TEMPLATE_CALL.findall(path.read_text(encoding="utf-8")):
            keys.add((identifier, component or "core"))
    return keys


def _python_keys() -> set[tuple[str, str]]:
    keys = set()
    for path in PKG_ROOT.rglob("*.py"):
        for identifier, component in _PY_CALL.findall(path.read_text(encoding="utf-8")):
            keys.add((identifier, component or "core"))
    return keys


def test_scanners_find_keys() -> None:
    """Guard against the regexes silently matching nothing."""
    assert ("savechanges", "core") in _template_keys()
    assert ("feedbackerrororder", "quiz") in _python_keys()


@pytest.mark.parametrize("identifier,component", sorted(_template_keys() | _python_keys()))
def test_string_keys_resolve(identifier: str, component: str) -> None:
    assert StringManager("en").string_exists(identifier, component), f"{component}:{identifier}"


@pytest.mark.parametrize("mode", REPORT_MODES)
def test_report_navigation_names_resolve(mode: str) -> None:
    assert StringManager("en").string_exists(f"{mode}report", "quiz")


def test_plugin_names_resolve() -> None:
    strings = StringManager("en")
    assert strings.string_exists("pluginname", "qtype_ddmarker")
    assert strings.string_exists("enablefilters", "qtype_ddmarker")
    assert strings.string_exists("enablefilters_desc", "qtype_ddmarker")
