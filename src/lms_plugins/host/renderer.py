"""Template rendering for the plugins.

``Renderer`` wraps a Jinja2 environment loaded from the package's
``templates/`` directory.  ``Page`` collects the client-side module calls a
renderer registers while building a page.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup
from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup, escape

from lms_plugins.host.strings import StringManager


def strip_tags(value: str) -> str:
    """Request-parameter cleaning: drop anything that looks like a tag."""
    if not value:
        return ""
    return BeautifulSoup(value, "html.parser").get_text().strip()


def optional_param(params: Optional[Mapping[str, Any]], name: str, default: Any, cast=str) -> Any:
    """Read and clean a request parameter, falling back to *default*."""
    if not params or name not in params:
        return default
    value = params[name]
    try:
        if cast is int:
            return int(value)
        return strip_tags(str(value))
    except (TypeError, ValueError):
        return default


def build_url(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    if not params:
        return path
    return f"{path}?{urlencode({k: v for k, v in params.items() if v is not None})}"


@dataclass
class PageRequirements:
    """Client-side module calls queued for the page footer."""

    amd_calls: list[dict[str, Any]] = field(default_factory=list)

    def js_call_amd(self, module: str, function: str, args: list[Any]) -> None:
        self.amd_calls.append({"module": module, "function": function, "args": list(args)})


@dataclass
class Page:
    url: str = "/"
    requires: PageRequirements = field(default_factory=PageRequirements)


class Renderer:
    """Renders templates and formats strings for output."""

    def __init__(self, strings: Optional[StringManager] = None, *, rng: Optional[random.Random] = None) -> None:
        self.strings = strings or StringManager()
        self._rng = rng or random.Random()
        self.env = Environment(
            loader=PackageLoader("lms_plugins", "templates"),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals["get_string"] = self.strings.get_string

    def render_from_template(self, name: str, context: Mapping[str, Any]) -> str:
        if not name.endswith(".html"):
            name += ".html"
        return self.env.get_template(name).render(**context)

    def format_string(self, text: str) -> str:
        """Escape a user-supplied name for display."""
        return str(escape(text or ""))

    def random_instance(self) -> int:
        return self._rng.randint(1, 2**31 - 1)

    @staticmethod
    def markup(html: str) -> Markup:
        """Mark already-rendered HTML so templates do not escape it again."""
        return Markup(html)
