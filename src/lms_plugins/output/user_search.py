"""Initials bar used to filter user lists by first/last name letter."""

from __future__ import annotations

from typing import Any

from lms_plugins.host.renderer import Renderer, build_url


def _initials_row(
    output: Renderer, url: str, param: str, title: str, current: str,
) -> dict[str, Any]:
    strings = output.strings
    letters = [{
        "name": strings.get_string("all"),
        "value": "",
        "url": build_url(url, {param: ""}),
        "selected": current == "",
    }]
    for letter in strings.get_string("alphabet").split(","):
        letters.append({
            "name": letter,
            "value": letter,
            "url": build_url(url, {param: letter}),
            "selected": letter == current,
        })
    return {"title": title, "param": param, "current": current, "letters": letters}


def partial_user_search(
    output: Renderer,
    url: str,
    firstinitial: str,
    lastinitial: str,
    minirender: bool = False,
) -> str:
    """Render the first-name and last-name initials rows."""
    strings = output.strings
    return output.render_from_template("user/initials_bar", {
        "minirender": minirender,
        "rows": [
            _initials_row(output, url, "tifirst", strings.get_string("firstname"), firstinitial),
            _initials_row(output, url, "tilast", strings.get_string("lastname"), lastinitial),
        ],
    })
