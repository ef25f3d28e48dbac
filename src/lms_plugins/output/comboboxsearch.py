"""Dropdown-trigger plus searchable body widget."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from lms_plugins.host.renderer import Renderer


@dataclass
class ComboboxSearch:
    """A toolbar button that opens a searchable dropdown.

    ``renderlater`` defers rendering of the dropdown body to the client;
    ``usesbutton`` is False for widgets whose trigger is itself an input.
    """

    renderlater: bool
    buttoncontent: str
    dropdowncontent: Optional[str]
    parentclasses: Optional[str] = None
    buttonclasses: Optional[str] = None
    dropdownclasses: Optional[str] = None
    buttonheader: Optional[str] = None
    usesbutton: bool = True
    label: Optional[str] = None
    name: Optional[str] = None
    value: Any = None

    def export_for_template(self, output: Renderer) -> dict[str, Any]:
        return {
            "rendercontentlater": self.renderlater,
            "buttoncontent": self.buttoncontent,
            "dropdowncontent": self.dropdowncontent,
            "parentclasses": self.parentclasses,
            "buttonclasses": self.buttonclasses,
            "dropdownclasses": self.dropdownclasses,
            "buttonheader": self.buttonheader,
            "usebutton": self.usesbutton,
            "instance": output.random_instance(),
            "label": self.label,
            "name": self.name,
            "value": self.value,
        }

    def render(self, output: Renderer) -> str:
        return output.render_from_template("core/comboboxsearch", self.export_for_template(output))
