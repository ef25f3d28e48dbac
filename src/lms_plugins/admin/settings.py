"""Admin settings pages, setting types and the plugin config store."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


class ConfigStore:
    """Plugin configuration values, stored as strings per plugin."""

    def __init__(self) -> None:
        self._values: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def get_config(self, plugin: str, name: Optional[str] = None, default: Any = None) -> Any:
        with self._lock:
            values = self._values.get(plugin, {})
            if name is None:
                return dict(values)
            return values.get(name, default)

    def set_config(self, name: str, value: Optional[str], plugin: str) -> None:
        with self._lock:
            bucket = self._values.setdefault(plugin, {})
            if value is None:
                bucket.pop(name, None)
            else:
                bucket[name] = str(value)

    def is_set(self, plugin: str, name: str) -> bool:
        with self._lock:
            return name in self._values.get(plugin, {})


def split_fullname(fullname: str) -> tuple[str, str]:
    """``'qtype_ddmarker/enablefilters'`` → ``('qtype_ddmarker', 'enablefilters')``."""
    plugin, sep, name = fullname.partition("/")
    if not sep or not plugin or not name:
        raise ValueError(f"Setting name must be 'plugin/name', got {fullname!r}")
    return plugin, name


@dataclass
class AdminSettingPickFilters:
    """Multi-checkbox setting choosing which text filters a plugin applies.

    The value is persisted as a comma-separated list of filter names.
    """

    fullname: str
    visiblename: str
    description: str
    defaultsetting: Mapping[str, int]
    choices: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.plugin, self.name = split_fullname(self.fullname)

    def get_defaultsetting(self) -> dict[str, int]:
        return {k: 1 for k, v in self.defaultsetting.items() if v}

    def get_setting(self, config: ConfigStore) -> Optional[dict[str, int]]:
        raw = config.get_config(self.plugin, self.name)
        if raw is None:
            return None
        return {n: 1 for n in raw.split(",") if n}

    def write_setting(self, config: ConfigStore, data: Iterable[str] | Mapping[str, Any]) -> str:
        """Persist a selection.  Returns an error message, or "" on success."""
        if isinstance(data, Mapping):
            selected = [k for k, v in data.items() if v and str(v) != "0"]
        else:
            selected = [str(d) for d in data]
        unknown = sorted(set(selected).difference(self.choices))
        if unknown:
            logger.warning("Rejected filters for %s: %s", self.fullname, unknown)
            return "Unknown filter: " + ", ".join(unknown)
        config.set_config(self.name, ",".join(sorted(set(selected))), self.plugin)
        return ""

    def export(self, config: ConfigStore) -> dict[str, Any]:
        current = self.get_setting(config)
        if current is None:
            current = self.get_defaultsetting()
        return {
            "name": self.fullname,
            "visiblename": self.visiblename,
            "description": self.description,
            "type": "pickfilters",
            "choices": [
                {"value": c, "checked": c in current} for c in self.choices
            ],
            "default": sorted(self.get_defaultsetting()),
        }


@dataclass
class AdminSettingsPage:
    """A named page of settings for one plugin."""

    name: str
    visiblename: str
    required_capability: str = "moodle/site:config"
    settings: list[AdminSettingPickFilters] = field(default_factory=list)

    def add(self, setting: AdminSettingPickFilters) -> None:
        if any(s.fullname == setting.fullname for s in self.settings):
            raise ValueError(f"Duplicate setting {setting.fullname}")
        self.settings.append(setting)

    def get(self, fullname: str) -> AdminSettingPickFilters:
        for setting in self.settings:
            if setting.fullname == fullname:
                return setting
        raise KeyError(fullname)

    def apply_defaults(self, config: ConfigStore) -> list[str]:
        """Write the default of every setting that has never been saved."""
        applied = []
        for setting in self.settings:
            if config.is_set(setting.plugin, setting.name):
                continue
            error = setting.write_setting(config, setting.get_defaultsetting())
            if error:
                logger.warning("Default for %s not applied: %s", setting.fullname, error)
                continue
            applied.append(setting.fullname)
        return applied

    def export(self, config: ConfigStore) -> dict[str, Any]:
        return {
            "name": self.name,
            "visiblename": self.visiblename,
            "settings": [s.export(config) for s in self.settings],
        }
