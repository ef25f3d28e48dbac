"""Drag-and-drop markers question type: admin settings and marker text."""

from __future__ import annotations

import logging
from typing import Optional

from lms_plugins.admin.filters import FilterRegistry
from lms_plugins.admin.settings import AdminSettingPickFilters, AdminSettingsPage, ConfigStore
from lms_plugins.host.strings import StringManager

logger = logging.getLogger(__name__)

COMPONENT = "qtype_ddmarker"
SETTINGS_PAGE = "qtypesettingddmarker"
ENABLEFILTERS = f"{COMPONENT}/enablefilters"
DEFAULT_FILTERS = {"mathjaxloader": 1}


def register_settings(
    page: AdminSettingsPage,
    hassiteconfig: bool,
    strings: Optional[StringManager] = None,
    filters: Optional[FilterRegistry] = None,
) -> None:
    """Add the plugin's settings to *page* for users who may configure the site."""
    if not hassiteconfig:
        return
    strings = strings or StringManager()
    filters = filters or FilterRegistry.with_defaults()
    page.add(AdminSettingPickFilters(
        ENABLEFILTERS,
        strings.get_string("enablefilters", COMPONENT),
        strings.get_string("enablefilters_desc", COMPONENT),
        dict(DEFAULT_FILTERS),
        filters.available(),
    ))


def enabled_filters(config: ConfigStore) -> list[str]:
    """Filters chosen for marker text; the defaults until the setting is saved."""
    raw = config.get_config(COMPONENT, "enablefilters")
    if raw is None:
        return sorted(k for k, v in DEFAULT_FILTERS.items() if v)
    return [name for name in raw.split(",") if name]


def format_marker_text(text: str, config: ConfigStore, filters: FilterRegistry, *, lang: str = "en") -> str:
    return filters.apply(text, enabled_filters(config), lang=lang)
