"""The admin settings tree: one page per plugin that has settings."""

from __future__ import annotations

from typing import Callable, Optional

from lms_plugins.admin.settings import AdminSettingsPage
from lms_plugins.host.store import Platform
from lms_plugins.host.strings import StringManager
from lms_plugins.model import CAP_SITE_CONFIG
from lms_plugins.model.entities import User
from lms_plugins.qtype import ddmarker

# page name -> (component, settings callback)
PLUGIN_SETTINGS: dict[str, tuple[str, Callable[..., None]]] = {
    ddmarker.SETTINGS_PAGE: (ddmarker.COMPONENT, ddmarker.register_settings),
}


def build_admin_tree(platform: Platform, user: User,
                     strings: Optional[StringManager] = None) -> dict[str, AdminSettingsPage]:
    strings = strings or StringManager()
    hassiteconfig = platform.has_capability(CAP_SITE_CONFIG, platform.context_system(), user)
    tree = {}
    for name, (component, register) in PLUGIN_SETTINGS.items():
        page = AdminSettingsPage(name, strings.get_string("pluginname", component))
        register(page, hassiteconfig, strings, platform.filters)
        tree[name] = page
    return tree


def apply_all_defaults(platform: Platform, strings: Optional[StringManager] = None) -> list[str]:
    """Write defaults for every setting never saved (site install/upgrade)."""
    strings = strings or StringManager()
    applied = []
    for name, (component, register) in PLUGIN_SETTINGS.items():
        page = AdminSettingsPage(name, strings.get_string("pluginname", component))
        register(page, True, strings, platform.filters)
        applied.extend(page.apply_defaults(platform.config))
    return applied
