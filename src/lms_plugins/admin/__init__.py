"""
Admin settings
==============
Settings pages, the setting types plugins register on them and the plugin
configuration store they write to.
"""
from .filters import FilterRegistry, TextFilter
from .settings import AdminSettingPickFilters, AdminSettingsPage, ConfigStore

__all__ = [
    "AdminSettingPickFilters",
    "AdminSettingsPage",
    "ConfigStore",
    "FilterRegistry",
    "TextFilter",
]
