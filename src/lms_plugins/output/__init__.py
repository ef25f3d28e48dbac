"""
Output components
=================
Renderable toolbar widgets shared by report pages.
"""
from .comboboxsearch import ComboboxSearch
from .report_action_bar import ReportActionBar

__all__ = ["ComboboxSearch", "ReportActionBar"]
