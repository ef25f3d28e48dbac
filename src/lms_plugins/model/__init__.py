"""Enums shared across the host layer and the plugin renderers."""

from __future__ import annotations

from enum import IntEnum


class GroupMode(IntEnum):
    """Activity/course group mode."""

    NOGROUPS = 0
    SEPARATEGROUPS = 1
    VISIBLEGROUPS = 2


class ContextLevel(IntEnum):
    """Context levels, lowest number is the outermost."""

    SYSTEM = 10
    COURSE = 50
    MODULE = 70


class TextFormat(IntEnum):
    """Editor text formats."""

    MOODLE = 0
    HTML = 1
    PLAIN = 2
    MARKDOWN = 4


# Capability names checked by the plugins.
CAP_ACCESS_ALL_GROUPS = "moodle/site:accessallgroups"
CAP_SITE_CONFIG = "moodle/site:config"
CAP_QUIZ_MANAGE = "mod/quiz:manage"
CAP_QUIZ_VIEW_REPORTS = "mod/quiz:viewreports"
