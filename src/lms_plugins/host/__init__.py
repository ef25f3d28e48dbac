"""
Minimal host platform.

The plugins are glue: they read session state, check capabilities, look up
groups and render templates.  This package provides just enough of those
services, held in process memory, for the plugins to run and be tested.
"""
from .renderer import Renderer
from .session import SessionStore
from .store import Platform
from .strings import StringManager

__all__ = ["Platform", "Renderer", "SessionStore", "StringManager"]
