"""Group toolbar widgets."""
from .group_selector import GroupSelector

__all__ = ["GroupSelector"]
