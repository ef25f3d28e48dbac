"""
Admin Schemas
=============
Reading and writing an admin settings page.
"""
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class SettingsWriteRequest(BaseModel):
    """New values keyed by setting full name (``plugin/name``)"""

    settings: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {"settings": {"qtype_ddmarker/enablefilters": ["mathjaxloader", "multilang"]}}
        }


class SettingsPageResponse(BaseModel):
    name: str
    visiblename: str
    settings: List[Dict[str, Any]] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)
