"""
Fragment Schemas
================
HTML fragments requested by the overall feedback modal.
"""
from typing import Any, Dict

from pydantic import BaseModel, Field


class FragmentRequest(BaseModel):
    contextid: int = Field(..., description="Context the fragment is rendered in")
    args: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "contextid": 4,
                "args": {"quizId": 1, "gradeItemId": 2},
            }
        }


class FragmentResponse(BaseModel):
    html: str
    js: str = ""
