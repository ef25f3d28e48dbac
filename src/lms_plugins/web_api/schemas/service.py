"""
Service Schemas
===============
One call of a batched web-service request and its result.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ServiceCall(BaseModel):
    """A single web-service call inside a batch"""

    index: int = Field(default=0, description="Position of the call in the batch")
    methodname: str = Field(..., description="Registered service name")
    args: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "index": 0,
                "methodname": "mod_quiz_get_edit_grading_page_data",
                "args": {"quizid": 1},
            }
        }


class ServiceResult(BaseModel):
    """Outcome of one call: data on success, exception details on failure"""

    error: bool = Field(..., description="True when the call failed")
    data: Any = Field(default=None)
    exception: Optional[Dict[str, Any]] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "error": True,
                "exception": {"errorcode": "nopermissions", "message": "..."},
            }
        }
