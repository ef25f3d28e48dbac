"""
Pydantic Schemas
================
Request and response models for the API.
"""
from .admin import SettingsPageResponse, SettingsWriteRequest
from .fragment import FragmentRequest, FragmentResponse
from .service import ServiceCall, ServiceResult

__all__ = [
    "FragmentRequest",
    "FragmentResponse",
    "ServiceCall",
    "ServiceResult",
    "SettingsPageResponse",
    "SettingsWriteRequest",
]
