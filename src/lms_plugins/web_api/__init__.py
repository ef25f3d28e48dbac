"""
LMS Plugins Web API
===================
FastAPI surface for the plugins: the batched web-service endpoint, modal
fragments, toolbar widgets and admin settings.

Quick Start:
    uvicorn lms_plugins.web_api.main:app --reload
"""
from .main import app

__all__ = ["app"]
