"""
API Routers
===========
Each router handles a specific surface of the API.
"""
from . import admin, fragments, health, reports, service

__all__ = ["admin", "fragments", "health", "reports", "service"]
