"""
Health Check Router
===================
Endpoints for health checks and readiness probes.
"""
from fastapi import APIRouter, Depends

from lms_plugins import __version__
from lms_plugins.contracts.load import service_names
from lms_plugins.web_api.deps import Site, get_site

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns OK if the service is running.
    """
    return {"status": "ok", "version": __version__}


@router.get("/ready")
async def readiness_check(site: Site = Depends(get_site)):
    """
    Readiness check endpoint.
    Ready once the site is loaded and the service schemas resolve.
    """
    return {
        "status": "ready",
        "services": len(service_names()),
        "users": len(site.platform.users),
    }
