"""Application administration REST API endpoints."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from core.dependencies import AppContext, get_context
from core.errors import DiscoveryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _detail(context: AppContext, application_id: str) -> dict:
    application = context.registry.find_by_id(application_id)
    if application is None:
        raise HTTPException(status_code=404, detail=f"Application '{application_id}' not found")

    descriptor = application.descriptor
    return {
        **application.info().to_dict(),
        "version": str(descriptor.version),
        "configVersion": descriptor.config_version,
        "credits": descriptor.credits.model_dump(),
        "path": str(application.resolved_path),
    }


@router.get("/")
async def list_applications(context: AppContext = Depends(get_context)):
    """List installed applications and whether each one is loaded."""
    try:
        installed = context.registry.list_installed_identifiers()
    except DiscoveryError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Cannot read installed applications")

    loaded = set(context.registry.loaded_ids())
    return {
        "applications": [
            {"id": application_id, "loaded": application_id in loaded}
            for application_id in installed
        ]
    }


@router.get("/{application_id}")
async def get_application(application_id: str, context: AppContext = Depends(get_context)):
    """Get detailed information about a loaded application."""
    return _detail(context, application_id)


@router.post("/{application_id}/install")
async def install_application(application_id: str, context: AppContext = Depends(get_context)):
    """Load an application that was copied into the install root after startup."""
    if context.registry.find_by_id(application_id) is not None:
        raise HTTPException(status_code=409, detail=f"Application '{application_id}' is already loaded")

    application = await asyncio.to_thread(context.registry.install, application_id)
    if application is None:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to install application '{application_id}'. Check logs for details.",
        )
    return {
        "message": f"Application '{application_id}' installed",
        "application": _detail(context, application_id),
    }


@router.post("/{application_id}/uninstall")
async def uninstall_application(application_id: str, context: AppContext = Depends(get_context)):
    """Unload an application. Its files stay on disk."""
    if not await asyncio.to_thread(context.registry.uninstall, application_id):
        raise HTTPException(status_code=404, detail=f"Application '{application_id}' not found")
    return {"message": f"Application '{application_id}' uninstalled"}


@router.delete("/{application_id}/cache")
async def clear_application_cache(application_id: str, context: AppContext = Depends(get_context)):
    """Drop cached icon renditions so they are regenerated on next request."""
    try:
        cleared = context.cache.clear(application_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"cleared": cleared}
