"""Panel endpoints: application listing, icons, quick shortcuts and panel settings."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel

from core.dependencies import AppContext, get_context, get_request_username
from core.errors import ApplicationNotFoundError, UnknownRenditionError
from core.panel.renditions import RenditionKind

logger = logging.getLogger(__name__)

router = APIRouter(tags=["panel"])

# URL segment -> rendition kind
ICON_ROUTES = {
    "largeGrid": RenditionKind.LARGE_GRID,
    "smallGrid": RenditionKind.SMALL_GRID,
    "list": RenditionKind.LIST,
}

LOGO_SIZES = {
    "small": 32,
    "medium": 40,
    "large": 128,
}


class QuickShortcutCreate(BaseModel):
    """Request body for pinning an application."""

    id: str


async def _icon_response(context: AppContext, application_id: str, kind: RenditionKind) -> Response:
    try:
        asset = await context.cache.fetch(application_id, kind)
    except (ApplicationNotFoundError, UnknownRenditionError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=asset.data, media_type=asset.media_type)


@router.get("/core/panel/applications")
async def list_applications(context: AppContext = Depends(get_context)):
    """List loaded applications for the launcher."""
    return [info.to_dict() for info in context.registry.list_loaded()]


@router.get("/core/panel/applications/app/{icon_type}/{application_id}")
async def application_icon(icon_type: str, application_id: str, context: AppContext = Depends(get_context)):
    """Serve an application's launcher icon (largeGrid, smallGrid or list)."""
    kind = ICON_ROUTES.get(icon_type)
    if kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown icon type '{icon_type}'")
    return await _icon_response(context, application_id, kind)


@router.get("/core/panel/quick-shortcut/icon/{application_id}")
async def quick_shortcut_icon(application_id: str, context: AppContext = Depends(get_context)):
    """Serve an application's quick-shortcut icon."""
    return await _icon_response(context, application_id, RenditionKind.QUICK_SHORTCUT)


@router.get("/core/panel/quick-shortcuts")
async def quick_shortcuts(
    username: str = Depends(get_request_username),
    context: AppContext = Depends(get_context),
):
    """List the user's pinned applications that are currently loaded."""
    return [shortcut.to_dict() for shortcut in context.panel.quick_shortcuts(username)]


@router.post("/core/panel/quick-shortcuts/create")
async def create_quick_shortcut(
    body: QuickShortcutCreate,
    username: str = Depends(get_request_username),
    context: AppContext = Depends(get_context),
):
    """Pin a loaded application to the user's panel."""
    return {"success": context.panel.pin(username, body.id)}


@router.delete("/core/panel/quick-shortcuts/{application_id}")
async def delete_quick_shortcut(
    application_id: str,
    username: str = Depends(get_request_username),
    context: AppContext = Depends(get_context),
):
    """Unpin an application from the user's panel."""
    return {"success": context.panel.unpin(username, application_id)}


@router.get("/core/panel")
async def panel_settings(
    username: str = Depends(get_request_username),
    context: AppContext = Depends(get_context),
):
    """Get the user's panel widgets, size and side."""
    return context.panel.panel_settings(username)


@router.get("/panel/logo/{size}")
async def instance_logo(size: str, context: AppContext = Depends(get_context)):
    """Serve the instance logo at a panel size."""
    dimension = LOGO_SIZES.get(size)
    if dimension is None:
        raise HTTPException(status_code=404, detail=f"Unknown logo size '{size}'")

    path = context.paths.instance_logo_path(dimension)
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Instance logo not available")
    return FileResponse(path, media_type="image/webp")
