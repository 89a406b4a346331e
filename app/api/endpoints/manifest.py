"""
Manifest Endpoint
Returns the Stremio addon manifest with one catalog per configured library
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Response
from app.api.deps import get_addon
from app.services.addon import AddonService, NotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{token}/manifest.json")
async def get_manifest(
    response: Response,
    addon: AddonService = Depends(get_addon),
):
    """
    Return addon manifest for the configured libraries

    The manifest defines what catalogs this addon provides
    """
    # Library names change; avoid stale catalogs in Stremio
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"

    try:
        manifest = await addon.manifest()
    except NotFoundError as e:
        logger.warning(f"Manifest rejected for {addon.user.name}: {e}")
        raise HTTPException(status_code=404, detail=str(e))

    return manifest.model_dump(exclude_none=True)
