"""
Catalog Endpoint
Returns paginated, searchable library listings
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Path
from app.api.deps import get_addon
from app.models.stremio import CatalogResponse
from app.services.addon import AddonService, NotFoundError
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

STREMIO_TYPES = ("movie", "series")


@router.get("/{token}/catalog/{type}/{id}.json")
@router.get("/{token}/catalog/{type}/{id}/{extra}.json")
async def get_catalog(
    type: str = Path(..., description="Content type: movie or series"),
    id: str = Path(..., description="Catalog ID (Jellyfin library id)"),
    extra: Optional[str] = None,
    addon: AddonService = Depends(get_addon),
):
    """
    Return one page of a library catalog

    Args:
        type: "movie" or "series"
        id: Library id declared in the manifest
        extra: Optional "skip=N&search=term" segment
    """
    if type not in STREMIO_TYPES:
        raise HTTPException(status_code=400, detail="Invalid catalog type")

    try:
        metas = await addon.catalog(type, id, extra)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return CatalogResponse(metas=metas).model_dump(exclude_none=True)
