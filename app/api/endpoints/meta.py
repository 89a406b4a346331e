"""
Meta Endpoint
Returns full metadata for library items
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Path
from app.api.deps import get_addon
from app.core.config import settings
from app.models.stremio import MetaResponse
from app.services.addon import AddonService, BadRequestError, NotFoundError
from app.utils.helpers import parse_prefixed_id

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{token}/meta/{type}/{id}.json")
async def get_meta(
    type: str = Path(..., description="Content type: movie or series"),
    id: str = Path(..., description="Prefixed Jellyfin item id"),
    addon: AddonService = Depends(get_addon),
):
    """Return item metadata; series include their episodes as videos"""
    if type not in ("movie", "series"):
        raise HTTPException(status_code=400, detail="Invalid meta type")

    try:
        item_id = parse_prefixed_id(id, settings.ID_PREFIX)
    except ValueError:
        raise HTTPException(status_code=404, detail="Meta not found")

    try:
        meta = await addon.meta(type, item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BadRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return MetaResponse(meta=meta).model_dump(exclude_none=True)
