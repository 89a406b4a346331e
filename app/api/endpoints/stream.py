"""
Stream Endpoint
Resolves Jellyfin media sources for Jellyfin ids and IMDb ids
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Path
from app.api.deps import get_addon
from app.core.config import settings
from app.models.stremio import StreamResponse
from app.services.addon import AddonService, NotFoundError
from app.utils.helpers import parse_stream_id

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{token}/stream/{type}/{id}.json")
async def get_streams(
    type: str = Path(..., description="Content type: movie or series"),
    id: str = Path(..., description="Prefixed Jellyfin id, tt123 or tt123:season:episode"),
    addon: AddonService = Depends(get_addon),
):
    """
    Return streams for an item

    Movies match "tt<id>", series episodes "tt<id>:<season>:<episode>", and
    any type accepts a prefixed Jellyfin id.
    """
    try:
        stream_id = parse_stream_id(id, settings.ID_PREFIX)
    except ValueError:
        raise HTTPException(status_code=404, detail="Stream not found")

    if stream_id.imdb_id:
        is_episode = stream_id.season is not None
        if type not in ("movie", "series") or is_episode != (type == "series"):
            raise HTTPException(status_code=404, detail="Stream not found")

    try:
        streams = await addon.streams(stream_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info(f"Stream {type}/{id} resolved {len(streams)} streams")
    return StreamResponse(streams=streams).model_dump()
