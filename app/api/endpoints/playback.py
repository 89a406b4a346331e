"""
Playback Endpoints
Receive progress and stop reports from the playing Stremio client
"""
import logging
from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from app.api.deps import get_addon
from app.models.stremio import PlaybackProgressRequest, PlaybackStopRequest
from app.services.addon import AddonService, BadRequestError, NotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/{token}/playback/progress")
async def report_progress(
    request: PlaybackProgressRequest,
    addon: AddonService = Depends(get_addon),
):
    """Report playback position; the shadow session shows the item as playing"""
    try:
        await addon.report_progress(request.itemId, request.positionTicks, request.isPaused)
    except BadRequestError as e:
        return _error(400, str(e))
    except NotFoundError as e:
        return _error(404, str(e))
    return Response(status_code=200)


@router.post("/{token}/playback/stop")
async def report_stop(
    request: PlaybackStopRequest,
    addon: AddonService = Depends(get_addon),
):
    """Report playback stop; the shadow session goes back to idle"""
    try:
        await addon.report_stop(request.itemId, request.positionTicks)
    except BadRequestError as e:
        return _error(400, str(e))
    except NotFoundError as e:
        return _error(404, str(e))
    return Response(status_code=200)
