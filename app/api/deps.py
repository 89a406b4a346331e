"""
Request Dependencies
Resolves the configuration token into an authorized addon service
"""
import logging
from typing import AsyncIterator, Callable
from fastapi import Depends, HTTPException, Path
from app.services.addon import AddonService
from app.services.host import HostClient
from app.services.jellyfin import JellyfinClient
from app.utils.token import decode_config, resolve_access_token

logger = logging.getLogger(__name__)


def get_host_factory() -> Callable[[str], HostClient]:
    """Factory building a host connection from an access token"""
    return JellyfinClient


async def get_addon(
    token: str = Path(..., description="User configuration token"),
    host_factory: Callable[[str], HostClient] = Depends(get_host_factory),
) -> AsyncIterator[AddonService]:
    """
    Authorize the request and provide an AddonService for it

    The host connection lives for the duration of the request.
    """
    config = decode_config(token)
    if not config:
        raise HTTPException(status_code=401, detail="Invalid configuration token")

    access_token = resolve_access_token(config)
    if not access_token:
        raise HTTPException(status_code=401, detail="Configuration token has no usable access token")

    host = host_factory(access_token)
    try:
        user = await host.get_current_user()
        if user is None:
            raise HTTPException(status_code=401, detail="Jellyfin rejected the configured access token")
        yield AddonService(host, user, config)
    finally:
        await host.close()
