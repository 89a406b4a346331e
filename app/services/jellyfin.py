"""
Jellyfin API Client
Async client for the Jellyfin REST API, scoped to one user's access token
"""
import aiohttp
import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional
from app.core.config import settings
from app.models.jellyfin import (
    ItemQuery,
    Library,
    LibraryItem,
    PlayState,
    Session,
    User,
)

logger = logging.getLogger(__name__)


class JellyfinError(Exception):
    """Jellyfin could not be reached or answered with an unexpected status"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class JellyfinAuthError(JellyfinError):
    """Jellyfin rejected the access token"""


def _query_params(user: User, query: ItemQuery) -> Dict[str, str]:
    """Translate an ItemQuery into /Items query string parameters"""
    params = {
        "userId": user.id,
        "recursive": "true" if query.recursive else "false",
        "startIndex": str(query.start_index),
    }
    if query.include_item_types:
        params["includeItemTypes"] = ",".join(query.include_item_types)
    if query.parent_id:
        params["parentId"] = query.parent_id
    if query.search_term:
        params["searchTerm"] = query.search_term
    if query.limit is not None:
        params["limit"] = str(query.limit)
    if query.parent_index_number is not None:
        params["parentIndexNumber"] = str(query.parent_index_number)
    if query.index_number is not None:
        params["indexNumber"] = str(query.index_number)
    if query.sort_by:
        params["sortBy"] = ",".join(field for field, _ in query.sort_by)
        params["sortOrder"] = ",".join(order for _, order in query.sort_by)

    fields = list(query.fields)
    if query.provider_ids:
        # /Items cannot filter by provider id value, only by presence
        if "ProviderIds" not in fields:
            fields.append("ProviderIds")
        if any(key.lower() == "imdb" for key in query.provider_ids):
            params["hasImdbId"] = "true"
    if fields:
        params["fields"] = ",".join(fields)
    return params


def _matches(item: LibraryItem, query: ItemQuery) -> bool:
    """Apply the filters Jellyfin's /Items endpoint cannot express"""
    if query.provider_ids:
        own = {key.lower(): value.lower() for key, value in item.provider_ids.items()}
        if not any(own.get(key.lower()) == value.lower() for key, value in query.provider_ids.items()):
            return False
    if query.index_number is not None and item.index_number != query.index_number:
        return False
    if query.parent_index_number is not None and item.parent_index_number != query.parent_index_number:
        return False
    return True


class JellyfinClient:
    """Async client for one Jellyfin server and access token"""

    def __init__(self, access_token: str, base_url: Optional[str] = None):
        self.access_token = access_token
        self.base_url = (base_url or settings.JELLYFIN_URL).rstrip("/")
        self.session: Optional[aiohttp.ClientSession] = None

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.JELLYFIN_TIMEOUT)
            )
        return self.session

    async def close(self):
        """Close aiohttp session"""
        if self.session and not self.session.closed:
            await self.session.close()

    def device_authorization(self, device_id: str, device_name: str) -> str:
        """Authorization header that makes Jellyfin attribute requests to a device"""
        return (
            f'MediaBrowser Client="{settings.APP_NAME}", Device="{device_name}", '
            f'DeviceId="{device_id}", Version="{settings.APP_VERSION}", '
            f'Token="{self.access_token}"'
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        authorization: Optional[str] = None,
    ) -> Optional[Any]:
        """
        Make API request to Jellyfin

        Returns:
            Parsed JSON body ({} for empty bodies), or None on 404

        Raises:
            JellyfinAuthError: On 401/403
            JellyfinError: On timeouts, connection errors and other statuses
        """
        if authorization:
            headers = {"Authorization": authorization}
        else:
            headers = {"X-Emby-Token": self.access_token}
        url = f"{self.base_url}{path}"

        try:
            session = await self.get_session()
            async with session.request(method, url, params=params, json=json, headers=headers) as response:
                if response.status == 404:
                    logger.debug(f"Jellyfin 404 for {method} {path}")
                    return None
                if response.status in (401, 403):
                    raise JellyfinAuthError(
                        f"Jellyfin rejected access token ({response.status})", response.status
                    )
                if response.status >= 400:
                    logger.error(f"Jellyfin API error: {response.status} for {method} {path}")
                    raise JellyfinError(
                        f"Jellyfin returned {response.status} for {path}", response.status
                    )
                if response.status == 204 or response.content_length == 0:
                    return {}
                return await response.json()

        except asyncio.TimeoutError:
            logger.error(f"Jellyfin request timeout: {method} {path}")
            raise JellyfinError(f"Jellyfin request timed out: {path}")
        except aiohttp.ClientError as e:
            logger.error(f"Jellyfin request error for {path}: {e}")
            raise JellyfinError(f"Jellyfin request failed: {e}")

    # Library

    async def get_current_user(self) -> Optional[User]:
        """User owning the access token, None if Jellyfin rejects it"""
        try:
            data = await self._request("GET", "/Users/Me")
        except JellyfinAuthError:
            logger.warning("Jellyfin access token was rejected")
            return None
        return User.model_validate(data) if data else None

    async def get_user_libraries(self, user: User) -> List[Library]:
        """Top level libraries (user views) visible to the user"""
        data = await self._request("GET", "/UserViews", params={"userId": user.id}) or {}
        return [Library.model_validate(view) for view in data.get("Items", [])]

    async def get_item(self, user: User, item_id: str) -> Optional[LibraryItem]:
        """Fully hydrated item (provider ids, media sources, image tags)"""
        data = await self._request("GET", f"/Items/{item_id}", params={"userId": user.id})
        return LibraryItem.model_validate(data) if data else None

    async def get_items(self, user: User, query: ItemQuery) -> List[LibraryItem]:
        """
        Search the user's library

        Ancestor ids are searched one parent at a time; provider id and
        season/episode filters are re-applied on the results.
        """
        parents = query.ancestor_ids or [query.parent_id]
        items: List[LibraryItem] = []
        for parent_id in parents:
            scoped = query.model_copy(update={"parent_id": parent_id})
            data = await self._request("GET", "/Items", params=_query_params(user, scoped)) or {}
            for raw in data.get("Items", []):
                item = LibraryItem.model_validate(raw)
                if _matches(item, query):
                    items.append(item)
        return items

    async def get_episodes(self, user: User, series_id: str) -> List[LibraryItem]:
        """All episodes of a series in season/episode order"""
        data = await self._request(
            "GET",
            f"/Shows/{series_id}/Episodes",
            params={"userId": user.id, "fields": "Overview"},
        ) or {}
        return [LibraryItem.model_validate(raw) for raw in data.get("Items", [])]

    # Sessions

    async def list_sessions(self, user: User) -> List[Session]:
        """Active sessions belonging to the user"""
        data = await self._request("GET", "/Sessions") or []
        sessions = [Session.model_validate(raw) for raw in data]
        return [s for s in sessions if s.user_id and uuid.UUID(s.user_id) == uuid.UUID(user.id)]

    async def create_session(self, user: User, device_name: str) -> Session:
        """
        Register a new device session for the user

        Jellyfin creates a session the first time a device reports its
        capabilities with the user's token.
        """
        device_id = uuid.uuid4().hex
        authorization = self.device_authorization(device_id, device_name)
        await self._request(
            "POST",
            "/Sessions/Capabilities/Full",
            json={
                "PlayableMediaTypes": ["Video"],
                "SupportedCommands": [],
                "SupportsMediaControl": False,
            },
            authorization=authorization,
        )

        data = await self._request("GET", "/Sessions", params={"deviceId": device_id}) or []
        if not data:
            raise JellyfinError(f"Session for device {device_id} was not registered")
        session = Session.model_validate(data[0])
        logger.info(f"Created {device_name} session {session.id} for user {user.name}")
        return session

    async def update_session(self, session: Session, play_state: Optional[PlayState]) -> None:
        """
        Report play state on behalf of the session's device

        A play state reports progress. None reports a stop when the session
        was playing, otherwise it only refreshes the session's activity.
        """
        authorization = self.device_authorization(session.device_id, session.device_name)

        if play_state is not None:
            await self._request(
                "POST",
                "/Sessions/Playing/Progress",
                json={
                    "ItemId": play_state.item_id,
                    "MediaSourceId": play_state.media_source_id,
                    "PositionTicks": play_state.position_ticks,
                    "IsPaused": play_state.is_paused,
                    "CanSeek": play_state.can_seek,
                    "PlayMethod": "DirectStream",
                },
                authorization=authorization,
            )
        elif session.play_state is not None:
            await self._request(
                "POST",
                "/Sessions/Playing/Stopped",
                json={
                    "ItemId": session.play_state.item_id,
                    "MediaSourceId": session.play_state.media_source_id,
                    "PositionTicks": session.play_state.position_ticks,
                },
                authorization=authorization,
            )
        else:
            await self._request(
                "POST",
                "/Sessions/Capabilities",
                params={"playableMediaTypes": "Video", "supportsMediaControl": "false"},
                authorization=authorization,
            )
