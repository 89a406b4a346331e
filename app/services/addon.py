"""
Addon Service
Answers Stremio manifest, catalog, meta and stream requests from a Jellyfin library
"""
import logging
import uuid
from typing import List, Optional
from app.core.config import settings
from app.models.config import UserConfig
from app.models.jellyfin import (
    COLLECTION_MOVIES,
    COLLECTION_TVSHOWS,
    EPISODE,
    MOVIE,
    SERIES,
    ItemQuery,
    LibraryItem,
    User,
)
from app.models.stremio import (
    CatalogExtra,
    Manifest,
    ManifestCatalog,
    ManifestResource,
    Meta,
    MetaPreview,
    Stream,
    StremioType,
)
from app.services.formatting import to_meta, to_meta_preview, to_streams
from app.services.host import HostClient
from app.services.sessions import SessionShadow
from app.utils.helpers import StreamId, parse_extra, parse_prefixed_id, parse_skip

logger = logging.getLogger(__name__)

CATALOG_TYPES = {
    COLLECTION_MOVIES: "movie",
    COLLECTION_TVSHOWS: "series",
}
CATALOG_FIELDS = ["ProviderIds", "Overview", "Genres"]
STREAM_FIELDS = ["ProviderIds", "MediaSources", "MediaStreams"]


class NotFoundError(Exception):
    """Requested catalog, library, item or series does not exist for the user"""


class BadRequestError(Exception):
    """Request does not fit the item it refers to"""


def _same_id(left: str, right: str) -> bool:
    """Compare Jellyfin ids regardless of dashes and case"""
    try:
        return uuid.UUID(left) == uuid.UUID(right)
    except ValueError:
        return left == right


class AddonService:
    """Stremio addon resources for one user and configuration"""

    def __init__(
        self,
        host: HostClient,
        user: User,
        config: UserConfig,
        base_url: Optional[str] = None,
    ):
        self.host = host
        self.user = user
        self.config = config
        self.base_url = base_url or settings.public_url
        self.shadow = SessionShadow(host)

    async def manifest(self) -> Manifest:
        """
        Build the manifest with one catalog per configured library

        Raises:
            NotFoundError: If a configured library is not visible to the user
        """
        configured = {library_id.hex for library_id in self.config.libraries}
        libraries = [
            lib for lib in await self.host.get_user_libraries(self.user)
            if uuid.UUID(lib.id).hex in configured
        ]
        if len(libraries) != len(configured):
            raise NotFoundError("Configured libraries are not available to this user")

        catalogs = [
            ManifestCatalog(
                type=CATALOG_TYPES[lib.collection_type],
                id=lib.id,
                name=f"{lib.name} | {self.config.server_name}",
                extra=[
                    CatalogExtra(name="skip", isRequired=False),
                    CatalogExtra(name="search", isRequired=False),
                ],
            )
            for lib in libraries
            if lib.collection_type in CATALOG_TYPES
        ]

        names = ", ".join(lib.name for lib in libraries)
        prefix = settings.ID_PREFIX
        logger.info(f"Manifest generated with {len(catalogs)} catalogs for {self.user.name}")
        return Manifest(
            version=settings.APP_VERSION,
            name=settings.APP_NAME,
            description=f"Play movies and series from {self.config.server_name}: {names}",
            resources=[
                "catalog",
                "stream",
                ManifestResource(name="meta", types=["movie", "series"], idPrefixes=[prefix]),
            ],
            idPrefixes=["tt", prefix],
            contactEmail=settings.CONTACT_EMAIL,
            catalogs=catalogs,
        )

    async def catalog(
        self,
        stremio_type: StremioType,
        catalog_id: str,
        extra: Optional[str] = None,
    ) -> List[MetaPreview]:
        """
        List one page of a library, newest first

        Args:
            stremio_type: Type the catalog was declared with
            catalog_id: Library id
            extra: Stremio extra segment ("skip=100&search=term")

        Raises:
            NotFoundError: If the library is unknown to the user
        """
        libraries = await self.host.get_user_libraries(self.user)
        library = next((lib for lib in libraries if _same_id(lib.id, catalog_id)), None)
        if library is None:
            raise NotFoundError(f"Catalog {catalog_id} not found")

        extras = parse_extra(extra)
        query = ItemQuery(
            include_item_types=[MOVIE, SERIES],
            recursive=True,
            parent_id=library.id,
            search_term=extras.get("search") or None,
            sort_by=[("ProductionYear", "Descending"), ("SortName", "Ascending")],
            start_index=parse_skip(extras),
            limit=settings.CATALOG_PAGE_SIZE,
            fields=CATALOG_FIELDS,
        )
        items = await self.host.get_items(self.user, query)
        logger.info(f"Catalog {library.name} returned {len(items)} items (skip={query.start_index})")
        return [to_meta_preview(item, stremio_type, self.base_url) for item in items]

    async def meta(self, stremio_type: StremioType, item_id: str) -> Meta:
        """
        Full metadata for an item, with its episodes for series

        Raises:
            NotFoundError: If the item does not exist
            BadRequestError: If a series was requested for a non-series item
        """
        item = await self.host.get_item(self.user, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")

        episodes = None
        if stremio_type == "series":
            if item.type != SERIES:
                raise BadRequestError(f"Item {item_id} is a {item.type}, not a series")
            episodes = await self.host.get_episodes(self.user, item.id)

        return to_meta(item, stremio_type, self.base_url, episodes)

    async def streams(self, stream_id: StreamId) -> List[Stream]:
        """Dispatch a parsed stream id to the matching lookup"""
        if stream_id.item_id:
            return await self.streams_for_item(stream_id.item_id)
        if stream_id.season is not None and stream_id.episode is not None:
            return await self.streams_for_episode(stream_id.imdb_id, stream_id.season, stream_id.episode)
        return await self.streams_for_movie(stream_id.imdb_id)

    async def streams_for_item(self, item_id: str) -> List[Stream]:
        """
        Streams for a Jellyfin item id

        Raises:
            NotFoundError: If the item does not exist
        """
        item = await self.host.get_item(self.user, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")
        return await self._streams_result([item])

    async def streams_for_movie(self, imdb_id: str) -> List[Stream]:
        """Streams for every movie copy carrying the IMDb id"""
        query = ItemQuery(
            include_item_types=[MOVIE],
            provider_ids={"Imdb": imdb_id},
            fields=STREAM_FIELDS,
        )
        items = await self.host.get_items(self.user, query)
        return await self._streams_result(items)

    async def streams_for_episode(self, imdb_id: str, season: int, episode: int) -> List[Stream]:
        """
        Streams for an episode of the series carrying the IMDb id

        Raises:
            NotFoundError: If no series carries the IMDb id
        """
        series = await self.host.get_items(
            self.user,
            ItemQuery(include_item_types=[SERIES], provider_ids={"Imdb": imdb_id}),
        )
        if not series:
            raise NotFoundError(f"Series {imdb_id} not found")

        query = ItemQuery(
            include_item_types=[EPISODE],
            ancestor_ids=[s.id for s in series],
            parent_index_number=season,
            index_number=episode,
            fields=STREAM_FIELDS,
        )
        items = await self.host.get_items(self.user, query)
        return await self._streams_result(items)

    async def _streams_result(self, items: List[LibraryItem]) -> List[Stream]:
        streams = [stream for item in items for stream in to_streams(item, self.base_url)]
        if items:
            await self.shadow.on_stream_resolved(self.user, items[0])
        return streams

    async def playback_item(self, item_id: str) -> LibraryItem:
        """
        Resolve the item of a playback report

        Args:
            item_id: "<prefix>:<guid>" identifier sent by the client

        Raises:
            BadRequestError: If the identifier is malformed
            NotFoundError: If the item does not exist
        """
        try:
            jellyfin_id = parse_prefixed_id(item_id, settings.ID_PREFIX)
        except ValueError as e:
            raise BadRequestError(str(e))

        item = await self.host.get_item(self.user, jellyfin_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")
        return item

    async def report_progress(self, item_id: str, position_ticks: int, is_paused: bool) -> None:
        """Validate a progress report and forward it to the session shadow"""
        item = await self.playback_item(item_id)
        await self.shadow.on_progress(self.user, item, position_ticks, is_paused)

    async def report_stop(self, item_id: str, position_ticks: int) -> None:
        """Validate a stop report and forward it to the session shadow"""
        item = await self.playback_item(item_id)
        await self.shadow.on_stop(self.user, item, position_ticks)
