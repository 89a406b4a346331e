"""
Jellyfin Models
Pydantic models for the Jellyfin items, libraries and sessions this addon reads
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_pascal

# Jellyfin BaseItemKind values
MOVIE = "Movie"
SERIES = "Series"
EPISODE = "Episode"

# Jellyfin CollectionType values
COLLECTION_MOVIES = "movies"
COLLECTION_TVSHOWS = "tvshows"

# Jellyfin sends 7 fractional digits, Python datetimes hold 6
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


class JellyfinModel(BaseModel):
    """Base model reading Jellyfin's PascalCase JSON"""
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
    )


def _trim_fraction(value: Any) -> Any:
    if isinstance(value, str):
        return _EXTRA_FRACTION.sub(r"\1", value)
    return value


class MediaStream(JellyfinModel):
    """A single video, audio or subtitle stream inside a media source"""
    type: str
    codec: Optional[str] = None
    language: Optional[str] = None
    color_transfer: Optional[str] = None
    color_space: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class MediaSource(JellyfinModel):
    """A playable file or version of an item"""
    id: str
    name: Optional[str] = None
    size: Optional[int] = None
    media_streams: List[MediaStream] = Field(default_factory=list)


class LibraryItem(JellyfinModel):
    """Movie, series or episode as returned by Jellyfin's item endpoints"""
    id: str
    name: str = ""
    type: str = ""
    overview: Optional[str] = None
    premiere_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    provider_ids: Dict[str, str] = Field(default_factory=dict)
    genres: List[str] = Field(default_factory=list)
    community_rating: Optional[float] = None
    run_time_ticks: Optional[int] = None
    image_tags: Dict[str, str] = Field(default_factory=dict)
    backdrop_image_tags: List[str] = Field(default_factory=list)
    index_number: Optional[int] = None
    parent_index_number: Optional[int] = None
    series_id: Optional[str] = None
    is_folder: bool = False
    media_sources: List[MediaSource] = Field(default_factory=list)

    @field_validator("premiere_date", "end_date", mode="before")
    @classmethod
    def trim_fraction(cls, value):
        return _trim_fraction(value)

    @field_validator("provider_ids", "image_tags", "genres", "backdrop_image_tags",
                     "media_sources", mode="before")
    @classmethod
    def none_as_empty(cls, value, info):
        if value is None:
            return [] if info.field_name in ("genres", "backdrop_image_tags", "media_sources") else {}
        return value

    @property
    def imdb_id(self) -> Optional[str]:
        """Imdb provider id, matched case-insensitively on the provider name"""
        for key, value in self.provider_ids.items():
            if key.lower() == "imdb" and value:
                return value
        return None


class Library(JellyfinModel):
    """A user view (top level library) such as Movies or Shows"""
    id: str
    name: str
    collection_type: Optional[str] = None


class User(JellyfinModel):
    """Jellyfin user resolved from the configured access token"""
    id: str
    name: str = ""


class PlayState(BaseModel):
    """What the shadow session reports as currently playing"""
    item_id: str
    position_ticks: int = 0
    is_paused: bool = False
    can_seek: bool = True
    media_source_id: Optional[str] = None


class Session(JellyfinModel):
    """A live session in Jellyfin's session list"""
    id: str
    user_id: Optional[str] = None
    device_id: str = ""
    device_name: str = ""
    client: Optional[str] = None
    last_activity_date: Optional[datetime] = None
    play_state: Optional[PlayState] = None

    @model_validator(mode="before")
    @classmethod
    def from_jellyfin(cls, data: Any) -> Any:
        # Jellyfin splits playback into PlayState and NowPlayingItem
        if not isinstance(data, dict) or ("PlayState" not in data and "NowPlayingItem" not in data):
            return data
        data = dict(data)
        raw_state = data.pop("PlayState", None) or {}
        now_playing = data.pop("NowPlayingItem", None) or {}
        if now_playing.get("Id"):
            data["play_state"] = PlayState(
                item_id=now_playing["Id"],
                position_ticks=raw_state.get("PositionTicks") or 0,
                is_paused=bool(raw_state.get("IsPaused")),
                can_seek=raw_state.get("CanSeek", True),
                media_source_id=raw_state.get("MediaSourceId"),
            )
        return data

    @field_validator("last_activity_date", mode="before")
    @classmethod
    def trim_fraction(cls, value):
        return _trim_fraction(value)


class ItemQuery(BaseModel):
    """Library search handed to the host; None means unrestricted"""
    include_item_types: List[str] = Field(default_factory=list)
    recursive: bool = True
    parent_id: Optional[str] = None
    ancestor_ids: List[str] = Field(default_factory=list)
    provider_ids: Dict[str, str] = Field(default_factory=dict)
    parent_index_number: Optional[int] = None
    index_number: Optional[int] = None
    search_term: Optional[str] = None
    sort_by: List[Tuple[str, str]] = Field(default_factory=list)
    start_index: int = 0
    limit: Optional[int] = None
    fields: List[str] = Field(default_factory=list)
