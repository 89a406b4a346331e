"""
Stremio Protocol Models
Pydantic models for Stremio addon protocol
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Literal, Union

StremioType = Literal["movie", "series"]


class CatalogExtra(BaseModel):
    """Extra query parameter a catalog accepts"""
    name: str
    isRequired: bool = False


class ManifestCatalog(BaseModel):
    """Catalog definition in manifest"""
    type: StremioType
    id: str
    name: str
    extra: List[CatalogExtra] = Field(default_factory=list)


class ManifestResource(BaseModel):
    """Resource restricted to specific types and id prefixes"""
    name: str
    types: List[str]
    idPrefixes: List[str]


class Manifest(BaseModel):
    """Stremio addon manifest"""
    id: str = "com.stremio.jellio"
    version: str
    name: str
    description: str

    resources: List[Union[str, ManifestResource]]
    types: List[str] = ["movie", "series"]
    idPrefixes: List[str]
    contactEmail: str

    catalogs: List[ManifestCatalog]

    behaviorHints: dict = {"configurable": True}


class MetaPreview(BaseModel):
    """Catalog item (poster) metadata"""
    id: str  # IMDB ID or prefixed Jellyfin ID
    type: StremioType
    name: str
    poster: Optional[str] = None
    posterShape: str = "poster"
    background: Optional[str] = None
    logo: Optional[str] = None
    genres: Optional[List[str]] = None
    description: Optional[str] = None
    releaseInfo: Optional[str] = None
    imdbRating: Optional[str] = None


class Video(BaseModel):
    """Episode entry of a series meta"""
    id: str
    title: str
    thumbnail: Optional[str] = None
    available: bool = True
    season: int = 0
    episode: int = 0
    overview: Optional[str] = None
    released: Optional[str] = None


class Meta(MetaPreview):
    """Full item metadata"""
    runtime: Optional[str] = None
    released: Optional[str] = None
    videos: Optional[List[Video]] = None


class Stream(BaseModel):
    """Playable stream option"""
    url: str
    name: str
    description: str


class CatalogResponse(BaseModel):
    """Catalog endpoint response"""
    metas: List[MetaPreview]


class MetaResponse(BaseModel):
    """Meta endpoint response"""
    meta: Meta


class StreamResponse(BaseModel):
    """Stream endpoint response"""
    streams: List[Stream]


class PlaybackProgressRequest(BaseModel):
    """Progress report sent by the playing client"""
    itemId: str
    positionTicks: int
    isPaused: bool = False


class PlaybackStopRequest(BaseModel):
    """Stop report sent by the playing client"""
    itemId: str
    positionTicks: int
