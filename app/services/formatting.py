"""
Presentation Formatter
Builds Stremio-facing records and display strings from Jellyfin items
"""
from typing import List, Optional
from app.core.config import settings
from app.models.jellyfin import LibraryItem, MediaSource
from app.models.stremio import Meta, MetaPreview, Stream, StremioType, Video
from app.services.quality import resolution_label, video_labels, video_stream
from app.utils.helpers import ticks_to_minutes, unique

CONTINUING = "Continuing"
FALLBACK_DESCRIPTION = "Jellio Stream"
BYTES_PER_GB = 1024.0 * 1024.0 * 1024.0


def image_url(base_url: str, item_id: str, image_type: str) -> str:
    """Jellyfin image endpoint for an item, e.g. image_type="Backdrop/0" """
    return f"{base_url}/Items/{item_id}/Images/{image_type}"


def stream_url(base_url: str, item: LibraryItem, source: MediaSource) -> str:
    """Direct (static) stream URL for one media source of an item"""
    return f"{base_url}/videos/{item.id}/stream?mediaSourceId={source.id}&static=true"


def prefixed_id(item_id: str, prefix: Optional[str] = None) -> str:
    return f"{prefix or settings.ID_PREFIX}:{item_id}"


def release_info(item: LibraryItem, stremio_type: StremioType) -> Optional[str]:
    """
    Release year string for a catalog entry

    Movies get the premiere year. Series get "YYYY-" while running or when
    they ended the same year, and "YYYY-YYYY" once ended in a later year.
    """
    if item.premiere_date is None:
        return None

    premiere_year = str(item.premiere_date.year)
    info = premiere_year
    if stremio_type == "series":
        info += "-"
        if item.status != CONTINUING and item.end_date is not None:
            end_year = str(item.end_date.year)
            if end_year != premiere_year:
                info += end_year
    return info


def to_meta_preview(
    item: LibraryItem,
    stremio_type: StremioType,
    base_url: str,
) -> MetaPreview:
    """
    Convert a Jellyfin item to a Stremio catalog entry

    Args:
        item: Jellyfin item (movie or series)
        stremio_type: Type of the catalog being served
        base_url: Public Jellyfin URL for image links

    Returns:
        MetaPreview object
    """
    rating = item.community_rating
    return MetaPreview(
        id=item.imdb_id or prefixed_id(item.id),
        type=stremio_type,
        name=item.name,
        poster=image_url(base_url, item.id, "Primary"),
        logo=image_url(base_url, item.id, "Logo") if "Logo" in item.image_tags else None,
        background=image_url(base_url, item.id, "Backdrop/0") if item.backdrop_image_tags else None,
        genres=item.genres,
        description=item.overview,
        imdbRating=f"{rating:.1f}" if rating is not None else None,
        releaseInfo=release_info(item, stremio_type),
    )


def to_video(episode: LibraryItem, base_url: str) -> Video:
    """Convert a Jellyfin episode to a series video entry"""
    return Video(
        id=prefixed_id(episode.id),
        title=episode.name,
        thumbnail=image_url(base_url, episode.id, "Primary"),
        available=True,
        episode=episode.index_number or 0,
        season=episode.parent_index_number or 0,
        overview=episode.overview,
        released=episode.premiere_date.isoformat() if episode.premiere_date else None,
    )


def to_meta(
    item: LibraryItem,
    stremio_type: StremioType,
    base_url: str,
    episodes: Optional[List[LibraryItem]] = None,
) -> Meta:
    """Convert a Jellyfin item to full Stremio metadata, with episodes for series"""
    preview = to_meta_preview(item, stremio_type, base_url)
    minutes = ticks_to_minutes(item.run_time_ticks)
    meta = Meta(
        **preview.model_dump(),
        runtime=f"{minutes} min" if minutes else None,
        released=item.premiere_date.isoformat() if item.premiere_date else None,
    )
    if episodes is not None:
        meta.videos = [to_video(episode, base_url) for episode in episodes]
    return meta


def stream_name(item: LibraryItem, source: MediaSource) -> str:
    """
    Stream title shown in the Stremio stream picker

    First line is the title with its premiere year, second line the video
    quality labels (resolution | HDR | DV | codec) when any are known.
    """
    title = item.name
    if item.premiere_date is not None:
        title += f" ({item.premiere_date.year})"

    lines = [title]
    labels = video_labels(video_stream(source))
    if labels:
        lines.append(" | ".join(labels))
    return "\n".join(lines)


def stream_description(item: LibraryItem, source: MediaSource) -> str:
    """
    Stream details: source name, audio languages and codecs, size, resolution

    Falls back to a fixed description when nothing is known about the source.
    """
    parts = []

    if source.name and source.name != item.name:
        parts.append(source.name)

    audio_streams = [s for s in source.media_streams or [] if s.type == "Audio"]
    languages = unique(s.language for s in audio_streams if s.language)
    if languages:
        parts.append(f"Audio: {', '.join(languages)}")
    codecs = unique(s.codec.upper() for s in audio_streams if s.codec)
    if codecs:
        parts.append(f"Codec: {', '.join(codecs)}")

    if source.size and source.size > 0:
        parts.append(f"Size: {source.size / BYTES_PER_GB:.1f} GB")

    resolution = resolution_label(video_stream(source))
    if resolution:
        parts.append(f"Jellyfin {resolution}")

    return "\n".join(parts) if parts else FALLBACK_DESCRIPTION


def to_streams(item: LibraryItem, base_url: str) -> List[Stream]:
    """One Stremio stream per media source of an item"""
    return [
        Stream(
            url=stream_url(base_url, item, source),
            name=stream_name(item, source),
            description=stream_description(item, source),
        )
        for source in item.media_sources
    ]
