"""
Helper Utilities
General purpose utility functions
"""
import re
import uuid
from typing import Dict, Iterable, List, NamedTuple, Optional

TICKS_PER_SECOND = 10_000_000
TICKS_PER_MINUTE = 60 * TICKS_PER_SECOND

_IMDB_EPISODE = re.compile(r"^(tt\d+):(\d+):(\d+)$")
_IMDB_MOVIE = re.compile(r"^(tt\d+)$")


class StreamId(NamedTuple):
    """Parsed stream request identifier"""
    item_id: Optional[str] = None
    imdb_id: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None


def unique(values: Iterable[str]) -> List[str]:
    """
    Remove duplicates keeping first-seen order

    Args:
        values: Strings to deduplicate

    Returns:
        Deduplicated list maintaining original order
    """
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def ticks_to_minutes(ticks: Optional[int]) -> int:
    """Convert .NET ticks (100ns) to whole minutes"""
    return ticks // TICKS_PER_MINUTE if ticks else 0


def ticks_to_seconds(ticks: Optional[int]) -> int:
    """Convert .NET ticks (100ns) to whole seconds"""
    return ticks // TICKS_PER_SECOND if ticks else 0


def parse_extra(extra: Optional[str]) -> Dict[str, str]:
    """
    Parse a Stremio "extra" path segment

    Args:
        extra: "&"-joined key=value pairs, e.g. "skip=100&search=alien"

    Returns:
        Dictionary of pairs; malformed pairs are ignored
    """
    if not extra:
        return {}

    extras = {}
    for pair in extra.split("&"):
        parts = pair.split("=")
        if len(parts) == 2:
            extras[parts[0]] = parts[1]
    return extras


def parse_skip(extras: Dict[str, str]) -> int:
    """Catalog offset from parsed extras, 0 when absent or not an integer"""
    try:
        return int(extras.get("skip", 0))
    except ValueError:
        return 0


def parse_prefixed_id(value: str, prefix: str) -> str:
    """
    Extract the Jellyfin item id from "<prefix>:<guid>"

    Args:
        value: Prefixed identifier
        prefix: Expected id prefix (case-insensitive)

    Returns:
        The item id as 32-char hex, the form Jellyfin uses

    Raises:
        ValueError: If the prefix is missing or the GUID is malformed
    """
    head = f"{prefix}:"
    if not value or not value.lower().startswith(head.lower()):
        raise ValueError(f"Invalid itemId format. Expected '{prefix}:guid'")

    try:
        return uuid.UUID(value[len(head):]).hex
    except ValueError:
        raise ValueError("Invalid GUID format in itemId") from None


def parse_stream_id(value: str, prefix: str) -> StreamId:
    """
    Parse the id of a stream request

    Accepts "<prefix>:<guid>", "tt123" (movie) and "tt123:1:2" (episode).

    Raises:
        ValueError: If the id matches none of those forms
    """
    if value.lower().startswith(f"{prefix}:".lower()):
        return StreamId(item_id=parse_prefixed_id(value, prefix))

    match = _IMDB_EPISODE.match(value)
    if match:
        return StreamId(
            imdb_id=match.group(1),
            season=int(match.group(2)),
            episode=int(match.group(3)),
        )

    match = _IMDB_MOVIE.match(value)
    if match:
        return StreamId(imdb_id=match.group(1))

    raise ValueError(f"Unsupported stream id: {value}")
