"""
Video Quality Inference
Derives human-facing quality labels from raw stream attributes
"""
from typing import List, Optional
from app.models.jellyfin import MediaSource, MediaStream

# Exact matches for common industry resolutions
RESOLUTION_LABELS = {
    (7680, 4320): "8K",
    (3840, 2160): "4K",
    (3840, 2076): "4K",  # Common 4K scope crop
    (2560, 1440): "1440p",
    (1920, 1080): "1080p",
    (1280, 720): "720p",
    (854, 480): "480p",
    (640, 360): "360p",
    (426, 240): "240p",
}

# Width thresholds, widest first
WIDTH_LADDER = [
    (7680, "8K+"),
    (3840, "4K"),
    (2560, "1440p"),
    (1920, "1080p"),
    (1280, "720p"),
    (854, "480p"),
    (640, "360p"),
    (426, "240p"),
]


def human_readable_resolution(width: int, height: int) -> str:
    """
    Map pixel dimensions to a resolution label

    Args:
        width: Frame width in pixels
        height: Frame height in pixels

    Returns:
        Label such as "4K" or "1080p", or "WxH" below the smallest tier
    """
    label = RESOLUTION_LABELS.get((width, height))
    if label:
        return label

    for min_width, tier in WIDTH_LADDER:
        if width >= min_width:
            return tier

    return f"{width}x{height}"


def _contains(value: Optional[str], marker: str) -> bool:
    return bool(value) and marker.lower() in value.lower()


def is_hdr(stream: MediaStream) -> bool:
    """HDR when the transfer names BT.2020/BT.2100, else when the color space is BT.2020"""
    if _contains(stream.color_transfer, "2020") or _contains(stream.color_transfer, "2100"):
        return True
    return _contains(stream.color_space, "2020")


def is_dolby_vision(stream: MediaStream) -> bool:
    """Dolby Vision when the transfer is SMPTE 2084 (PQ); may coincide with HDR"""
    return _contains(stream.color_transfer, "2084")


def video_stream(source: MediaSource) -> Optional[MediaStream]:
    """First video stream of a media source"""
    for stream in source.media_streams or []:
        if stream.type == "Video":
            return stream
    return None


def resolution_label(stream: Optional[MediaStream]) -> Optional[str]:
    """Resolution label for a video stream with known dimensions"""
    if stream is None or not stream.width or not stream.height:
        return None
    return human_readable_resolution(stream.width, stream.height)


def video_labels(stream: Optional[MediaStream]) -> List[str]:
    """
    Quality labels for a video stream in display order

    Returns:
        Subset of [resolution, "HDR", "DV", codec] for the attributes present
    """
    if stream is None:
        return []

    labels = []
    resolution = resolution_label(stream)
    if resolution:
        labels.append(resolution)
    if is_hdr(stream):
        labels.append("HDR")
    if is_dolby_vision(stream):
        labels.append("DV")
    if stream.codec:
        labels.append(stream.codec.upper())
    return labels
