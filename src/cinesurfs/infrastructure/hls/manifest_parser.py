"""HLS master playlist parsing (``#EXT-X-STREAM-INF`` -> quality variants)."""

from __future__ import annotations

from urllib.parse import urljoin

import m3u8
import structlog

from cinesurfs.domain.entities import AUTO_QUALITY, QualityVariant
from cinesurfs.domain.exceptions import ManifestParseError

log = structlog.get_logger(__name__)

_HEADER = "#EXTM3U"


def _first_non_blank_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped.lstrip("\ufeff")
    return ""


def _quality_label(resolution: tuple[int, int] | None) -> str:
    if resolution and len(resolution) == 2 and resolution[1]:
        return f"{resolution[1]}p"
    return AUTO_QUALITY


def parse_variants(text: str, base_url: str) -> list[QualityVariant]:
    """Extract one variant per sub-stream of a master playlist.

    Labels come from the ``RESOLUTION`` height (``"720p"``), or ``"Auto"``
    when absent. URIs are resolved against *base_url*. A media playlist
    (no sub-streams) yields ``[]``.

    Raises:
        ManifestParseError: *text* is not an M3U8 document.
    """
    if _first_non_blank_line(text) != _HEADER:
        raise ManifestParseError("manifest does not start with #EXTM3U")

    try:
        playlist = m3u8.loads(text, uri=base_url)
    except Exception as exc:  # m3u8 raises a mix of ValueError/ParseError
        raise ManifestParseError(f"unparseable manifest: {exc}") from exc

    variants: list[QualityVariant] = []
    for stream in playlist.playlists:
        if not stream.uri:
            continue
        label = _quality_label(stream.stream_info.resolution)
        variants.append(QualityVariant(quality=label, url=urljoin(base_url, stream.uri)))

    log.debug("manifest_parsed", base_url=base_url, variants=len(variants))
    return variants
