"""Streamed upstream fetches for the media relay."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx
import structlog

from cinesurfs.domain.exceptions import RelayFetchError

log = structlog.get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 ._-]")


def sanitize_filename(name: str | None, default: str) -> str:
    """Make *name* safe for a quoted ``Content-Disposition`` filename.

    >>> sanitize_filename('../etc/"passwd"', "video-stream.m3u8")
    '_etc__passwd_'
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", (name or "").strip()).lstrip(".")
    return cleaned or default


@dataclass
class UpstreamStream:
    """An open upstream response whose body has not been read yet."""

    response: httpx.Response
    content_type: str

    async def iter_bytes(self, chunk_size: int = 65_536) -> AsyncIterator[bytes]:
        # Cancellation (client disconnect) lands here too and closes upstream.
        try:
            async for chunk in self.response.aiter_bytes(chunk_size=chunk_size):
                yield chunk
        finally:
            await self.response.aclose()


async def open_upstream(
    http_client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
) -> UpstreamStream:
    """Issue a streamed GET for *url* and return it unread.

    Raises:
        RelayFetchError: network failure or non-2xx status. Nothing has
            been sent to the caller at that point.
    """
    try:
        resp = await http_client.send(
            http_client.build_request("GET", url, headers=headers),
            stream=True,
        )
    except httpx.HTTPError as exc:
        log.warning("relay_upstream_unreachable", url=url, error=str(exc))
        raise RelayFetchError(f"upstream unreachable: {exc}") from exc

    if not resp.is_success:
        await resp.aclose()
        log.warning("relay_upstream_status", url=url, status_code=resp.status_code)
        raise RelayFetchError(
            f"upstream returned HTTP {resp.status_code}",
            status_code=resp.status_code,
        )

    content_type = resp.headers.get("content-type", DEFAULT_CONTENT_TYPE)
    return UpstreamStream(response=resp, content_type=content_type)
