"""Download endpoint: re-stream remote media through the proxy."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from cinesurfs.domain.exceptions import RelayFetchError
from cinesurfs.infrastructure.relay.upstream import open_upstream, sanitize_filename
from cinesurfs.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["download"])


@router.get("/api/download")
async def download(
    request: Request,
    url: str | None = Query(default=None),
    filename: str | None = Query(default=None),
) -> Response:
    """Relay *url* to the caller as an attachment.

    The upstream body is pulled chunk by chunk as the client reads, so large
    media never sits in memory. Upstream failures are reported before any
    bytes are sent.
    """
    state = cast(AppState, request.app.state)
    relay = state.config.relay

    if url is None or not url.strip():
        return JSONResponse(status_code=400, content={"error": "Missing url"})

    safe_filename = sanitize_filename(filename, relay.default_filename)
    log.info("download_request", url=url, filename=safe_filename)

    try:
        upstream = await open_upstream(state.http_client, url.strip())
    except RelayFetchError as exc:
        log.error(
            "download_failed",
            url=url,
            status_code=exc.status_code,
            error=str(exc),
        )
        return JSONResponse(status_code=500, content={"error": "Download failed."})

    log.info(
        "download_streaming",
        url=url,
        filename=safe_filename,
        content_type=upstream.content_type,
    )

    return StreamingResponse(
        upstream.iter_bytes(chunk_size=relay.chunk_size),
        headers={
            "Content-Type": upstream.content_type,
            "Content-Disposition": f'attachment; filename="{safe_filename}"',
        },
    )
