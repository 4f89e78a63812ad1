"""Video link endpoint: resolve a title on an embed source into playable URLs."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from cinesurfs.domain.entities import ResolutionRequest
from cinesurfs.domain.exceptions import (
    ManifestFetchError,
    ManifestParseError,
    ResolutionError,
    UnknownSourceError,
)
from cinesurfs.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["video-links"])

DEFAULT_SOURCE = "vidsrc"
_FAILURE_MESSAGE = "Failed to fetch video links."


def _failure(status_code: int, stage: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": _FAILURE_MESSAGE, "stage": stage},
    )


@router.get("/api/video-links")
async def video_links(
    request: Request,
    source: str = Query(default=DEFAULT_SOURCE),
    id: str | None = Query(default=None),  # noqa: A002
) -> JSONResponse:
    """Return ``[{"quality": ..., "url": ...}, ...]`` for a title.

    Variants come from the upstream HLS manifest when one is observed;
    otherwise one raw embed page per known source is returned.
    """
    state = cast(AppState, request.app.state)

    if id is None or not id.strip():
        log.info("video_links_missing_id", source=source)
        return JSONResponse(status_code=400, content={"error": "Missing id"})

    log.info("video_links_request", source=source, id=id)

    try:
        variants = await state.video_links_uc.execute(
            ResolutionRequest(source=source, raw_id=id)
        )
    except UnknownSourceError as exc:
        return JSONResponse(
            status_code=400,
            content={"error": "Unknown source", "source": exc.source},
        )
    except (ManifestFetchError, ManifestParseError) as exc:
        return _failure(502, exc.stage)
    except ResolutionError as exc:
        return _failure(500, exc.stage)
    except Exception:
        log.exception("video_links_unexpected_error", source=source, id=id)
        return _failure(500, "unexpected")

    return JSONResponse(content=[v.to_dict() for v in variants])
