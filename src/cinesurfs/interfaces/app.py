"""FastAPI application factory (create_app)."""

from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.responses import Response

from cinesurfs.infrastructure.config import AppConfig
from cinesurfs.infrastructure.graceful_shutdown import GracefulShutdown
from cinesurfs.interfaces.api.middleware import RequestTrackingMiddleware
from cinesurfs.interfaces.app_state import AppState
from cinesurfs.interfaces.composition import lifespan

USAGE_TEXT = "\n".join(
    [
        "CineSurfs Media Proxy",
        "---------------------",
        "Usage examples:",
        "",
        "Fetch video variants:",
        "  /api/video-links?source=vidsrc&id=tt0133093",
        "  /api/video-links?source=vidlink&id=603",
        "",
        "Download proxy:",
        "  /api/download?url=<m3u8-or-media-url>&filename=MyVideo.mp4",
    ]
)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (HTTP client, resolver, use case) are created in lifespan().
    """
    app = FastAPI(
        title="CineSurfs Media Proxy",
        description="Resolve embed pages to HLS variants and relay remote media",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config
    app.state.graceful_shutdown = GracefulShutdown()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    from cinesurfs.interfaces.api.download.router import router as download_router
    from cinesurfs.interfaces.api.video_links.router import (
        router as video_links_router,
    )

    app.include_router(video_links_router)
    app.include_router(download_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return USAGE_TEXT

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness probe: 200 as long as the process is running."""
        state = cast(AppState, app.state)
        sources = getattr(state, "embed_sources", None)
        resolver = getattr(state, "stream_resolver", None)
        return {
            "status": "ok",
            "sources": sources.names if sources else [],
            "active_sessions": resolver.active_sessions if resolver else 0,
        }

    @app.get("/readyz")
    async def readyz() -> Response:
        """Readiness probe: 200 after startup, 503 while starting or draining."""
        gs: GracefulShutdown = app.state.graceful_shutdown
        if gs.is_ready:
            return JSONResponse({"status": "ready"}, status_code=200)
        return JSONResponse({"status": "not_ready"}, status_code=503)

    app.add_middleware(RequestTrackingMiddleware, tracker=app.state.graceful_shutdown)

    return app
