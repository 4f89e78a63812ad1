"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from cinesurfs.application.use_cases import VideoLinksUseCase
from cinesurfs.infrastructure.browser.stream_resolver import PlaywrightStreamResolver
from cinesurfs.infrastructure.embeds.sources import EmbedSourceRegistry, normalize_id
from cinesurfs.infrastructure.hls.manifest_parser import parse_variants
from cinesurfs.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

# Longer than the worst-case resolution (navigation x2 + frame wait + dwell).
_DRAIN_TIMEOUT_SECONDS = 120.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (manifest fetches + relay)
        2. Embed source registry
        3. Stream resolver (browser sessions are per call, nothing launched here)
        4. Video links use case
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 2) Embed sources
    state.embed_sources = EmbedSourceRegistry(config.sources)
    log.info("embed_sources_loaded", sources=state.embed_sources.names)

    # 3) Stream resolver
    state.stream_resolver = PlaywrightStreamResolver.from_config(config)
    log.info(
        "stream_resolver_initialized",
        headless=config.playwright_headless,
        max_sessions=config.resolver.max_sessions,
        dwell_seconds=config.resolver.dwell_seconds,
    )

    # 4) Use case
    state.video_links_uc = VideoLinksUseCase(
        sources=state.embed_sources,
        resolver=state.stream_resolver,
        http_client=state.http_client,
        normalize_id=normalize_id,
        parse_manifest=parse_variants,
    )

    state.graceful_shutdown.mark_ready()
    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.graceful_shutdown.wait_for_drain(timeout=_DRAIN_TIMEOUT_SECONDS)

        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
