"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

import httpx
from starlette.datastructures import State

from cinesurfs.application.use_cases import VideoLinksUseCase
from cinesurfs.domain.ports import EmbedSourcesPort, StreamResolverPort
from cinesurfs.infrastructure.config import AppConfig
from cinesurfs.infrastructure.graceful_shutdown import GracefulShutdown


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    stream_resolver: StreamResolverPort

    # Domain ports
    embed_sources: EmbedSourcesPort

    # Application services
    video_links_uc: VideoLinksUseCase

    # Graceful shutdown (request tracking + drain)
    graceful_shutdown: GracefulShutdown
