"""Shared test fixtures for the CineSurfs test suite."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest

from cinesurfs.domain.exceptions import ResolutionError
from cinesurfs.infrastructure.config import AppConfig
from cinesurfs.infrastructure.config.schema import DEFAULT_SOURCES
from cinesurfs.infrastructure.embeds.sources import EmbedSourceRegistry

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360
360/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2800000,RESOLUTION=1280x720
720/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=5000000,RESOLUTION=1920x1080
https://cdn.example.com/abs/1080/index.m3u8
"""

MEDIA_PLAYLIST = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-TARGETDURATION:10
#EXTINF:10.0,
seg-0.ts
#EXTINF:10.0,
seg-1.ts
#EXT-X-ENDLIST
"""


class FakeResolver:
    """StreamResolverPort stand-in that records every embed URL it is given."""

    def __init__(
        self,
        manifest_url: str | None = None,
        *,
        error: ResolutionError | None = None,
    ) -> None:
        self.manifest_url = manifest_url
        self.error = error
        self.calls: list[str] = []

    @property
    def active_sessions(self) -> int:
        return 0

    async def resolve(self, embed_url: str) -> str | None:
        self.calls.append(embed_url)
        if self.error is not None:
            raise self.error
        return self.manifest_url


@pytest.fixture()
def app_config() -> AppConfig:
    """Test configuration with short resolver bounds."""
    return AppConfig.model_validate(
        {
            "environment": "test",
            "resolver": {
                "navigation_timeout_ms": 1_000,
                "frame_timeout_ms": 500,
                "dwell_seconds": 0.5,
                "stealth": False,
            },
        }
    )


@pytest.fixture()
def registry() -> EmbedSourceRegistry:
    return EmbedSourceRegistry(DEFAULT_SOURCES)


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Real httpx.AsyncClient for use with respx mocking."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def master_playlist() -> str:
    return MASTER_PLAYLIST


@pytest.fixture()
def media_playlist() -> str:
    return MEDIA_PLAYLIST


@pytest.fixture()
def fake_resolver_factory() -> type[FakeResolver]:
    return FakeResolver
