"""Video link resolution use case.

source + raw id -> embed page -> headless resolution -> manifest fetch
-> parsed quality variants (or raw embed fallbacks when nothing resolved).
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from cinesurfs.domain.entities import QualityVariant, ResolutionRequest
from cinesurfs.domain.exceptions import ManifestFetchError, ResolutionError
from cinesurfs.domain.ports import EmbedSourcesPort, StreamResolverPort

log = structlog.get_logger(__name__)

_NormalizeFn = Callable[[str], str]
_ParseFn = Callable[[str, str], list[QualityVariant]]


class VideoLinksUseCase:
    def __init__(
        self,
        *,
        sources: EmbedSourcesPort,
        resolver: StreamResolverPort,
        http_client: httpx.AsyncClient,
        normalize_id: _NormalizeFn,
        parse_manifest: _ParseFn,
    ) -> None:
        self._sources = sources
        self._resolver = resolver
        self._http = http_client
        self._normalize_id = normalize_id
        self._parse_manifest = parse_manifest

    async def execute(self, request: ResolutionRequest) -> list[QualityVariant]:
        """Resolve *request* into a non-empty list of variants.

        Raises:
            UnknownSourceError: before any browser work is started.
            ResolutionFatalError: browser launch or navigation failed.
            ManifestFetchError / ManifestParseError: a manifest was seen
                but is unreachable or invalid.
        """
        normalized_id = self._normalize_id(request.raw_id)
        target = self._sources.build(request.source, normalized_id)

        log.info(
            "video_links_resolving",
            source=target.source,
            id=normalized_id,
            embed_url=target.url,
        )

        try:
            manifest_url = await self._resolver.resolve(target.url)
        except ResolutionError as exc:
            log.error(
                "video_links_resolution_failed",
                source=target.source,
                id=normalized_id,
                stage=exc.stage,
                error=str(exc),
            )
            raise

        if manifest_url is None:
            fallback = self._sources.fallback(normalized_id)
            log.info(
                "video_links_fallback",
                source=target.source,
                id=normalized_id,
                stage="not_found",
                variants=len(fallback),
            )
            return fallback

        try:
            text = await self._fetch_manifest(manifest_url, referer=target.url)
            variants = self._parse_manifest(text, manifest_url)
        except ResolutionError as exc:
            log.error(
                "video_links_manifest_failed",
                source=target.source,
                id=normalized_id,
                manifest_url=manifest_url,
                stage=exc.stage,
                error=str(exc),
            )
            raise

        if not variants:
            variants = [QualityVariant.auto(manifest_url)]

        log.info(
            "video_links_resolved",
            source=target.source,
            id=normalized_id,
            stage="parsed",
            variants=len(variants),
        )
        return variants

    async def _fetch_manifest(self, url: str, *, referer: str) -> str:
        try:
            resp = await self._http.get(url, headers={"Referer": referer})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise ManifestFetchError(f"manifest fetch failed: {exc}") from exc
        return resp.text
