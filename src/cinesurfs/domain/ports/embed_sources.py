"""Port for mapping source tokens to upstream embed pages."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cinesurfs.domain.entities import EmbedTarget, QualityVariant


@runtime_checkable
class EmbedSourcesPort(Protocol):
    """Known upstream providers, in fallback priority order."""

    @property
    def names(self) -> list[str]: ...

    def build(self, source: str, normalized_id: str) -> EmbedTarget:
        """Build the embed target or raise UnknownSourceError."""
        ...

    def fallback(self, normalized_id: str) -> list[QualityVariant]:
        """One ``Embed-<source>`` variant per known source."""
        ...
