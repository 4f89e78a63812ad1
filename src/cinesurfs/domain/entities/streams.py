"""Domain entities for stream resolution.

Pure value objects, no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

AUTO_QUALITY = "Auto"
EMBED_QUALITY_PREFIX = "Embed-"


@dataclass(frozen=True)
class ResolutionRequest:
    """Inbound request to resolve playable links for a title.

    ``raw_id`` may still carry the IMDb ``tt`` prefix.
    """

    source: str
    raw_id: str


@dataclass(frozen=True)
class EmbedTarget:
    """Concrete upstream embed page for a (source, normalized id) pair."""

    source: str
    url: str


@dataclass(frozen=True)
class QualityVariant:
    """One playable stream paired with a human-readable label.

    Labels are ``"1080p"`` style heights, ``"Auto"`` or
    ``"Embed-<source>"`` for fallback entries.
    """

    quality: str
    url: str

    @classmethod
    def auto(cls, url: str) -> QualityVariant:
        return cls(quality=AUTO_QUALITY, url=url)

    @classmethod
    def embed(cls, source: str, url: str) -> QualityVariant:
        return cls(quality=f"{EMBED_QUALITY_PREFIX}{source}", url=url)

    def to_dict(self) -> dict[str, str]:
        return {"quality": self.quality, "url": self.url}
