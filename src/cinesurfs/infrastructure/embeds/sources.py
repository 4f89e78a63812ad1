"""Embed source registry: source token + title id -> upstream embed page."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from cinesurfs.domain.entities import EmbedTarget, QualityVariant
from cinesurfs.domain.exceptions import UnknownSourceError

log = structlog.get_logger(__name__)

_IMDB_PREFIX = "tt"


def normalize_id(raw: str | None) -> str:
    """Trim *raw* and strip one leading IMDb ``tt`` prefix.

    >>> normalize_id(" tt0133093 ")
    '0133093'
    >>> normalize_id("603")
    '603'
    """
    if not raw:
        return ""
    cleaned = raw.strip()
    if cleaned.startswith(_IMDB_PREFIX):
        return cleaned[len(_IMDB_PREFIX) :]
    return cleaned


def normalize_source(source: str | None) -> str:
    return (source or "").strip().lower()


class EmbedSourceRegistry:
    """Ordered mapping of source names to URL templates with an ``{id}`` slot.

    Iteration order is fallback priority order.
    """

    def __init__(self, templates: Mapping[str, str]) -> None:
        self._templates: dict[str, str] = {
            normalize_source(name): template for name, template in templates.items()
        }

    @property
    def names(self) -> list[str]:
        return list(self._templates)

    def build(self, source: str, normalized_id: str) -> EmbedTarget:
        key = normalize_source(source)
        template = self._templates.get(key)
        if template is None:
            log.info("embed_source_unknown", source=source, known=self.names)
            raise UnknownSourceError(source)
        return EmbedTarget(source=key, url=template.replace("{id}", normalized_id))

    def fallback(self, normalized_id: str) -> list[QualityVariant]:
        """Raw embed pages for every known source, used when nothing resolved."""
        return [
            QualityVariant.embed(name, template.replace("{id}", normalized_id))
            for name, template in self._templates.items()
        ]
