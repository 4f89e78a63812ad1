"""Domain exceptions for stream resolution and media relay."""

from __future__ import annotations


class CineSurfsError(Exception):
    """Base class for all proxy errors."""


class UnknownSourceError(CineSurfsError):
    """Raised when a source token is not in the configured embed sources.

    Client error: reported immediately, no resolution attempt is made.
    """

    def __init__(self, source: str) -> None:
        super().__init__(f"Unknown source: {source!r}")
        self.source = source


class ResolutionError(CineSurfsError):
    """Base error for a resolution attempt that cannot produce variants.

    ``stage`` names the step that failed (``launch``, ``outer_page``,
    ``nested_page``, ``manifest_fetch``, ``manifest_parse``).
    """

    stage: str = "resolve"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ResolutionFatalError(ResolutionError):
    """Browser launch or navigation failed; the attempt is aborted."""


class ManifestFetchError(ResolutionError):
    """A manifest URL was observed but could not be fetched."""

    stage = "manifest_fetch"


class ManifestParseError(ResolutionError):
    """The fetched document is not a structurally valid playlist."""

    stage = "manifest_parse"


class RelayFetchError(CineSurfsError):
    """The relay upstream failed before any bytes were streamed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
