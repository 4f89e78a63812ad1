"""Port for resolving embed pages to manifest URLs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StreamResolverPort(Protocol):
    """Drives an embed page until a streaming manifest request is observed.

    Implementations own one disposable browser session per call.
    """

    @property
    def active_sessions(self) -> int:
        """Number of browser sessions currently open."""
        ...

    async def resolve(self, embed_url: str) -> str | None:
        """Return the first observed manifest URL, or None when none appeared.

        Raises ResolutionFatalError on launch or navigation failure.
        """
        ...
