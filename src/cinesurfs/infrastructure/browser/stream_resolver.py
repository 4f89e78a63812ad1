"""Headless-browser stream resolver.

Drives an embed page through its nested player frame and watches network
responses for the first HLS manifest request. One disposable Chromium
session per attempt; every wait is bounded twice (Playwright's own timeout
and an ``asyncio.wait_for`` around it).
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urljoin, urlparse

import structlog
from playwright.async_api import Browser, Page, Playwright, Response, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright_stealth import Stealth

from cinesurfs.domain.exceptions import ResolutionFatalError
from cinesurfs.infrastructure.config.schema import (
    DEFAULT_BROWSER_USER_AGENT,
    AppConfig,
)

log = structlog.get_logger(__name__)

_VIEWPORT = {"width": 1366, "height": 768}


def resolve_frame_src(src: str | None, base_url: str) -> str | None:
    """Turn a player frame ``src`` attribute into an absolute URL.

    ``//host/x`` becomes ``https://host/x``, absolute URLs are kept,
    anything else is joined against *base_url*. Empty -> None.
    """
    if src is None:
        return None
    src = src.strip()
    if not src:
        return None
    if src.startswith("//"):
        return f"https:{src}"
    if urlparse(src).scheme in ("http", "https"):
        return src
    return urljoin(base_url, src)


class PlaywrightStreamResolver:
    """Resolve an embed page to the first manifest URL it requests.

    Usage::

        resolver = PlaywrightStreamResolver(headless=True)
        manifest_url = await resolver.resolve("https://vidsrc.xyz/embed/...")

    ``resolve`` returns None when the player frame never shows up or no
    manifest is requested within the dwell window. Launch and navigation
    failures raise ResolutionFatalError.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        user_agent: str = DEFAULT_BROWSER_USER_AGENT,
        navigation_timeout_ms: int = 30_000,
        frame_timeout_ms: int = 15_000,
        dwell_seconds: float = 25.0,
        frame_selector: str = "iframe#player_iframe",
        manifest_marker: str = ".m3u8",
        stealth: bool = True,
        resolve_on_first_match: bool = True,
        max_sessions: int = 3,
    ) -> None:
        self._headless = headless
        self._user_agent = user_agent
        self._navigation_timeout_ms = navigation_timeout_ms
        self._frame_timeout_ms = frame_timeout_ms
        self._dwell_seconds = dwell_seconds
        self._frame_selector = frame_selector
        self._manifest_marker = manifest_marker
        self._stealth = stealth
        self._resolve_on_first_match = resolve_on_first_match
        self._semaphore = asyncio.Semaphore(max_sessions)
        self._active_sessions = 0

    @classmethod
    def from_config(cls, config: AppConfig) -> PlaywrightStreamResolver:
        rc = config.resolver
        return cls(
            headless=config.playwright_headless,
            user_agent=rc.user_agent,
            navigation_timeout_ms=rc.navigation_timeout_ms,
            frame_timeout_ms=rc.frame_timeout_ms,
            dwell_seconds=rc.dwell_seconds,
            frame_selector=rc.frame_selector,
            manifest_marker=rc.manifest_marker,
            stealth=rc.stealth,
            resolve_on_first_match=rc.resolve_on_first_match,
            max_sessions=rc.max_sessions,
        )

    @property
    def active_sessions(self) -> int:
        return self._active_sessions

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, embed_url: str) -> str | None:
        async with self._semaphore:
            async with self._open_session() as page:
                await self._navigate(page, embed_url, stage="outer_page")

                frame_url = await self._locate_player_frame(page, embed_url)
                if frame_url is None:
                    return None

                manifest_url = await self._observe_manifest(page, frame_url)

        if manifest_url is None:
            log.info("stream_resolver_no_manifest", embed_url=embed_url)
        else:
            log.info(
                "stream_resolver_manifest_found",
                embed_url=embed_url,
                manifest_url=manifest_url,
            )
        return manifest_url

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _open_session(self) -> AsyncIterator[Page]:
        pw: Playwright | None = None
        browser: Browser | None = None
        self._active_sessions += 1
        try:
            try:
                pw = await async_playwright().start()
                browser = await pw.chromium.launch(headless=self._headless)
                context = await browser.new_context(
                    user_agent=self._user_agent,
                    viewport=_VIEWPORT,
                )
                if self._stealth:
                    await Stealth().apply_stealth_async(context)
                page = await context.new_page()
            except PlaywrightError as exc:
                log.error("stream_resolver_launch_failed", error=str(exc))
                raise ResolutionFatalError(
                    f"browser launch failed: {exc}", stage="launch"
                ) from exc

            log.debug("stream_resolver_session_opened", headless=self._headless)
            yield page
        finally:
            await self._close_session(browser, pw)
            self._active_sessions -= 1

    async def _close_session(
        self, browser: Browser | None, pw: Playwright | None
    ) -> None:
        """Release the browser and driver; failures here never mask the result."""
        if browser is not None:
            try:
                await browser.close()
            except Exception:
                log.warning("stream_resolver_browser_close_failed", exc_info=True)
        if pw is not None:
            try:
                await pw.stop()
            except Exception:
                log.warning("stream_resolver_playwright_stop_failed", exc_info=True)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _navigate(self, page: Page, url: str, *, stage: str) -> None:
        try:
            await asyncio.wait_for(
                page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=self._navigation_timeout_ms,
                ),
                timeout=self._navigation_timeout_ms / 1000,
            )
        except (PlaywrightError, TimeoutError) as exc:
            log.warning(
                "stream_resolver_navigation_failed",
                url=url,
                stage=stage,
                error=str(exc) or type(exc).__name__,
            )
            raise ResolutionFatalError(
                f"navigation to {url} failed", stage=stage
            ) from exc

    async def _locate_player_frame(self, page: Page, embed_url: str) -> str | None:
        try:
            handle = await asyncio.wait_for(
                page.wait_for_selector(
                    self._frame_selector,
                    state="attached",
                    timeout=self._frame_timeout_ms,
                ),
                timeout=self._frame_timeout_ms / 1000,
            )
        except (PlaywrightError, TimeoutError):
            log.info(
                "stream_resolver_frame_not_found",
                embed_url=embed_url,
                selector=self._frame_selector,
                timeout_ms=self._frame_timeout_ms,
            )
            return None

        if handle is None:
            return None

        try:
            src = await handle.get_attribute("src")
        except PlaywrightError as exc:
            # Frame element detached between the selector wait and the read.
            log.info(
                "stream_resolver_frame_detached", embed_url=embed_url, error=str(exc)
            )
            return None

        frame_url = resolve_frame_src(src, page.url or embed_url)
        if frame_url is None:
            log.info("stream_resolver_frame_without_src", embed_url=embed_url)
        return frame_url

    async def _observe_manifest(self, page: Page, frame_url: str) -> str | None:
        found: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        def _on_response(response: Response) -> None:
            if found.done():
                return
            if self._manifest_marker in urlparse(response.url).path:
                found.set_result(response.url)

        # Registered before the nested load so its own requests are seen.
        page.on("response", _on_response)
        try:
            try:
                await self._navigate(page, frame_url, stage="nested_page")
            except ResolutionFatalError:
                # A playing stream keeps the network busy; keep what was seen.
                if not found.done():
                    raise
                log.info("stream_resolver_nested_page_unsettled", frame_url=frame_url)
                return found.result()

            if self._resolve_on_first_match:
                await asyncio.wait({found}, timeout=self._dwell_seconds)
            else:
                await asyncio.sleep(self._dwell_seconds)
        finally:
            page.remove_listener("response", _on_response)

        return found.result() if found.done() else None
