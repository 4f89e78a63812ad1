"""ASGI middleware for in-flight request tracking and access logging."""

from __future__ import annotations

import time

import structlog
from starlette.datastructures import URL
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cinesurfs.infrastructure.graceful_shutdown import GracefulShutdown

log = structlog.get_logger(__name__)


class RequestTrackingMiddleware:
    """Count each HTTP request as in flight until its response is fully sent.

    Written as plain ASGI rather than ``BaseHTTPMiddleware``: the latter
    returns as soon as the response headers exist, while a streamed relay
    body may keep running for minutes afterwards. Shutdown drains on this
    count, so it must cover the whole body.

    Args:
        app: ASGI application.
        tracker: Shared in-flight counter.
    """

    def __init__(self, app: ASGIApp, tracker: GracefulShutdown) -> None:
        self.app = app
        self._tracker = tracker

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        self._tracker.request_started()
        start = time.perf_counter()
        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            self._tracker.request_finished()
            url = URL(scope=scope)
            client = scope.get("client")
            log.info(
                "http_request",
                method=scope["method"],
                path=url.path,
                query=url.query,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=client[0] if client else None,
            )
