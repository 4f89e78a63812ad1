"""Tests for the /api/download relay router."""

from __future__ import annotations

import httpx
import respx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cinesurfs.infrastructure.config import AppConfig
from cinesurfs.interfaces.api.download.router import router

_URL = "https://cdn.example.com/hls/master.m3u8"


def _make_app(config: AppConfig) -> FastAPI:
    """Create a minimal FastAPI app with the download router."""
    app = FastAPI()
    app.include_router(router)
    app.state.config = config
    app.state.http_client = httpx.AsyncClient()
    return app


class TestDownload:
    @respx.mock
    def test_relays_body_and_headers(self, app_config: AppConfig) -> None:
        body = b"#EXTM3U\n" + b"x" * 200_000
        respx.get(_URL).mock(
            return_value=httpx.Response(
                200,
                content=body,
                headers={"content-type": "application/vnd.apple.mpegurl"},
            )
        )
        client = TestClient(_make_app(app_config))

        resp = client.get("/api/download", params={"url": _URL, "filename": "MyVideo.m3u8"})

        assert resp.status_code == 200
        assert resp.content == body
        assert resp.headers["content-type"] == "application/vnd.apple.mpegurl"
        assert (
            resp.headers["content-disposition"] == 'attachment; filename="MyVideo.m3u8"'
        )

    @respx.mock
    def test_default_filename(self, app_config: AppConfig) -> None:
        respx.get(_URL).mock(return_value=httpx.Response(200, content=b"data"))
        client = TestClient(_make_app(app_config))

        resp = client.get("/api/download", params={"url": _URL})

        assert resp.status_code == 200
        assert (
            resp.headers["content-disposition"]
            == 'attachment; filename="video-stream.m3u8"'
        )
        assert resp.headers["content-type"] == "application/octet-stream"

    @respx.mock
    def test_filename_is_sanitized(self, app_config: AppConfig) -> None:
        respx.get(_URL).mock(return_value=httpx.Response(200, content=b"data"))
        client = TestClient(_make_app(app_config))

        resp = client.get(
            "/api/download", params={"url": _URL, "filename": '../a"b.mp4'}
        )

        assert resp.headers["content-disposition"] == 'attachment; filename="_a_b.mp4"'

    def test_missing_url(self, app_config: AppConfig) -> None:
        client = TestClient(_make_app(app_config))

        resp = client.get("/api/download")

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing url"}

    @respx.mock
    def test_upstream_error_status(self, app_config: AppConfig) -> None:
        respx.get(_URL).mock(return_value=httpx.Response(503))
        client = TestClient(_make_app(app_config))

        resp = client.get("/api/download", params={"url": _URL})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Download failed."}

    @respx.mock
    def test_upstream_unreachable(self, app_config: AppConfig) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))
        client = TestClient(_make_app(app_config))

        resp = client.get("/api/download", params={"url": _URL})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Download failed."}

    @respx.mock
    def test_text_content_type_mirrored_verbatim(self, app_config: AppConfig) -> None:
        respx.get(_URL).mock(
            return_value=httpx.Response(
                200, content=b"subtitle", headers={"content-type": "text/plain"}
            )
        )
        client = TestClient(_make_app(app_config))

        resp = client.get("/api/download", params={"url": _URL})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "text/plain"
        assert resp.content == b"subtitle"
