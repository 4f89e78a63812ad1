"""Tests for GracefulShutdown request tracking, readiness and drain."""

from __future__ import annotations

import asyncio

import pytest

from cinesurfs.infrastructure.graceful_shutdown import GracefulShutdown


class TestRequestTracking:
    def test_counts_in_flight_requests(self) -> None:
        gs = GracefulShutdown()
        gs.request_started()
        gs.request_started()
        assert gs.active_requests == 2
        gs.request_finished()
        assert gs.active_requests == 1

    def test_never_goes_negative(self) -> None:
        gs = GracefulShutdown()
        gs.request_finished()
        assert gs.active_requests == 0


class TestReadiness:
    def test_not_ready_until_marked(self) -> None:
        gs = GracefulShutdown()
        assert gs.is_ready is False
        gs.mark_ready()
        assert gs.is_ready is True

    @pytest.mark.asyncio
    async def test_not_ready_once_draining(self) -> None:
        gs = GracefulShutdown()
        gs.mark_ready()
        await gs.wait_for_drain(timeout=0.1)
        assert gs.is_ready is False
        assert gs.is_shutting_down is True


class TestDrain:
    @pytest.mark.asyncio
    async def test_idle_drain_returns_immediately(self) -> None:
        gs = GracefulShutdown()
        assert await gs.wait_for_drain(timeout=0.1) is True

    @pytest.mark.asyncio
    async def test_waits_for_slow_request(self) -> None:
        gs = GracefulShutdown()
        gs.request_started()

        async def _finish_later() -> None:
            await asyncio.sleep(0.05)
            gs.request_finished()

        drained, _ = await asyncio.gather(
            gs.wait_for_drain(timeout=2.0), _finish_later()
        )
        assert drained is True
        assert gs.active_requests == 0

    @pytest.mark.asyncio
    async def test_timeout_reports_failure(self) -> None:
        gs = GracefulShutdown()
        gs.request_started()
        assert await gs.wait_for_drain(timeout=0.05) is False
        assert gs.active_requests == 1
