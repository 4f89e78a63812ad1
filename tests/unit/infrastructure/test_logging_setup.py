"""Tests for the structlog/uvicorn logging configuration."""

from __future__ import annotations

import structlog

from cinesurfs.infrastructure.config import AppConfig
from cinesurfs.infrastructure.logging.setup import (
    BASE_LOGGING_CONFIG,
    build_logging_config,
)


class TestBuildLoggingConfig:
    def test_handlers_use_structlog_formatter(self, app_config: AppConfig) -> None:
        cfg = build_logging_config(app_config)

        assert cfg["formatters"]["structlog"]["()"] is structlog.stdlib.ProcessorFormatter
        assert cfg["handlers"]["default"]["formatter"] == "structlog"
        assert cfg["handlers"]["access"]["formatter"] == "structlog"

    def test_level_applied_to_uvicorn_and_root(self) -> None:
        config = AppConfig.model_validate({"logging": {"level": "WARNING"}})

        cfg = build_logging_config(config)

        assert cfg["root"]["level"] == "WARNING"
        assert all(lc["level"] == "WARNING" for lc in cfg["loggers"].values())

    def test_json_renderer_in_prod(self) -> None:
        config = AppConfig.model_validate({"environment": "prod"})

        cfg = build_logging_config(config)

        renderer = cfg["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def test_console_renderer_in_dev(self, app_config: AppConfig) -> None:
        cfg = build_logging_config(app_config)

        renderer = cfg["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_base_config_not_mutated(self, app_config: AppConfig) -> None:
        build_logging_config(app_config)

        assert "structlog" not in BASE_LOGGING_CONFIG["formatters"]
        assert "root" not in BASE_LOGGING_CONFIG
