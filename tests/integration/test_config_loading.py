"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from cinesurfs.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "cinesurfs-test",
        "environment": "test",
        "http": {"timeout_seconds": 15.0, "user_agent": "TestAgent/1.0"},
        "resolver": {"dwell_seconds": 5.0, "max_sessions": 1},
        "relay": {"default_filename": "stream.m3u8"},
        "logging": {"level": "DEBUG", "format": "console"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "cinesurfs"
        assert config.environment == "dev"
        assert config.http_timeout_seconds == 30.0
        assert config.log_format == "console"
        assert config.resolver.navigation_timeout_ms == 30_000
        assert config.resolver.frame_timeout_ms == 15_000
        assert config.resolver.dwell_seconds == 25.0
        assert config.resolver.max_sessions == 3
        assert config.relay.default_filename == "video-stream.m3u8"
        assert list(config.sources) == ["vidsrc", "vidlink", "godrive"]
        assert config.cors_allow_origins == ["*"]

    def test_prod_derives_json_logs(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "cinesurfs-test"
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.resolver.dwell_seconds == 5.0
        assert config.resolver.max_sessions == 1
        # untouched resolver keys keep their defaults
        assert config.resolver.frame_timeout_ms == 15_000
        assert config.relay.default_filename == "stream.m3u8"
        assert config.log_level == "DEBUG"

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_sources_section_replaces_builtin_set(self, tmp_path: Path) -> None:
        path = tmp_path / "sources.yaml"
        path.write_text(
            yaml.dump({"sources": {"Mirror": "https://mirror.example/e/{id}"}}),
            encoding="utf-8",
        )

        config = load_config(config_path=path)
        assert config.sources == {"mirror": "https://mirror.example/e/{id}"}

    def test_template_without_placeholder_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            yaml.dump({"sources": {"broken": "https://broken.example/movie"}}),
            encoding="utf-8",
        )

        with pytest.raises(ValueError):
            load_config(config_path=path)

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(config_path=path)


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CINESURFS_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("CINESURFS_RESOLVER_DWELL_SECONDS", "2.5")
        monkeypatch.setenv("CINESURFS_PLAYWRIGHT_HEADLESS", "false")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.resolver.dwell_seconds == 2.5
        assert config.playwright_headless is False
        assert config.app_name == "cinesurfs-test"

    def test_dotenv_file_participates_as_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CINESURFS_RESOLVER_MAX_SESSIONS", raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("CINESURFS_RESOLVER_MAX_SESSIONS=7\n", encoding="utf-8")

        try:
            config = load_config(dotenv_path=dotenv)
        finally:
            monkeypatch.delenv("CINESURFS_RESOLVER_MAX_SESSIONS", raising=False)
        assert config.resolver.max_sessions == 7

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    def test_cli_beats_yaml_and_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CINESURFS_LOG_LEVEL", "WARNING")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={"log_level": "ERROR", "playwright_headless": False},
        )
        assert config.log_level == "ERROR"
        assert config.playwright_headless is False

    def test_invalid_resolver_value_rejected(self) -> None:
        with pytest.raises(ValueError):
            load_config(cli_overrides={"resolver": {"max_sessions": 0}})
