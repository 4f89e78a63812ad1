"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

# Fallback priority follows insertion order.
DEFAULT_SOURCES: dict[str, str] = {
    "vidsrc": "https://vidsrc.xyz/embed/movie?imdb=tt{id}",
    "vidlink": "https://vidlink.pro/movie/{id}",
    "godrive": "https://godriveplayer.com/movie/{id}",
}

DEFAULT_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


class ResolverConfig(BaseModel):
    """Browser-driven stream resolution settings.

    All values configurable via YAML (resolver section) or ENV vars.
    """

    user_agent: str = Field(
        default=DEFAULT_BROWSER_USER_AGENT,
        description="User-Agent of the headless browser context.",
    )
    navigation_timeout_ms: int = Field(
        default=30_000,
        description="Upper bound for each page navigation (outer and nested).",
    )
    frame_timeout_ms: int = Field(
        default=15_000,
        description="Upper bound for the nested player frame to appear.",
    )
    dwell_seconds: float = Field(
        default=25.0,
        description="Observation window for the manifest request after the nested load.",
    )
    frame_selector: str = Field(
        default="iframe#player_iframe",
        description="CSS selector of the nested player frame.",
    )
    manifest_marker: str = Field(
        default=".m3u8",
        description="Substring of a response URL path that marks a manifest.",
    )
    stealth: bool = Field(
        default=True,
        description="Apply playwright-stealth evasions to each browser context.",
    )
    resolve_on_first_match: bool = Field(
        default=True,
        description="End the dwell window as soon as a manifest is observed.",
    )
    max_sessions: int = Field(
        default=3,
        description="Process-wide cap on concurrently open browser sessions.",
    )

    @field_validator("navigation_timeout_ms", "frame_timeout_ms")
    @classmethod
    def _validate_timeouts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("resolver timeouts must be > 0")
        return v

    @field_validator("dwell_seconds")
    @classmethod
    def _validate_dwell(cls, v: float) -> float:
        if v < 0:
            raise ValueError("dwell_seconds must be >= 0")
        return v

    @field_validator("max_sessions")
    @classmethod
    def _validate_max_sessions(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_sessions must be >= 1")
        return v


class RelayConfig(BaseModel):
    """Settings for the media relay (download) endpoint."""

    default_filename: str = Field(
        default="video-stream.m3u8",
        description="Filename used when the caller does not suggest one.",
    )
    chunk_size: int = Field(
        default=65_536,
        description="Bytes per chunk pulled from the upstream body.",
    )

    @field_validator("chunk_size")
    @classmethod
    def _validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chunk_size must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/playwright/resolver/relay/cors/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="cinesurfs", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP client (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout in seconds for manifest and relay fetches.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether the HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="CineSurfs-Proxy/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Playwright (YAML section: playwright.*)
    playwright_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_headless",
            AliasPath("playwright", "headless"),
        ),
        description="Run Chromium headless.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # CORS (YAML section: cors.*)
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        validation_alias=AliasChoices(
            "cors_allow_origins",
            AliasPath("cors", "allow_origins"),
        ),
        description="Origins allowed to call the API from a browser.",
    )

    # Embed sources (YAML section: sources, name -> URL template with {id})
    sources: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_SOURCES),
        description="Known upstream providers in fallback priority order.",
    )

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("sources")
    @classmethod
    def _validate_sources(cls, v: dict[str, str]) -> dict[str, str]:
        if not v:
            raise ValueError("at least one embed source is required")
        normalized: dict[str, str] = {}
        for name, template in v.items():
            key = name.strip().lower()
            if not key:
                raise ValueError("embed source names must not be empty")
            if "{id}" not in template:
                raise ValueError(f"template for source {key!r} lacks an {{id}} placeholder")
            normalized[key] = template
        return normalized

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "playwright": {"headless": self.playwright_headless},
            "logging": {"level": self.log_level, "format": self.log_format},
            "cors": {"allow_origins": list(self.cors_allow_origins)},
            "sources": dict(self.sources),
            "resolver": self.resolver.model_dump(),
            "relay": self.relay.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read CINESURFS_* variables, converts the
    set values to a dict, merges them into YAML/defaults, then validates AppConfig.

    Supported env var examples (flat, explicit):
    - CINESURFS_ENVIRONMENT
    - CINESURFS_HTTP_TIMEOUT_SECONDS
    - CINESURFS_PLAYWRIGHT_HEADLESS
    - CINESURFS_RESOLVER_MAX_SESSIONS
    - CINESURFS_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="CINESURFS_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    playwright_headless: Optional[bool] = None

    resolver_navigation_timeout_ms: Optional[int] = None
    resolver_frame_timeout_ms: Optional[int] = None
    resolver_dwell_seconds: Optional[float] = None
    resolver_max_sessions: Optional[int] = None
    resolver_stealth: Optional[bool] = None

    relay_default_filename: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
