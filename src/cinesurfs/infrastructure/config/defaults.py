"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

# ``sources`` is deliberately absent: a YAML ``sources`` section replaces the
# built-in set instead of being merged into it (see schema.DEFAULT_SOURCES).
DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "cinesurfs",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": "CineSurfs-Proxy/0.1.0",
    },
    "playwright": {
        "headless": True,
    },
    "resolver": {
        "navigation_timeout_ms": 30_000,
        "frame_timeout_ms": 15_000,
        "dwell_seconds": 25.0,
        "max_sessions": 3,
    },
    "relay": {
        "default_filename": "video-stream.m3u8",
        "chunk_size": 65_536,
    },
    "cors": {
        "allow_origins": ["*"],
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
