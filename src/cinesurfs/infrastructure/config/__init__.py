from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, RelayConfig, ResolverConfig

__all__ = ["AppConfig", "EnvOverrides", "RelayConfig", "ResolverConfig", "load_config"]
