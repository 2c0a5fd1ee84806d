"""
Configuration Package.

Pydantic models for the gateway configuration and a YAML loader with
profile and environment overlays.
"""

from portfolio_gateway.config.loader import ConfigLoader, deep_merge, load_config
from portfolio_gateway.config.models import (
    AggressiveScreenConfig,
    CacheStoreConfig,
    ChatConfig,
    GatewayConfig,
    ScreeningSettings,
    ServerConfig,
    ShariahScreenConfig,
    UpstreamConfig,
)

__all__ = [
    "ConfigLoader",
    "deep_merge",
    "load_config",
    "AggressiveScreenConfig",
    "CacheStoreConfig",
    "ChatConfig",
    "GatewayConfig",
    "ScreeningSettings",
    "ServerConfig",
    "ShariahScreenConfig",
    "UpstreamConfig",
]
