"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class UpstreamConfig(BaseModel):
    """External JSON APIs."""

    market_base_url: str = Field(default="https://financialmodelingprep.com/api/v3")
    market_api_key: Optional[str] = None
    news_base_url: str = Field(default="https://newsapi.org/v2")
    news_api_key: Optional[str] = None
    # None means no timeout.
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class ChatConfig(BaseModel):
    """LLM chat backend."""

    model: str = Field(default="gemini-2.5-flash")
    api_key: Optional[str] = None
    system_instruction: Optional[str] = None


class CacheStoreConfig(BaseModel):
    """Shared cache table."""

    backend: Literal["memory", "rest"] = "memory"
    url: Optional[str] = None
    api_key: Optional[str] = None
    table: str = Field(default="api_cache")


class AggressiveScreenConfig(BaseModel):
    """Large-cap growth screen."""

    enabled: bool = True
    cache_key: str = Field(default="template-assets-aggressive")
    sectors: List[str] = Field(
        default_factory=lambda: ["Technology", "Consumer Cyclical"]
    )
    market_cap_more_than: int = Field(default=200_000_000_000, ge=0)
    exchanges: List[str] = Field(default_factory=lambda: ["NASDAQ", "NYSE"])
    per_sector_limit: int = Field(default=10, ge=1)
    max_assets: int = Field(default=15, ge=1)
    min_assets: int = Field(default=5, ge=0)
    crypto_sleeve: List[str] = Field(default_factory=lambda: ["BTC", "ETH", "SOL"])


class ShariahScreenConfig(BaseModel):
    """ETF-holdings screen."""

    enabled: bool = True
    cache_key: str = Field(default="template-assets-shariah")
    etf_ticker: str = Field(default="HLAL")
    max_holdings: int = Field(default=25, ge=1)
    min_assets: int = Field(default=10, ge=0)


class ScreeningSettings(BaseModel):
    """Screen strategies run by the cron pipeline."""

    aggressive: AggressiveScreenConfig = Field(default_factory=AggressiveScreenConfig)
    shariah: ShariahScreenConfig = Field(default_factory=ShariahScreenConfig)


class ServerConfig(BaseModel):
    """HTTP transport."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class GatewayConfig(BaseModel):
    """Root configuration model."""

    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    cache_store: CacheStoreConfig = Field(default_factory=CacheStoreConfig)
    screening: ScreeningSettings = Field(default_factory=ScreeningSettings)
    server: ServerConfig = Field(default_factory=ServerConfig)
