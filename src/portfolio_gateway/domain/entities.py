"""
Core Domain Entities.

This module defines the fundamental entities of the Portfolio Gateway domain:
assets, the provenance-tagged result envelope and cache rows.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class AssetClass(str, Enum):
    """Classification of financial assets."""

    EQUITY = "EQUITY"
    CRYPTO = "CRYPTO"
    BENCHMARK = "BENCHMARK"


class DataSource(str, Enum):
    """Tier that produced a piece of data."""

    LIVE = "live"
    CACHE = "cache"
    STATIC = "static"


class Asset(BaseModel):
    """Represents a tradable financial instrument."""

    ticker: str = Field(..., description="Ticker symbol, identity of the asset")
    name: str = Field(..., description="Full company/asset name")
    country: str = Field(..., description="Country of domicile or CRYPTO")
    sector: str = Field(..., description="Industry sector")
    asset_class: AssetClass = Field(..., description="Asset classification")
    price: Optional[float] = Field(default=None, description="Last known price")
    is_esg: Optional[bool] = Field(default=None, description="ESG screened")
    is_shariah_compliant: Optional[bool] = Field(
        default=None, description="Shariah screened"
    )

    model_config = {"frozen": True}

    def __hash__(self) -> int:
        return hash(self.ticker)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return self.ticker == other.ticker

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for JSON responses and cache rows, omitting unset fields."""
        return self.model_dump(mode="json", exclude_none=True)


class ResultEnvelope(BaseModel, Generic[T]):
    """A payload together with the tier that produced it."""

    data: T
    source: DataSource

    model_config = {"frozen": True}

    @property
    def is_live(self) -> bool:
        return self.source == DataSource.LIVE

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the wire shape ``{"data": ..., "source": ...}``."""
        return {"data": _jsonable(self.data), "source": self.source.value}


class CacheEntry(BaseModel):
    """A row of the shared cache store."""

    key: str = Field(..., description="Cache bucket identity")
    data: Any = Field(..., description="Cached payload (JSON-compatible)")
    last_fetched: datetime = Field(..., description="When the payload was produced")

    model_config = {"frozen": True}

    def to_row(self) -> Dict[str, Any]:
        """Serialize to the persistence row shape."""
        return {
            "key": self.key,
            "data": self.data,
            "last_fetched": self.last_fetched.isoformat(),
        }


def _jsonable(value: Any) -> Any:
    """Recursively convert pydantic models inside a payload to plain data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
