"""
Test Fixtures - Shared Test Data and Fakes.

This package contains reusable test helpers:
    - FakeChatModel: canned chat fragments, optional mid-stream failure
    - Upstream row builders for the screener and profile endpoints
    - Sample asset generator

Usage:
    Import directly, or through the pytest fixtures in conftest.py.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional

from portfolio_gateway.domain.entities import Asset, AssetClass
from portfolio_gateway.resilience.errors import UpstreamFailure


class FakeChatModel:
    """ChatModel yielding canned fragments, optionally failing part-way."""

    def __init__(
        self,
        fragments: Optional[List[str]] = None,
        fail_after: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.fragments = fragments if fragments is not None else ["Hello", ", ", "world"]
        self.fail_after = fail_after
        self.error = error or UpstreamFailure("chat", "connection reset")
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def stream(self, message: str, history: List[Dict[str, Any]]) -> AsyncIterator[str]:
        self.calls.append({"message": message, "history": history})
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i == self.fail_after:
                    raise self.error
                yield fragment
            if self.fail_after is not None and self.fail_after >= len(self.fragments):
                raise self.error
        finally:
            self.closed = True


def screener_rows(symbols: List[str], sector: str = "Technology") -> List[Dict[str, Any]]:
    """Stock-screener response rows for ``symbols``."""
    return [
        {"symbol": s, "companyName": f"{s} Corp", "sector": sector, "country": "US"}
        for s in symbols
    ]


def profile_rows(symbol: str, **extra: Any) -> List[Dict[str, Any]]:
    """Profile endpoint response (a one-element list)."""
    row = {
        "symbol": symbol,
        "companyName": f"{symbol} Inc",
        "country": "US",
        "sector": "Technology",
        "description": f"{symbol} makes things.",
        "beta": 1.2,
    }
    row.update(extra)
    return [row]


def make_asset(ticker: str, name: Optional[str] = None, **extra: Any) -> Asset:
    fields = {
        "ticker": ticker,
        "name": name or f"{ticker} Corp",
        "country": "US",
        "sector": "Technology",
        "asset_class": AssetClass.EQUITY,
    }
    fields.update(extra)
    return Asset(**fields)
