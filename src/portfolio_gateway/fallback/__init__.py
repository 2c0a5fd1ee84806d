"""
Fallback Package - Static Last-Resort Data and Shared Formatting.

    - StaticFallbackStore: immutable reference tables built at startup
    - formatting: display formatters and payload builders shared by the
      live path and the static tier
"""

from portfolio_gateway.fallback.static_store import StaticFallbackStore

__all__ = ["StaticFallbackStore"]
