"""
Interfaces Layer - Abstract Protocols for Dependencies.

This package defines the abstract interfaces (using typing.Protocol) for all
external dependencies. High-level modules (resolvers, dispatcher, pipeline)
depend on these abstractions, not on concrete adapters.

Protocols:
    - UpstreamClient: JSON API access (market data, news)
    - CacheStore: Shared cache bucket read/batched upsert
    - ChatModel: Live-only LLM text stream
    - MetricsCollector: Performance metrics abstraction

Design Principles:
    - Use typing.Protocol (not ABC) for Pythonic interfaces
    - Interface Segregation: Small, focused interfaces
    - No implementation details leak into interfaces
"""

from portfolio_gateway.interfaces.cache_store import CacheStore
from portfolio_gateway.interfaces.chat_model import ChatModel
from portfolio_gateway.interfaces.metrics_collector import MetricsCollector
from portfolio_gateway.interfaces.upstream_client import UpstreamClient

__all__ = [
    "CacheStore",
    "ChatModel",
    "MetricsCollector",
    "UpstreamClient",
]
