"""
Adapters Package - Infrastructure Implementations.

Concrete implementations of the protocols in the interfaces package
(Ports & Adapters).

Upstream:
    - HttpUpstreamClient: httpx client for the market and news APIs
    - ScriptedUpstreamClient: canned responses for development/testing

Cache stores:
    - InMemoryCacheStore: dict-backed, single process
    - RestCacheStore: PostgREST table over HTTP

Chat:
    - GeminiChatModel: google-genai streaming chat

Metrics:
    - InMemoryMetricsCollector: Simple in-memory collection
"""

from portfolio_gateway.adapters.gemini_chat import GeminiChatModel
from portfolio_gateway.adapters.http_upstream import HttpUpstreamClient
from portfolio_gateway.adapters.memory_cache_store import InMemoryCacheStore
from portfolio_gateway.adapters.metrics_collector import InMemoryMetricsCollector
from portfolio_gateway.adapters.rest_cache_store import RestCacheStore
from portfolio_gateway.adapters.scripted_upstream import ScriptedUpstreamClient

__all__ = [
    "GeminiChatModel",
    "HttpUpstreamClient",
    "InMemoryCacheStore",
    "InMemoryMetricsCollector",
    "RestCacheStore",
    "ScriptedUpstreamClient",
]
