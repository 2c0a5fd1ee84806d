"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests. Async code is driven
with ``asyncio.run`` inside plain test functions.
"""

from __future__ import annotations

import pytest

from portfolio_gateway.adapters.memory_cache_store import InMemoryCacheStore
from portfolio_gateway.adapters.metrics_collector import InMemoryMetricsCollector
from portfolio_gateway.adapters.scripted_upstream import ScriptedUpstreamClient
from portfolio_gateway.commands import build_registry
from portfolio_gateway.commands.registry import CommandRegistry
from portfolio_gateway.config.models import GatewayConfig
from portfolio_gateway.dispatch.dispatcher import CommandDispatcher
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.pipeline.strategies import build_screens
from tests.fixtures import FakeChatModel


@pytest.fixture(scope="session")
def static_store() -> StaticFallbackStore:
    """Default static tables (built once; immutable)."""
    return StaticFallbackStore.build_default()


@pytest.fixture
def market() -> ScriptedUpstreamClient:
    """Market API fake; every unscripted path fails like a 404."""
    return ScriptedUpstreamClient("market")


@pytest.fixture
def news() -> ScriptedUpstreamClient:
    """News API fake."""
    return ScriptedUpstreamClient("news")


@pytest.fixture
def cache_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def metrics_collector() -> InMemoryMetricsCollector:
    return InMemoryMetricsCollector()


@pytest.fixture
def chat_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def default_config() -> GatewayConfig:
    return GatewayConfig()


@pytest.fixture
def registry(
    market: ScriptedUpstreamClient,
    news: ScriptedUpstreamClient,
    chat_model: FakeChatModel,
    cache_store: InMemoryCacheStore,
    static_store: StaticFallbackStore,
    default_config: GatewayConfig,
) -> CommandRegistry:
    """Frozen registry wired to the fakes."""
    return build_registry(
        market=market,
        news=news,
        chat_model=chat_model,
        cache_store=cache_store,
        static_store=static_store,
        screens=build_screens(default_config.screening, market, static_store),
    )


@pytest.fixture
def dispatcher(
    registry: CommandRegistry,
    metrics_collector: InMemoryMetricsCollector,
) -> CommandDispatcher:
    return CommandDispatcher(registry, metrics_collector=metrics_collector)
