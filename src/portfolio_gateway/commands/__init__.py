"""
Commands Package - The Closed Command Set and Its Handlers.

    - CommandName: enum of every wire command
    - CommandRegistry: command -> handler map, frozen after wiring
    - MarketDataCommands / TemplateCommands / ChatCommands / portfolio
      placeholders: the handler families
    - build_registry: wires all families into a frozen registry
"""

from __future__ import annotations

from typing import Mapping

from portfolio_gateway.commands.chat import ChatCommands, ChatStream
from portfolio_gateway.commands.market_data import MarketDataCommands
from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.portfolio import portfolio_handlers
from portfolio_gateway.commands.registry import CommandInfo, CommandRegistry
from portfolio_gateway.commands.templates import TemplateCommands
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.interfaces.cache_store import CacheStore
from portfolio_gateway.interfaces.chat_model import ChatModel
from portfolio_gateway.interfaces.upstream_client import UpstreamClient
from portfolio_gateway.pipeline.strategies import BaseScreen


def build_registry(
    market: UpstreamClient,
    news: UpstreamClient,
    chat_model: ChatModel,
    cache_store: CacheStore,
    static_store: StaticFallbackStore,
    screens: Mapping[str, BaseScreen],
) -> CommandRegistry:
    """
    Wire every command family and freeze the registry.

    Raises:
        ValueError: If some command has no handler
    """
    registry = CommandRegistry()
    registry.register_all(MarketDataCommands(market, news, static_store).handlers())
    registry.register_all(TemplateCommands(screens, cache_store).handlers())
    registry.register_all(ChatCommands(chat_model).handlers())
    registry.register_all(portfolio_handlers(static_store))
    return registry.freeze()


__all__ = [
    "ChatCommands",
    "ChatStream",
    "CommandInfo",
    "CommandName",
    "CommandRegistry",
    "MarketDataCommands",
    "TemplateCommands",
    "build_registry",
    "portfolio_handlers",
]
