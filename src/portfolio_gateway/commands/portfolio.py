"""
Portfolio Analytics Commands.

Backtesting, factor analysis, VaR and rebalancing are inert placeholders:
each returns a fixed result from the static store, tagged ``static``.
"""

from __future__ import annotations

from typing import Dict

from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.payloads import PortfolioPayload
from portfolio_gateway.commands.registry import CommandInfo, resolver_handler
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.resilience.tiered_resolver import TieredResolver

PORTFOLIO_COMMANDS = (
    CommandName.RUN_BACKTEST,
    CommandName.RUN_FACTOR_ANALYSIS,
    CommandName.CALCULATE_VAR,
    CommandName.GENERATE_REBALANCE_PLAN,
)


def portfolio_handlers(static_store: StaticFallbackStore) -> Dict[CommandName, CommandInfo]:
    handlers = {}
    for name in PORTFOLIO_COMMANDS:
        resolver = TieredResolver(
            name=name.value,
            static=lambda _, command=name.value: static_store.portfolio_placeholder(command),
        )
        handlers[name] = CommandInfo(name, resolver_handler(name, PortfolioPayload, resolver))
    return handlers
