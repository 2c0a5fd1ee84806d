"""
Template Asset Commands.

``getTemplateAssets`` runs the template's screen live; when that fails it
serves the row the screening cron last wrote for the template, and only
then the screen's static candidate list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.payloads import TemplatePayload, parse_payload
from portfolio_gateway.commands.registry import CommandInfo
from portfolio_gateway.domain.entities import Asset, ResultEnvelope
from portfolio_gateway.interfaces.cache_store import CacheStore
from portfolio_gateway.pipeline.strategies import BaseScreen
from portfolio_gateway.resilience.errors import InvalidPayload
from portfolio_gateway.resilience.tiered_resolver import CACHE_THEN_STATIC, TieredResolver


def decode_assets(data: Any) -> List[Asset]:
    """Rebuild assets from a cache row's ``data`` list."""
    return [Asset.model_validate(row) for row in data]


class TemplateCommands:
    """One cache-backed resolver per screen."""

    def __init__(self, screens: Mapping[str, BaseScreen], cache_store: CacheStore) -> None:
        self.resolvers: Dict[str, TieredResolver[None, List[Asset]]] = {
            name: self._build_resolver(screen, cache_store)
            for name, screen in screens.items()
        }

    @staticmethod
    def _build_resolver(
        screen: BaseScreen, cache_store: CacheStore
    ) -> TieredResolver[None, List[Asset]]:
        return TieredResolver(
            name=f"{CommandName.GET_TEMPLATE_ASSETS.value}:{screen.name}",
            live=lambda _: screen.run_live(),
            static=lambda _: screen.fallback(),
            policy=CACHE_THEN_STATIC,
            cache_store=cache_store,
            cache_key=lambda _: screen.cache_key,
            decode_cached=decode_assets,
        )

    async def handle_template_assets(self, payload: Any) -> ResultEnvelope[List[Asset]]:
        command = CommandName.GET_TEMPLATE_ASSETS.value
        params = parse_payload(command, TemplatePayload, payload)
        resolver = self.resolvers.get(params.template)
        if resolver is None:
            raise InvalidPayload(command, f"template {params.template!r} is not configured")
        return await resolver.resolve(None)

    def handlers(self) -> Dict[CommandName, CommandInfo]:
        return {
            CommandName.GET_TEMPLATE_ASSETS: CommandInfo(
                CommandName.GET_TEMPLATE_ASSETS, self.handle_template_assets
            )
        }
