"""
Screen Strategies - Curated Template Asset Lists.

Each screen is a small tiered chain: a live programmatic query against the
market API, guarded by a minimum-viability check, and the screen's fixed
static candidate list when the query fails or comes back too thin.

Screens:
    - AggressiveGrowthScreen: large caps in growth sectors plus a crypto sleeve
    - ShariahScreen: top holdings of a Shariah-compliant ETF
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Protocol

from portfolio_gateway.config.models import (
    AggressiveScreenConfig,
    ScreeningSettings,
    ShariahScreenConfig,
)
from portfolio_gateway.domain.entities import Asset, AssetClass, ResultEnvelope
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.interfaces.upstream_client import UpstreamClient
from portfolio_gateway.pipeline.candidates import dedupe, dedupe_by_ticker, rank_and_limit
from portfolio_gateway.resilience.errors import InsufficientResults, UpstreamFailure
from portfolio_gateway.resilience.tiered_resolver import (
    STATIC_ONLY,
    StaticValue,
    TieredResolver,
    gather_required,
)

logger = logging.getLogger(__name__)


class ScreenStrategy(Protocol):
    """Protocol for screen strategies."""

    name: str
    cache_key: str

    async def run_live(self) -> List[Asset]:
        ...

    def fallback(self) -> StaticValue[List[Asset]]:
        ...

    async def screen(self) -> ResultEnvelope[List[Asset]]:
        ...


class BaseScreen:
    """
    Live query + viability guard + static fallback.

    Subclasses implement ``query()`` and may override ``finalize()`` to
    append entries that do not count towards the minimum.
    """

    name: str = ""

    def __init__(
        self,
        cache_key: str,
        min_assets: int,
        market: UpstreamClient,
        static_store: StaticFallbackStore,
    ) -> None:
        self.cache_key = cache_key
        self.min_assets = min_assets
        self.market = market
        self.static_store = static_store
        self._resolver: TieredResolver[None, List[Asset]] = TieredResolver(
            name=f"screen:{self.name}",
            live=lambda _: self.run_live(),
            static=lambda _: self.fallback(),
            policy=STATIC_ONLY,
        )

    async def query(self) -> List[Asset]:
        raise NotImplementedError

    def finalize(self, candidates: List[Asset]) -> List[Asset]:
        return candidates

    async def run_live(self) -> List[Asset]:
        """
        Run the live query and apply the minimum-viability guard.

        Raises:
            UpstreamFailure: If the query failed
            InsufficientResults: If fewer than ``min_assets`` candidates came back
        """
        candidates = await self.query()
        if len(candidates) < self.min_assets:
            raise InsufficientResults(self.name, len(candidates), self.min_assets)
        logger.info(f"Screen {self.name}: {len(candidates)} live candidates")
        return self.finalize(candidates)

    def fallback(self) -> StaticValue[List[Asset]]:
        return self.static_store.screen_candidates(self.name)

    async def screen(self) -> ResultEnvelope[List[Asset]]:
        """Live candidates, or the static list. Never raises UpstreamFailure."""
        return await self._resolver.resolve(None)


class AggressiveGrowthScreen(BaseScreen):
    """Large-cap equities in growth sectors, plus a fixed crypto sleeve."""

    name = "aggressive"

    def __init__(
        self,
        config: AggressiveScreenConfig,
        market: UpstreamClient,
        static_store: StaticFallbackStore,
    ) -> None:
        self.config = config
        super().__init__(config.cache_key, config.min_assets, market, static_store)

    def _screener_params(self, sector: str) -> Dict[str, Any]:
        return {
            "marketCapMoreThan": self.config.market_cap_more_than,
            "sector": sector,
            "limit": self.config.per_sector_limit,
            "isActivelyTrading": "true",
            "exchange": ",".join(self.config.exchanges),
        }

    async def query(self) -> List[Asset]:
        pages = await gather_required(
            *(
                self.market.get_json("stock-screener", self._screener_params(sector))
                for sector in self.config.sectors
            )
        )
        candidates = [
            Asset(
                ticker=row["symbol"],
                name=row["companyName"],
                country=row.get("country") or "US",
                sector=row.get("sector") or sector,
                asset_class=AssetClass.EQUITY,
            )
            for sector, page in zip(self.config.sectors, pages)
            for row in page
        ]
        return rank_and_limit(dedupe_by_ticker(candidates), self.config.max_assets)

    def finalize(self, candidates: List[Asset]) -> List[Asset]:
        names = {a.ticker: a.name for a in self.static_store.assets}
        sleeve = [
            Asset(
                ticker=ticker,
                name=names.get(ticker, ticker),
                country="CRYPTO",
                sector="Cryptocurrency",
                asset_class=AssetClass.CRYPTO,
            )
            for ticker in self.config.crypto_sleeve
        ]
        return dedupe_by_ticker(candidates + sleeve)


class ShariahScreen(BaseScreen):
    """Top holdings of a Shariah-compliant ETF, by portfolio weight."""

    name = "shariah"

    def __init__(
        self,
        config: ShariahScreenConfig,
        market: UpstreamClient,
        static_store: StaticFallbackStore,
    ) -> None:
        self.config = config
        super().__init__(config.cache_key, config.min_assets, market, static_store)

    async def query(self) -> List[Asset]:
        etf = self.config.etf_ticker
        holdings = await self.market.get_json(f"etf-holder/{etf}")
        if not holdings:
            raise UpstreamFailure(self.market.source, f"no holdings found for ETF {etf}")

        top = rank_and_limit(
            dedupe(holdings, key=lambda h: h["asset"]),
            self.config.max_holdings,
            sort_key=lambda h: float(h.get("weightPercentage") or 0.0),
        )

        # Individual profile failures only shrink the candidate list.
        profiles = await asyncio.gather(
            *(self.market.get_json(f"profile/{h['asset']}") for h in top),
            return_exceptions=True,
        )
        candidates = []
        for holding, result in zip(top, profiles):
            if isinstance(result, UpstreamFailure):
                logger.debug(f"Screen {self.name}: no profile for {holding['asset']}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            if not result:
                continue
            profile = result[0]
            candidates.append(
                Asset(
                    ticker=profile["symbol"],
                    name=profile["companyName"],
                    country=profile.get("country") or "US",
                    sector=profile.get("sector") or "Unknown",
                    asset_class=AssetClass.EQUITY,
                    is_shariah_compliant=True,
                )
            )
        return dedupe_by_ticker(candidates)


def build_screens(
    settings: ScreeningSettings,
    market: UpstreamClient,
    static_store: StaticFallbackStore,
    enabled_only: bool = False,
) -> Dict[str, BaseScreen]:
    """Instantiate the configured screens, keyed by screen name."""
    screens: List[BaseScreen] = []
    if settings.aggressive.enabled or not enabled_only:
        screens.append(AggressiveGrowthScreen(settings.aggressive, market, static_store))
    if settings.shariah.enabled or not enabled_only:
        screens.append(ShariahScreen(settings.shariah, market, static_store))
    return {screen.name: screen for screen in screens}
