"""
Market Data Commands.

One TieredResolver per command. The live path talks to the market and news
APIs; every fallback is the static store. Required concurrent calls go
through ``gather_required`` so a resolution is either wholly live or wholly
fallback.

Live paths:
    getAvailableAssets      stock/list + symbol/available-cryptocurrencies
    getAssetPriceHistory    historical-price-full/<symbol>
    getAssetPriceSummary    quote/<symbol>
    getFinancialRatios      ratios-ttm + profile + quote
    getFinancialsSnapshot   income + balance sheet + cash flow statements
    getCompanyProfile       profile/<ticker>
    getDividendInfo         stock_dividend history + quote
    getEsgData              esg-score/<ticker>
    getMarketNews           news top-headlines
    getOptionChain          stock_option_chain?symbol=<ticker>
    getFxRate               quote/<FROM><TO>
    getRiskFreeRate         none
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.payloads import (
    EmptyPayload,
    FxPayload,
    OptionChainPayload,
    TickerPayload,
    parse_payload,
)
from portfolio_gateway.commands.registry import CommandInfo, resolver_handler
from portfolio_gateway.domain.entities import (
    Asset,
    AssetClass,
    DataSource,
    ResultEnvelope,
)
from portfolio_gateway.domain.value_objects import (
    CompanyProfile,
    DividendInfo,
    EsgData,
    FinancialRatio,
    FinancialsSnapshot,
    NewsArticle,
    OptionContract,
    PriceDataPoint,
    PriceSummary,
)
from portfolio_gateway.fallback.formatting import (
    build_dividend_info,
    build_esg_data,
    build_financials_snapshot,
    build_price_summary,
    build_ratio_list,
)
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.interfaces.upstream_client import UpstreamClient
from portfolio_gateway.resilience.errors import UpstreamFailure
from portfolio_gateway.resilience.tiered_resolver import (
    StaticValue,
    TieredResolver,
    gather_required,
)

logger = logging.getLogger(__name__)

# Free-tier caps on the asset list endpoints.
STOCK_LIST_LIMIT = 99
CRYPTO_LIST_LIMIT = 97
LISTED_EXCHANGES = ("NASDAQ", "NYSE")

NEWS_QUERY = {"category": "business", "language": "en", "pageSize": 5}
ANNUAL_STATEMENT = {"period": "annual", "limit": 1}


class MarketDataCommands:
    """Resolvers and handlers for the market-data command family."""

    def __init__(
        self,
        market: UpstreamClient,
        news: UpstreamClient,
        static_store: StaticFallbackStore,
    ) -> None:
        """
        Initialize command family.

        Args:
            market: Market-data API client
            news: News API client
            static_store: Last-resort tables
        """
        self.market = market
        self.news = news
        self.static_store = static_store
        self._crypto_tickers: FrozenSet[str] = frozenset(
            a.ticker for a in static_store.assets if a.asset_class is AssetClass.CRYPTO
        )

        s = static_store
        self.resolvers: Dict[CommandName, TieredResolver[Any, Any]] = {
            CommandName.GET_AVAILABLE_ASSETS: TieredResolver(
                name=CommandName.GET_AVAILABLE_ASSETS.value,
                live=self.fetch_available_assets,
                static=lambda _: StaticValue({"assets": s.available_assets().data}),
            ),
            CommandName.GET_ASSET_PRICE_HISTORY: TieredResolver(
                name=CommandName.GET_ASSET_PRICE_HISTORY.value,
                live=self.fetch_price_history,
                static=lambda p: s.price_history(p.ticker),
            ),
            CommandName.GET_ASSET_PRICE_SUMMARY: TieredResolver(
                name=CommandName.GET_ASSET_PRICE_SUMMARY.value,
                live=self.fetch_price_summary,
                static=lambda p: s.price_summary(p.ticker),
            ),
            CommandName.GET_FINANCIAL_RATIOS: TieredResolver(
                name=CommandName.GET_FINANCIAL_RATIOS.value,
                live=self.fetch_financial_ratios,
                static=lambda p: s.financial_ratios(p.ticker),
            ),
            CommandName.GET_FINANCIALS_SNAPSHOT: TieredResolver(
                name=CommandName.GET_FINANCIALS_SNAPSHOT.value,
                live=self.fetch_financials,
                static=lambda p: s.financials(p.ticker),
            ),
            CommandName.GET_COMPANY_PROFILE: TieredResolver(
                name=CommandName.GET_COMPANY_PROFILE.value,
                live=self.fetch_company_profile,
                static=lambda p: s.company_profile(p.ticker),
            ),
            CommandName.GET_DIVIDEND_INFO: TieredResolver(
                name=CommandName.GET_DIVIDEND_INFO.value,
                live=self.fetch_dividend_info,
                static=lambda p: s.dividend_info(p.ticker),
            ),
            CommandName.GET_ESG_DATA: TieredResolver(
                name=CommandName.GET_ESG_DATA.value,
                live=self.fetch_esg_data,
                static=lambda p: s.esg_data(p.ticker),
            ),
            CommandName.GET_MARKET_NEWS: TieredResolver(
                name=CommandName.GET_MARKET_NEWS.value,
                live=self.fetch_market_news,
                static=lambda _: s.market_news(),
            ),
            CommandName.GET_OPTION_CHAIN: TieredResolver(
                name=CommandName.GET_OPTION_CHAIN.value,
                live=self.fetch_option_chain,
                static=lambda p: s.option_chain(p.ticker),
            ),
            CommandName.GET_FX_RATE: TieredResolver(
                name=CommandName.GET_FX_RATE.value,
                live=self.fetch_fx_rate,
                static=lambda p: s.fx_rate(p.from_currency, p.to_currency),
            ),
            CommandName.GET_RISK_FREE_RATE: TieredResolver(
                name=CommandName.GET_RISK_FREE_RATE.value,
                static=lambda _: s.risk_free_rate(),
            ),
        }

    def handlers(self) -> Dict[CommandName, CommandInfo]:
        """Command handlers keyed by name, ready for the registry."""
        payload_models = {
            CommandName.GET_AVAILABLE_ASSETS: EmptyPayload,
            CommandName.GET_ASSET_PRICE_HISTORY: TickerPayload,
            CommandName.GET_ASSET_PRICE_SUMMARY: TickerPayload,
            CommandName.GET_FINANCIAL_RATIOS: TickerPayload,
            CommandName.GET_FINANCIALS_SNAPSHOT: TickerPayload,
            CommandName.GET_COMPANY_PROFILE: TickerPayload,
            CommandName.GET_DIVIDEND_INFO: TickerPayload,
            CommandName.GET_ESG_DATA: TickerPayload,
            CommandName.GET_MARKET_NEWS: EmptyPayload,
            CommandName.GET_OPTION_CHAIN: OptionChainPayload,
            CommandName.GET_RISK_FREE_RATE: EmptyPayload,
        }
        handlers = {
            name: CommandInfo(name, resolver_handler(name, model, self.resolvers[name]))
            for name, model in payload_models.items()
        }
        handlers[CommandName.GET_FX_RATE] = CommandInfo(CommandName.GET_FX_RATE, self.handle_fx_rate)
        return handlers

    async def handle_fx_rate(self, payload: Any) -> ResultEnvelope[float]:
        """Identity pairs are answered without an upstream call."""
        params = parse_payload(CommandName.GET_FX_RATE.value, FxPayload, payload)
        if params.from_currency == params.to_currency:
            return ResultEnvelope(data=1.0, source=DataSource.STATIC)
        return await self.resolvers[CommandName.GET_FX_RATE].resolve(params)

    # ------------------------------------------------------------------
    # Live fetchers
    # ------------------------------------------------------------------

    def _first_row(self, rows: Any, what: str) -> Mapping[str, Any]:
        """First element of a list response; an empty list is a failure."""
        if not rows:
            raise UpstreamFailure(self.market.source, f"{what} returned no data")
        return rows[0]

    def _market_symbol(self, ticker: str) -> str:
        """The market API quotes cryptocurrencies as USD pairs."""
        return f"{ticker}USD" if ticker in self._crypto_tickers else ticker

    async def fetch_available_assets(self, _: Any) -> Dict[str, List[Asset]]:
        stock_rows, crypto_rows = await gather_required(
            self.market.get_json("stock/list"),
            self.market.get_json("symbol/available-cryptocurrencies"),
        )
        if not stock_rows:
            raise UpstreamFailure(self.market.source, "stock/list returned no data")
        if not crypto_rows:
            raise UpstreamFailure(
                self.market.source, "symbol/available-cryptocurrencies returned no data"
            )

        stocks = [
            Asset(
                ticker=row["symbol"],
                name=row.get("name") or row["symbol"],
                country="US",
                sector="N/A",
                asset_class=AssetClass.EQUITY,
                price=row["price"],
            )
            for row in stock_rows
            if (row.get("price") or 0) > 1
            and row.get("exchangeShortName") in LISTED_EXCHANGES
            and row.get("type") == "stock"
        ][:STOCK_LIST_LIMIT]

        cryptos = [
            Asset(
                ticker=row["symbol"][: -len("USD")],
                name=row.get("name") or row["symbol"],
                country="CRYPTO",
                sector="Cryptocurrency",
                asset_class=AssetClass.CRYPTO,
            )
            for row in crypto_rows
            if row["symbol"].endswith("USD")
        ][:CRYPTO_LIST_LIMIT]

        logger.info(f"Fetched {len(stocks)} stocks and {len(cryptos)} cryptos")
        return {"assets": stocks + cryptos}

    async def fetch_price_history(self, params: TickerPayload) -> List[PriceDataPoint]:
        body = await self.market.get_json(
            f"historical-price-full/{self._market_symbol(params.ticker)}"
        )
        rows = body.get("historical") if isinstance(body, dict) else body
        # Newest first upstream; ascending by date here.
        history = [
            PriceDataPoint(date=row["date"], price=row["close"])
            for row in reversed(rows or [])
        ]
        if not history:
            raise UpstreamFailure(
                self.market.source, f"no price history for {params.ticker}"
            )
        return history

    async def fetch_price_summary(self, params: TickerPayload) -> PriceSummary:
        rows = await self.market.get_json(f"quote/{self._market_symbol(params.ticker)}")
        quote = self._first_row(rows, f"quote/{params.ticker}")
        if quote.get("price") is None:
            raise UpstreamFailure(self.market.source, f"no price for {params.ticker}")
        return build_price_summary(quote)

    async def fetch_financial_ratios(self, params: TickerPayload) -> List[FinancialRatio]:
        ticker = params.ticker
        ratios, profile, quote = await gather_required(
            self.market.get_json(f"ratios-ttm/{ticker}"),
            self.market.get_json(f"profile/{ticker}"),
            self.market.get_json(f"quote/{ticker}"),
        )
        return build_ratio_list(
            self._first_row(ratios, f"ratios-ttm/{ticker}"),
            profile=self._first_row(profile, f"profile/{ticker}"),
            quote=self._first_row(quote, f"quote/{ticker}"),
        )

    async def fetch_financials(self, params: TickerPayload) -> FinancialsSnapshot:
        ticker = params.ticker
        income, balance, cash_flow = await gather_required(
            self.market.get_json(f"income-statement/{ticker}", ANNUAL_STATEMENT),
            self.market.get_json(f"balance-sheet-statement/{ticker}", ANNUAL_STATEMENT),
            self.market.get_json(f"cash-flow-statement/{ticker}", ANNUAL_STATEMENT),
        )
        return build_financials_snapshot(
            self._first_row(income, f"income-statement/{ticker}"),
            self._first_row(balance, f"balance-sheet-statement/{ticker}"),
            self._first_row(cash_flow, f"cash-flow-statement/{ticker}"),
        )

    async def fetch_company_profile(self, params: TickerPayload) -> CompanyProfile:
        rows = await self.market.get_json(f"profile/{params.ticker}")
        profile = self._first_row(rows, f"profile/{params.ticker}")
        return CompanyProfile(
            description=profile.get("description"),
            beta=profile.get("beta"),
        )

    async def fetch_dividend_info(self, params: TickerPayload) -> Optional[DividendInfo]:
        """None when the upstream reports no dividend history for the ticker."""
        ticker = params.ticker
        dividends, quotes = await gather_required(
            self.market.get_json(f"historical-price-full/stock_dividend/{ticker}"),
            self.market.get_json(f"quote/{ticker}"),
        )
        history = dividends.get("historical") if isinstance(dividends, dict) else dividends
        if not history:
            return None
        return build_dividend_info(ticker, history[0], self._first_row(quotes, f"quote/{ticker}"))

    async def fetch_esg_data(self, params: TickerPayload) -> Optional[EsgData]:
        """None when the ticker has no ESG coverage upstream."""
        rows = await self.market.get_json(f"esg-score/{params.ticker}")
        if not rows:
            return None
        return build_esg_data(rows[0])

    async def fetch_market_news(self, _: Any) -> List[NewsArticle]:
        body = await self.news.get_json("top-headlines", NEWS_QUERY)
        articles = body["articles"]
        if not articles:
            raise UpstreamFailure(self.news.source, "no headlines returned")
        return [
            NewsArticle(
                title=article["title"],
                source=(article.get("source") or {}).get("name") or "Unknown",
                summary=article.get("description"),
                url=article.get("url"),
            )
            for article in articles
        ]

    async def fetch_option_chain(self, params: OptionChainPayload) -> List[OptionContract]:
        rows = await self.market.get_json("stock_option_chain", {"symbol": params.ticker})
        contracts = [
            OptionContract(
                expiration_date=row["expirationDate"],
                strike_price=row["strike"],
                last_price=row.get("lastPrice"),
                type=row["optionType"],
            )
            for row in rows or []
        ]
        if params.date:
            contracts = [c for c in contracts if c.expiration_date == params.date]
        return contracts

    async def fetch_fx_rate(self, params: FxPayload) -> float:
        pair = f"{params.from_currency}{params.to_currency}"
        quote = self._first_row(await self.market.get_json(f"quote/{pair}"), f"quote/{pair}")
        price = quote.get("price")
        if not price or price <= 0:
            raise UpstreamFailure(self.market.source, f"no rate for {pair}")
        return float(price)
