"""
Static Fallback Store - Last-Resort Values.

An immutable in-process table of reference data used when the live tier
fails. The tables are built once at process start from seeded generators,
so every lookup for the same key returns an equal value for the lifetime
of the process (and across processes).

Design Notes:
    - Read-only mappings (MappingProxyType) and tuples only
    - Stored rows use the upstream market API's field names and go through
      the same builders as live responses (see fallback.formatting)
    - Every lookup returns a StaticValue; ``found`` is False when the key
      is absent and the command's empty default is returned instead
"""

from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from portfolio_gateway.domain.entities import Asset, AssetClass
from portfolio_gateway.domain.value_objects import (
    CompanyProfile,
    DividendInfo,
    EsgData,
    FinancialLine,
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
from portfolio_gateway.resilience.tiered_resolver import StaticValue

# Last day of the generated static price histories.
STATIC_AS_OF = date(2024, 6, 28)
HISTORY_DAYS = 252 * 3
RISK_FREE_RATE = 0.042

# (ticker, name, country, sector, is_esg, price)
STOCKS: Tuple[Tuple[str, str, str, str, bool, float], ...] = (
    ("AAPL", "Apple Inc.", "US", "Technology", True, 172.5),
    ("MSFT", "Microsoft Corporation", "US", "Technology", True, 305.2),
    ("GOOGL", "Alphabet Inc.", "US", "Technology", False, 136.8),
    ("AMZN", "Amazon.com, Inc.", "US", "Consumer Cyclical", False, 130.5),
    ("JPM", "JPMorgan Chase & Co.", "US", "Financial Services", False, 142.3),
    ("JNJ", "Johnson & Johnson", "US", "Healthcare", True, 166.1),
    ("V", "Visa Inc.", "US", "Financial Services", True, 238.4),
    ("PG", "Procter & Gamble Company", "US", "Consumer Defensive", True, 151.2),
    ("TSM", "Taiwan Semiconductor Manufacturing", "US", "Technology", False, 98.6),
    ("XOM", "Exxon Mobil Corporation", "US", "Energy", False, 112.9),
    ("NEE", "NextEra Energy, Inc.", "US", "Utilities", True, 71.5),
    ("HD", "The Home Depot, Inc.", "US", "Consumer Cyclical", False, 335.7),
    ("MCD", "McDonald's Corporation", "US", "Consumer Cyclical", False, 292.1),
    ("SPY", "SPDR S&P 500 ETF Trust", "US", "Mixed", False, 452.8),
    ("QQQ", "Invesco QQQ Trust", "US", "Mixed", False, 385.2),
    ("IEFA", "iShares Core MSCI EAFE ETF", "US", "Mixed", False, 70.1),
    ("AGG", "iShares Core U.S. Aggregate Bond ETF", "US", "Mixed", False, 98.5),
    ("GLD", "SPDR Gold Shares", "US", "Mixed", False, 180.2),
    ("2222.SR", "Saudi Aramco", "SAUDI ARABIA", "Energy", False, 35.50),
    ("QNBK.QA", "Qatar National Bank", "QATAR", "Financial Services", False, 17.20),
    ("DANGCEM.LG", "Dangote Cement", "NIGERIA", "Basic Materials", False, 280.00),
    ("HSBC.L", "HSBC Holdings plc", "UK", "Financial Services", True, 6.50),
    ("BATS.L", "British American Tobacco p.l.c.", "UK", "Consumer Defensive", False, 25.00),
    ("1120.SR", "Al Rajhi Bank", "SAUDI ARABIA", "Financial Services", False, 80.00),
)

# (ticker, name, price)
CRYPTOS: Tuple[Tuple[str, str, float], ...] = (
    ("BTC", "Bitcoin", 43500),
    ("ETH", "Ethereum", 2300),
    ("SOL", "Solana", 65.5),
    ("XRP", "XRP", 0.62),
    ("DOGE", "Dogecoin", 0.08),
    ("ADA", "Cardano", 0.55),
    ("ALGO", "Algorand", 0.18),
    ("APT", "Aptos", 9.50),
    ("COMP", "Compound", 58.00),
    ("ARB", "Arbitrum", 1.80),
    ("MATIC", "Polygon", 0.85),
    ("DOT", "Polkadot", 6.50),
    ("AVAX", "Avalanche", 35.00),
    ("LINK", "Chainlink", 14.20),
    ("UNI", "Uniswap", 6.10),
    ("BCH", "Bitcoin Cash", 450.00),
    ("GRT", "The Graph", 0.30),
    ("AAVE", "Aave", 90.00),
)

NEWS: Tuple[Tuple[str, str, str], ...] = (
    (
        "Fed Hints at Slower Pace of Rate Hikes",
        "Reuters",
        "Federal Reserve officials have suggested that the central bank may slow "
        "its pace of interest rate increases in the coming months, citing signs "
        "of cooling inflation.",
    ),
    (
        "Tech Stocks Rally on Positive Earnings Reports",
        "Bloomberg",
        "Major technology companies reported stronger-than-expected quarterly "
        "earnings, leading to a broad rally in the tech sector and boosting "
        "market sentiment.",
    ),
    (
        "Oil Prices Fluctuate Amid Geopolitical Tensions",
        "Wall Street Journal",
        "Crude oil prices remain volatile as investors weigh supply concerns "
        "stemming from international geopolitical events against fears of a "
        "global economic slowdown.",
    ),
)

# Units of each currency per US dollar.
FX_RATES: Mapping[str, float] = MappingProxyType(
    {
        "USD": 1.0,
        "EUR": 0.92,
        "GBP": 0.79,
        "JPY": 157.5,
        "INR": 83.5,
        "NGN": 1480.0,
        "QAR": 3.64,
        "SAR": 3.75,
    }
)


def _equity(ticker: str, name: str, sector: str, **extra: Any) -> Asset:
    return Asset(
        ticker=ticker,
        name=name,
        country="US",
        sector=sector,
        asset_class=AssetClass.EQUITY,
        **extra,
    )


def _crypto(ticker: str, name: str) -> Asset:
    return Asset(
        ticker=ticker,
        name=name,
        country="CRYPTO",
        sector="Cryptocurrency",
        asset_class=AssetClass.CRYPTO,
    )


CRYPTO_SLEEVE: Tuple[Asset, ...] = (
    _crypto("BTC", "Bitcoin"),
    _crypto("ETH", "Ethereum"),
    _crypto("SOL", "Solana"),
)

SCREEN_FALLBACKS: Mapping[str, Tuple[Asset, ...]] = MappingProxyType(
    {
        "aggressive": (
            _equity("AAPL", "Apple Inc.", "Technology"),
            _equity("MSFT", "Microsoft Corp.", "Technology"),
            _equity("AMZN", "Amazon.com, Inc.", "Consumer Cyclical"),
            _crypto("BTC", "Bitcoin"),
            _crypto("ETH", "Ethereum"),
        ),
        "shariah": (
            _equity("AAPL", "Apple Inc.", "Technology", is_shariah_compliant=True),
            _equity("MSFT", "Microsoft Corp.", "Technology", is_shariah_compliant=True),
            _equity("JNJ", "Johnson & Johnson", "Healthcare", is_shariah_compliant=True),
            _equity("PG", "Procter & Gamble", "Consumer Defensive", is_shariah_compliant=True),
        ),
    }
)

# Inert results of the portfolio-analytics commands.
PORTFOLIO_PLACEHOLDERS: Mapping[str, Any] = MappingProxyType(
    {
        "runBacktest": {
            "dates": [],
            "portfolioValues": [],
            "benchmarkValues": [],
            "totalReturn": 0.1,
            "benchmarkReturn": 0.08,
            "maxDrawdown": -0.05,
        },
        "runFactorAnalysis": {"beta": 1.15, "smb": 0.25, "hml": -0.12},
        "calculateVaR": {"var95": 0.0, "cvar95": 0.0, "portfolioValue": 100000},
        "generateRebalancePlan": [],
    }
)

EMPTY_PRICE_SUMMARY = PriceSummary()
EMPTY_FINANCIALS = FinancialsSnapshot(
    income=[
        FinancialLine(metric="Revenue", value="N/A"),
        FinancialLine(metric="Net Income", value="N/A"),
    ],
    as_of="TTM",
)
DEFAULT_PROFILE = CompanyProfile(description="No description available.", beta=1.0)


def _generate_history(
    rng: random.Random, base_price: float, volatility: float, trend: float
) -> Tuple[Tuple[str, float], ...]:
    """Random-walk close prices ending on STATIC_AS_OF."""
    price = base_price
    points = []
    for i in range(HISTORY_DAYS):
        day = STATIC_AS_OF - timedelta(days=HISTORY_DAYS - 1 - i)
        price *= 1 + (rng.random() - 0.5) * volatility + trend
        if price <= 0:
            price = base_price * 0.01
        points.append((day.isoformat(), round(price, 4)))
    return tuple(points)


def _freeze(rows: Dict[str, Dict[str, Any]]) -> Mapping[str, Mapping[str, Any]]:
    return MappingProxyType({k: MappingProxyType(v) for k, v in rows.items()})


@dataclass(frozen=True)
class StaticFallbackStore:
    """
    Immutable last-resort tables, keyed by ticker or command.

    Build with ``StaticFallbackStore.build_default()``; tests may construct
    one with custom tables (e.g. custom FX rates).
    """

    assets: Tuple[Asset, ...]
    quotes: Mapping[str, Mapping[str, Any]]
    ratios: Mapping[str, Mapping[str, Any]]
    histories: Mapping[str, Tuple[Tuple[str, float], ...]]
    statements: Mapping[str, Mapping[str, Any]]
    dividends: Mapping[str, Mapping[str, Any]]
    esg_scores: Mapping[str, Mapping[str, Any]]
    news: Tuple[NewsArticle, ...]
    fx_rates: Mapping[str, float] = field(default_factory=lambda: FX_RATES)
    screen_fallbacks: Mapping[str, Tuple[Asset, ...]] = field(
        default_factory=lambda: SCREEN_FALLBACKS
    )
    risk_free: float = RISK_FREE_RATE

    @classmethod
    def build_default(cls) -> "StaticFallbackStore":
        """Generate the default tables. Deterministic per ticker."""
        assets: List[Asset] = []
        quotes: Dict[str, Dict[str, Any]] = {}
        ratios: Dict[str, Dict[str, Any]] = {}
        histories: Dict[str, Tuple[Tuple[str, float], ...]] = {}
        statements: Dict[str, Dict[str, Any]] = {}
        dividends: Dict[str, Dict[str, Any]] = {}
        esg_scores: Dict[str, Dict[str, Any]] = {}

        for ticker, name, country, sector, is_esg, price in STOCKS:
            rng = random.Random(f"static:{ticker}")
            assets.append(
                Asset(
                    ticker=ticker,
                    name=name,
                    country=country,
                    sector=sector,
                    asset_class=AssetClass.EQUITY,
                    price=price,
                    is_esg=is_esg,
                )
            )
            quotes[ticker] = {
                "open": round(price * (1 - 0.01 * rng.random()), 4),
                "price": price,
                "dayHigh": round(price * (1 + 0.01 * rng.random()), 4),
                "dayLow": round(price * (1 - 0.02 * rng.random()), 4),
                "volume": int(1_000_000 + rng.random() * 20_000_000),
            }
            dividend_yield = round(rng.random() * 0.04, 5)
            ratios[ticker] = {
                "peRatioTTM": round(15 + rng.random() * 20, 4),
                "priceToBookRatioTTM": round(2 + rng.random() * 8, 4),
                "dividendYieldTTM": dividend_yield,
            }
            histories[ticker] = _generate_history(rng, price, 0.02, 0.0003)
            statements[ticker] = {
                "income": {
                    "date": "2023-12-31",
                    "revenue": round(1e9 + rng.random() * 5e10),
                    "netIncome": round(1e8 + rng.random() * 5e9),
                },
                "balance": {
                    "date": "2023-12-31",
                    "totalAssets": round(2e9 + rng.random() * 8e10),
                    "totalLiabilities": round(1e9 + rng.random() * 4e10),
                },
                "cash_flow": {
                    "date": "2023-12-31",
                    "operatingCashFlow": round(5e8 + rng.random() * 8e9),
                },
            }
            if dividend_yield > 0.001:
                dividends[ticker] = {
                    "dividend": round(price * dividend_yield / 4, 4),
                    "paymentDate": "2023-11-15",
                }
            base = 70 if is_esg else 50
            esg_scores[ticker] = {
                "ESGScore": round(base + rng.random() * 15, 2),
                "environmentalScore": round(base + 2 + rng.random() * 15, 2),
                "socialScore": round(base - 2 + rng.random() * 15, 2),
                "governanceScore": round(base + 5 + rng.random() * 15, 2),
                "ESGRiskRating": "Low" if is_esg else "Medium",
            }

        for ticker, name, price in CRYPTOS:
            rng = random.Random(f"static:{ticker}")
            assets.append(
                Asset(
                    ticker=ticker,
                    name=name,
                    country="CRYPTO",
                    sector="Cryptocurrency",
                    asset_class=AssetClass.CRYPTO,
                    price=price,
                )
            )
            quotes[ticker] = {
                "open": price * (1 - 0.02 * rng.random()),
                "price": price,
                "dayHigh": price * (1 + 0.03 * rng.random()),
                "dayLow": price * (1 - 0.03 * rng.random()),
                "volume": int(100_000 + rng.random() * 5_000_000),
            }
            histories[ticker] = _generate_history(rng, price, 0.08, 0.001)

        return cls(
            assets=tuple(assets),
            quotes=_freeze(quotes),
            ratios=_freeze(ratios),
            histories=MappingProxyType(histories),
            statements=_freeze(statements),
            dividends=_freeze(dividends),
            esg_scores=_freeze(esg_scores),
            news=tuple(
                NewsArticle(title=title, source=site, summary=text)
                for title, site, text in NEWS
            ),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def available_assets(self) -> StaticValue[List[Asset]]:
        return StaticValue(list(self.assets))

    def price_history(self, ticker: str) -> StaticValue[List[PriceDataPoint]]:
        history = self.histories.get(ticker)
        if history is None:
            return StaticValue([], found=False)
        return StaticValue([PriceDataPoint(date=d, price=p) for d, p in history])

    def price_summary(self, ticker: str) -> StaticValue[PriceSummary]:
        quote = self.quotes.get(ticker)
        if quote is None:
            return StaticValue(EMPTY_PRICE_SUMMARY, found=False)
        return StaticValue(build_price_summary(quote))

    def financial_ratios(self, ticker: str) -> StaticValue[List[FinancialRatio]]:
        ratios = self.ratios.get(ticker)
        if ratios is None:
            return StaticValue([], found=False)
        return StaticValue(build_ratio_list(ratios, profile={}))

    def financials(self, ticker: str) -> StaticValue[FinancialsSnapshot]:
        rows = self.statements.get(ticker)
        if rows is None:
            return StaticValue(EMPTY_FINANCIALS, found=False)
        return StaticValue(
            build_financials_snapshot(rows["income"], rows["balance"], rows["cash_flow"])
        )

    def company_profile(self, ticker: str) -> StaticValue[CompanyProfile]:
        # No per-ticker profiles are stored; every ticker gets the default.
        return StaticValue(DEFAULT_PROFILE, found=False)

    def dividend_info(self, ticker: str) -> StaticValue[Optional[DividendInfo]]:
        dividend = self.dividends.get(ticker)
        if dividend is None:
            return StaticValue(None, found=False)
        return StaticValue(build_dividend_info(ticker, dividend, self.quotes[ticker]))

    def esg_data(self, ticker: str) -> StaticValue[Optional[EsgData]]:
        row = self.esg_scores.get(ticker)
        if row is None:
            return StaticValue(None, found=False)
        return StaticValue(build_esg_data(row))

    def option_chain(self, ticker: str) -> StaticValue[List[OptionContract]]:
        return StaticValue([], found=False)

    def market_news(self) -> StaticValue[List[NewsArticle]]:
        return StaticValue(list(self.news))

    def fx_rate(self, from_currency: str, to_currency: str) -> StaticValue[float]:
        """
        Cross rate from the per-dollar table: ``rate[to] / rate[from]``.

        An unknown currency counts as 1.0, and ``found`` is False.
        """
        if from_currency == to_currency:
            return StaticValue(1.0)
        from_rate = self.fx_rates.get(from_currency)
        to_rate = self.fx_rates.get(to_currency)
        found = from_rate is not None and to_rate is not None
        return StaticValue((to_rate or 1.0) / (from_rate or 1.0), found=found)

    def risk_free_rate(self) -> StaticValue[float]:
        return StaticValue(self.risk_free)

    def portfolio_placeholder(self, command: str) -> StaticValue[Any]:
        """Fresh copy of a portfolio command's placeholder result."""
        if command not in PORTFOLIO_PLACEHOLDERS:
            return StaticValue(None, found=False)
        return StaticValue(copy.deepcopy(PORTFOLIO_PLACEHOLDERS[command]))

    def screen_candidates(self, screen: str) -> StaticValue[List[Asset]]:
        candidates = self.screen_fallbacks.get(screen)
        if candidates is None:
            return StaticValue([], found=False)
        return StaticValue(list(candidates))
