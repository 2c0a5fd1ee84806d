"""
Unit Tests for MarketDataCommands.

Test Aspects Covered:
    ✅ Business Logic: Live endpoints, filters and response shaping
    ✅ Data Quality: Live and static payloads share one shape
    ✅ Error Handling: Any failed required call -> wholly static result
    ✅ Edge Cases: Identity FX pairs, crypto symbols, no dividend history
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import pytest

from portfolio_gateway.adapters.scripted_upstream import ScriptedUpstreamClient
from portfolio_gateway.commands.market_data import MarketDataCommands
from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.domain.entities import DataSource, ResultEnvelope
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.resilience.errors import InvalidPayload
from tests.fixtures import profile_rows


@pytest.fixture
def commands(
    market: ScriptedUpstreamClient,
    news: ScriptedUpstreamClient,
    static_store: StaticFallbackStore,
) -> MarketDataCommands:
    return MarketDataCommands(market, news, static_store)


def _call(commands: MarketDataCommands, name: CommandName, payload: Any = None) -> ResultEnvelope:
    return asyncio.run(commands.handlers()[name].handler(payload))


def _quote(symbol: str, **extra: Any) -> list:
    row: Dict[str, Any] = {
        "symbol": symbol,
        "price": 190.0,
        "open": 188.0,
        "dayHigh": 191.2,
        "dayLow": 187.4,
        "volume": 48_000_000,
        "marketCap": 2_900_000_000_000,
    }
    row.update(extra)
    return [row]


class TestAvailableAssets:
    """Test cases for getAvailableAssets."""

    def test_filters_listed_stocks_and_usd_cryptos(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        """
        SCENARIO: Stock list with penny stocks, ETFs and OTC names; crypto list with EUR pairs
        EXPECTED: Only NASDAQ/NYSE stocks above $1, USD pairs with the suffix removed
        """
        # Arrange
        market.script(
            "stock/list",
            [
                {"symbol": "AAPL", "name": "Apple", "price": 190, "exchangeShortName": "NASDAQ", "type": "stock"},
                {"symbol": "PNNY", "name": "Penny", "price": 0.5, "exchangeShortName": "NYSE", "type": "stock"},
                {"symbol": "SPY", "name": "SPDR", "price": 450, "exchangeShortName": "NYSE", "type": "etf"},
                {"symbol": "OTCX", "name": "Otc", "price": 12, "exchangeShortName": "OTC", "type": "stock"},
            ],
        )
        market.script(
            "symbol/available-cryptocurrencies",
            [{"symbol": "BTCUSD", "name": "Bitcoin USD"}, {"symbol": "BTCEUR", "name": "Bitcoin EUR"}],
        )

        # Act
        envelope = _call(commands, CommandName.GET_AVAILABLE_ASSETS)

        # Assert
        assert envelope.source == DataSource.LIVE
        assert [a.ticker for a in envelope.data["assets"]] == ["AAPL", "BTC"]
        assert envelope.to_payload()["data"]["assets"][1]["asset_class"] == "CRYPTO"

    def test_crypto_list_failure_discards_stock_list(
        self,
        commands: MarketDataCommands,
        market: ScriptedUpstreamClient,
        static_store: StaticFallbackStore,
    ) -> None:
        market.script(
            "stock/list",
            [{"symbol": "AAPL", "price": 190, "exchangeShortName": "NASDAQ", "type": "stock"}],
        )
        market.fail("symbol/available-cryptocurrencies", 403)

        envelope = _call(commands, CommandName.GET_AVAILABLE_ASSETS)

        assert envelope.source == DataSource.STATIC
        assert envelope.to_payload()["data"] == {
            "assets": [a.to_payload() for a in static_store.assets]
        }


class TestTickerCommands:
    """Test cases for per-ticker commands."""

    def test_financial_ratios_live(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script("ratios-ttm/AAPL", [{"peRatioTTM": 29.5, "epsTTM": 6.4}])
        market.script("profile/AAPL", profile_rows("AAPL", beta=1.29))
        market.script("quote/AAPL", _quote("AAPL"))

        envelope = _call(commands, CommandName.GET_FINANCIAL_RATIOS, {"ticker": "AAPL"})

        assert envelope.source == DataSource.LIVE
        assert {r.label: r.value for r in envelope.data} == {
            "P/E (TTM)": "29.50",
            "Market Cap": "2900.00B",
            "EPS (TTM)": "6.40",
            "Beta": "1.29",
        }

    def test_partial_failure_is_never_mixed(
        self,
        commands: MarketDataCommands,
        market: ScriptedUpstreamClient,
        static_store: StaticFallbackStore,
    ) -> None:
        """
        SCENARIO: Ratios and quote succeed, profile fails
        EXPECTED: Exactly the static ratios for the ticker, tagged static
        """
        market.script("ratios-ttm/AAPL", [{"peRatioTTM": 29.5}])
        market.fail("profile/AAPL", 502)
        market.script("quote/AAPL", _quote("AAPL"))

        envelope = _call(commands, CommandName.GET_FINANCIAL_RATIOS, {"ticker": "AAPL"})

        assert envelope.source == DataSource.STATIC
        assert envelope.data == static_store.financial_ratios("AAPL").data

    def test_price_history_ascending(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script(
            "historical-price-full/AAPL",
            {
                "symbol": "AAPL",
                "historical": [
                    {"date": "2024-07-02", "close": 192.0},
                    {"date": "2024-07-01", "close": 190.5},
                ],
            },
        )

        envelope = _call(commands, CommandName.GET_ASSET_PRICE_HISTORY, {"ticker": " AAPL "})

        assert [p.date for p in envelope.data] == ["2024-07-01", "2024-07-02"]

    def test_crypto_history_uses_usd_pair(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script(
            "historical-price-full/BTCUSD",
            {"historical": [{"date": "2024-07-01", "close": 62000.0}]},
        )

        envelope = _call(commands, CommandName.GET_ASSET_PRICE_HISTORY, {"ticker": "BTC"})

        assert envelope.source == DataSource.LIVE
        assert market.paths_called() == ["historical-price-full/BTCUSD"]

    def test_unknown_ticker_history_is_empty_static(self, commands: MarketDataCommands) -> None:
        envelope = _call(commands, CommandName.GET_ASSET_PRICE_HISTORY, {"ticker": "NOPE"})

        assert envelope.to_payload() == {"data": [], "source": "static"}

    def test_financials_snapshot_requests_annual_statements(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script("income-statement/MSFT", [{"date": "2024-06-30", "revenue": 245e9, "netIncome": 88e9}])
        market.script("balance-sheet-statement/MSFT", [{"totalAssets": 512e9, "totalLiabilities": 243e9}])
        market.script("cash-flow-statement/MSFT", [{"operatingCashFlow": 118e9}])

        envelope = _call(commands, CommandName.GET_FINANCIALS_SNAPSHOT, {"ticker": "MSFT"})

        assert envelope.source == DataSource.LIVE
        assert envelope.data.as_of == "2024-06-30"
        assert all(query == {"period": "annual", "limit": 1} for _, query in market.calls)

    def test_company_profile_live_and_default(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script("profile/AAPL", profile_rows("AAPL", beta=1.29))

        live = _call(commands, CommandName.GET_COMPANY_PROFILE, {"ticker": "AAPL"})
        fallback = _call(commands, CommandName.GET_COMPANY_PROFILE, {"ticker": "MSFT"})

        assert live.data.beta == 1.29
        assert fallback.to_payload() == {
            "data": {"description": "No description available.", "beta": 1.0},
            "source": "static",
        }

    def test_no_dividend_history_is_live_none(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        """
        SCENARIO: Upstream answers with an empty dividend history
        EXPECTED: A live null, not a fallback
        """
        market.script("historical-price-full/stock_dividend/AMZN", {"historical": []})
        market.script("quote/AMZN", _quote("AMZN"))

        envelope = _call(commands, CommandName.GET_DIVIDEND_INFO, {"ticker": "AMZN"})

        assert envelope.to_payload() == {"data": None, "source": "live"}

    def test_dividend_info_live(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script(
            "historical-price-full/stock_dividend/KO",
            {"historical": [{"dividend": 0.485, "paymentDate": "2024-07-01"}]},
        )
        market.script("quote/KO", _quote("KO", price=62.0, dividendYield=0.031))

        envelope = _call(commands, CommandName.GET_DIVIDEND_INFO, {"ticker": "KO"})

        payload = envelope.to_payload()["data"]
        assert payload["yield"] == 0.031
        assert payload["amountPerShare"] == 0.485

    def test_esg_data_live(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script(
            "esg-score/MSFT",
            [
                {
                    "ESGScore": 78.2,
                    "environmentalScore": 81.0,
                    "socialScore": 74.5,
                    "governanceScore": 79.1,
                    "ESGRiskRating": "Low",
                }
            ],
        )

        envelope = _call(commands, CommandName.GET_ESG_DATA, {"ticker": "MSFT"})

        assert envelope.to_payload() == {
            "data": {"totalScore": 78.2, "eScore": 81.0, "sScore": 74.5, "gScore": 79.1, "rating": "Low"},
            "source": "live",
        }

    def test_no_esg_coverage_is_live_none(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script("esg-score/BTC", [])

        envelope = _call(commands, CommandName.GET_ESG_DATA, {"ticker": "BTC"})

        assert envelope.to_payload() == {"data": None, "source": "live"}

    def test_option_chain_filtered_by_date(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        market.script(
            "stock_option_chain",
            lambda query: [
                {"expirationDate": "2024-07-19", "strike": 190, "lastPrice": 4.1, "optionType": "call"},
                {"expirationDate": "2024-08-16", "strike": 200, "lastPrice": 2.0, "optionType": "put"},
            ]
            if query == {"symbol": "AAPL"}
            else [],
        )

        envelope = _call(
            commands, CommandName.GET_OPTION_CHAIN, {"ticker": "AAPL", "date": "2024-08-16"}
        )

        assert [c.strike_price for c in envelope.data] == [200]
        assert envelope.to_payload()["data"][0]["expirationDate"] == "2024-08-16"


class TestNewsAndRates:
    """Test cases for news, FX and risk-free rate."""

    def test_market_news_live(
        self, commands: MarketDataCommands, news: ScriptedUpstreamClient
    ) -> None:
        news.script(
            "top-headlines",
            {
                "articles": [
                    {"title": "Stocks rise", "source": {"name": "Reuters"}, "description": "Up.", "url": "https://x"},
                    {"title": "No source", "source": None},
                ]
            },
        )

        envelope = _call(commands, CommandName.GET_MARKET_NEWS)

        assert envelope.source == DataSource.LIVE
        assert [a.source for a in envelope.data] == ["Reuters", "Unknown"]
        assert news.calls[0][1]["category"] == "business"

    def test_market_news_empty_falls_back(
        self, commands: MarketDataCommands, news: ScriptedUpstreamClient
    ) -> None:
        news.script("top-headlines", {"articles": []})

        envelope = _call(commands, CommandName.GET_MARKET_NEWS)

        assert envelope.source == DataSource.STATIC
        assert len(envelope.data) == 3

    def test_fx_identity_pair_skips_upstream(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        envelope = _call(commands, CommandName.GET_FX_RATE, {"from": "usd", "to": "USD"})

        assert envelope.to_payload() == {"data": 1.0, "source": "static"}
        assert market.calls == []

    def test_fx_live_and_static(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        """
        SCENARIO: GBPUSD quoted live; EURUSD fails
        EXPECTED: Live quote; static cross rate ~1.0870
        """
        market.script("quote/GBPUSD", [{"symbol": "GBPUSD", "price": 1.27}])

        live = _call(commands, CommandName.GET_FX_RATE, {"from": "GBP", "to": "USD"})
        fallback = _call(commands, CommandName.GET_FX_RATE, {"from": "EUR", "to": "USD"})

        assert live.to_payload() == {"data": 1.27, "source": "live"}
        assert fallback.source == DataSource.STATIC
        assert fallback.data == pytest.approx(1.0870, abs=1e-4)

    def test_fx_payload_validation(self, commands: MarketDataCommands) -> None:
        with pytest.raises(InvalidPayload):
            _call(commands, CommandName.GET_FX_RATE, {"from": "EURO", "to": "USD"})

    def test_risk_free_rate_is_static(
        self, commands: MarketDataCommands, market: ScriptedUpstreamClient
    ) -> None:
        envelope = _call(commands, CommandName.GET_RISK_FREE_RATE)

        assert envelope.to_payload() == {"data": 0.042, "source": "static"}
        assert market.calls == []
