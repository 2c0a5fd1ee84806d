"""
Command Names.

The closed set of commands the gateway answers. Fixed at process start;
the registry refuses to freeze unless every name has a handler.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from portfolio_gateway.resilience.errors import UnknownCommand


class CommandName(str, Enum):
    """Wire names of all commands."""

    GET_AVAILABLE_ASSETS = "getAvailableAssets"
    GET_TEMPLATE_ASSETS = "getTemplateAssets"
    GET_ASSET_PRICE_HISTORY = "getAssetPriceHistory"
    GET_ASSET_PRICE_SUMMARY = "getAssetPriceSummary"
    GET_FINANCIAL_RATIOS = "getFinancialRatios"
    GET_FINANCIALS_SNAPSHOT = "getFinancialsSnapshot"
    GET_COMPANY_PROFILE = "getCompanyProfile"
    GET_DIVIDEND_INFO = "getDividendInfo"
    GET_ESG_DATA = "getEsgData"
    GET_MARKET_NEWS = "getMarketNews"
    GET_OPTION_CHAIN = "getOptionChain"
    GET_FX_RATE = "getFxRate"
    GET_RISK_FREE_RATE = "getRiskFreeRate"
    START_CHAT_STREAM = "startChatStream"
    RUN_BACKTEST = "runBacktest"
    RUN_FACTOR_ANALYSIS = "runFactorAnalysis"
    CALCULATE_VAR = "calculateVaR"
    GENERATE_REBALANCE_PLAN = "generateRebalancePlan"

    @classmethod
    def parse(cls, value: Any) -> "CommandName":
        """
        Look up a wire name.

        Raises:
            UnknownCommand: If ``value`` is not a known command name
        """
        try:
            return cls(value)
        except ValueError:
            raise UnknownCommand(value) from None
