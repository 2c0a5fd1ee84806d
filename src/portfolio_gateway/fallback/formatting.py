"""
Display Formatting and Payload Builders.

Both the live path and the static tier build command payloads through the
functions in this module, so the provenance tag changes freshness only,
never the shape or the units of the data.

Raw inputs use the upstream market API's field names (``peRatioTTM``,
``dayHigh``, ``paymentDate`` ...); the static tables are stored in the same
shape.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from portfolio_gateway.domain.value_objects import (
    DividendInfo,
    EsgData,
    FinancialLine,
    FinancialRatio,
    FinancialsSnapshot,
    PriceSummary,
)

NOT_AVAILABLE = "N/A"


def _to_number(value: Any) -> Optional[float]:
    """Coerce upstream numbers (sometimes strings); None for NaN and junk."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def format_volume(volume: Any) -> str:
    """
    Human-readable trading volume.

    Volumes of 1,000 or less are shown whole, not as fractions of a
    thousand (950, not 0.95K).

    Examples:
        >>> format_volume(12_345_678)
        '12.35M'
        >>> format_volume(45_600)
        '45.60K'
        >>> format_volume(950)
        '950'
        >>> format_volume(0)
        'N/A'
    """
    number = _to_number(volume)
    if not number:
        return NOT_AVAILABLE
    if number > 1_000_000:
        return f"{number / 1_000_000:.2f}M"
    if number > 1_000:
        return f"{number / 1_000:.2f}K"
    return f"{number:.0f}"


def format_large_number(value: Any) -> str:
    """Billions above 1e9 in magnitude, millions otherwise."""
    number = _to_number(value)
    if not number:
        return NOT_AVAILABLE
    if abs(number) >= 1e9:
        return f"{number / 1e9:.2f}B"
    return f"{number / 1e6:.2f}M"


def format_ratio(value: Any) -> str:
    number = _to_number(value)
    return NOT_AVAILABLE if number is None else f"{number:.2f}"


def format_percent(value: Any) -> str:
    """Fraction to percentage string: 0.0123 -> '1.23%'."""
    number = _to_number(value)
    return NOT_AVAILABLE if number is None else f"{number * 100:.2f}%"


def build_price_summary(quote: Mapping[str, Any]) -> PriceSummary:
    """Price summary from a quote row (``price``, ``open``, ``dayHigh`` ...)."""
    return PriceSummary(
        open=_to_number(quote.get("open")) or 0.0,
        close=_to_number(quote.get("price")) or 0.0,
        high=_to_number(quote.get("dayHigh")) or 0.0,
        low=_to_number(quote.get("dayLow")) or 0.0,
        volume=format_volume(quote.get("volume")),
    )


def build_ratio_list(
    ratios: Mapping[str, Any],
    profile: Mapping[str, Any],
    quote: Optional[Mapping[str, Any]] = None,
) -> List[FinancialRatio]:
    """Labelled ratios; a ratio the upstream did not report is omitted."""
    quote = quote or {}
    result: List[FinancialRatio] = []

    def add(label: str, raw: Any, formatter) -> None:
        if _to_number(raw):
            result.append(FinancialRatio(label=label, value=formatter(raw)))

    add("P/E (TTM)", ratios.get("peRatioTTM"), format_ratio)
    add("P/B", ratios.get("priceToBookRatioTTM"), format_ratio)
    add("Dividend Yield", ratios.get("dividendYieldTTM"), format_percent)
    add("Market Cap", quote.get("marketCap"), format_large_number)
    add("EPS (TTM)", ratios.get("epsTTM"), format_ratio)
    add("Beta", profile.get("beta"), format_ratio)
    return result


def build_financials_snapshot(
    income: Mapping[str, Any],
    balance: Mapping[str, Any],
    cash_flow: Mapping[str, Any],
) -> FinancialsSnapshot:
    """Statement highlights from the latest annual statement rows."""

    def lines(row: Mapping[str, Any], fields: Dict[str, str]) -> List[FinancialLine]:
        return [
            FinancialLine(metric=label, value=format_large_number(row[field]))
            for field, label in fields.items()
            if _to_number(row.get(field))
        ]

    return FinancialsSnapshot(
        income=lines(income, {"revenue": "Revenue", "netIncome": "Net Income"}),
        balance_sheet=lines(
            balance,
            {"totalAssets": "Total Assets", "totalLiabilities": "Total Liabilities"},
        ),
        cash_flow=lines(cash_flow, {"operatingCashFlow": "Operating Cash Flow"}),
        as_of=income.get("date") or NOT_AVAILABLE,
    )


def build_dividend_info(
    ticker: str,
    last_dividend: Mapping[str, Any],
    quote: Mapping[str, Any],
) -> DividendInfo:
    """
    Dividend info from the latest dividend row and a quote.

    The yield is the quote's reported yield, or the annualized last
    dividend over price when the quote carries none.
    """
    amount = _to_number(last_dividend.get("dividend"))
    if amount is None:
        raise ValueError(f"dividend row for {ticker} has no amount")
    dividend_yield = _to_number(quote.get("dividendYield"))
    if not dividend_yield:
        price = _to_number(quote.get("price"))
        dividend_yield = (amount * 4) / price if price else 0.0
    return DividendInfo(
        ticker=ticker,
        dividend_yield=dividend_yield,
        amount_per_share=amount,
        pay_date=last_dividend.get("paymentDate"),
        projected_annual_income=0.0,
    )


def build_esg_data(row: Mapping[str, Any]) -> EsgData:
    return EsgData(
        total_score=row["ESGScore"],
        e_score=row["environmentalScore"],
        s_score=row["socialScore"],
        g_score=row["governanceScore"],
        rating=row["ESGRiskRating"],
    )
