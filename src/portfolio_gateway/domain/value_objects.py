"""
Value Objects for Domain Layer.

Value objects are immutable payload shapes returned by command handlers.
Field aliases carry the camelCase wire names consumed by the web client;
Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

_VALUE_CONFIG = {"frozen": True, "populate_by_name": True}


class PriceDataPoint(BaseModel):
    """A single close price."""

    date: str
    price: float

    model_config = _VALUE_CONFIG


class PriceSummary(BaseModel):
    """Intraday price summary with a display-formatted volume."""

    open: float = 0.0
    close: float = 0.0
    high: float = 0.0
    low: float = 0.0
    volume: str = "N/A"

    model_config = _VALUE_CONFIG


class FinancialRatio(BaseModel):
    """A labelled, display-formatted ratio."""

    label: str
    value: Union[str, float]

    model_config = _VALUE_CONFIG


class FinancialLine(BaseModel):
    """A labelled, display-formatted statement line."""

    metric: str
    value: str

    model_config = _VALUE_CONFIG


class FinancialsSnapshot(BaseModel):
    """Latest annual statement highlights."""

    income: List[FinancialLine] = Field(default_factory=list)
    balance_sheet: List[FinancialLine] = Field(
        default_factory=list, alias="balanceSheet"
    )
    cash_flow: List[FinancialLine] = Field(default_factory=list, alias="cashFlow")
    as_of: str = Field(default="N/A", alias="asOf")

    model_config = _VALUE_CONFIG


class CompanyProfile(BaseModel):
    """Short company description and market beta."""

    description: Optional[str] = None
    beta: Optional[float] = None

    model_config = _VALUE_CONFIG


class DividendInfo(BaseModel):
    """Most recent dividend and the implied yield."""

    ticker: str
    dividend_yield: float = Field(alias="yield")
    amount_per_share: float = Field(alias="amountPerShare")
    pay_date: Optional[str] = Field(default=None, alias="payDate")
    projected_annual_income: float = Field(default=0.0, alias="projectedAnnualIncome")

    model_config = _VALUE_CONFIG


class EsgData(BaseModel):
    """ESG scores and risk rating."""

    total_score: float = Field(alias="totalScore")
    e_score: float = Field(alias="eScore")
    s_score: float = Field(alias="sScore")
    g_score: float = Field(alias="gScore")
    rating: str

    model_config = _VALUE_CONFIG


class OptionContract(BaseModel):
    """A single listed option."""

    expiration_date: str = Field(alias="expirationDate")
    strike_price: float = Field(alias="strikePrice")
    last_price: Optional[float] = Field(default=None, alias="lastPrice")
    type: str

    model_config = _VALUE_CONFIG


class NewsArticle(BaseModel):
    """A market news headline."""

    title: str
    source: str
    summary: Optional[str] = None
    url: Optional[str] = None

    model_config = _VALUE_CONFIG
