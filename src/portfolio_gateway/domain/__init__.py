"""
Domain Layer - Core Business Entities and Value Objects.

This package contains the core domain model for the Portfolio Gateway.
All entities here are pure Python with no external dependencies
(except Pydantic for validation).

Entities:
    - Asset: A tradable asset (equity, crypto, benchmark), identity is ticker
    - ResultEnvelope: Payload plus the tier that produced it
    - CacheEntry: A row of the shared cache store

Value Objects:
    - PriceSummary, FinancialRatio, FinancialsSnapshot, CompanyProfile
    - DividendInfo, EsgData, OptionContract, NewsArticle, PriceDataPoint

Design Principles:
    - Immutable (frozen models); assets are replaced, never mutated
    - No infrastructure dependencies
"""

from portfolio_gateway.domain.entities import (
    Asset,
    AssetClass,
    CacheEntry,
    DataSource,
    ResultEnvelope,
)

__all__ = ["Asset", "AssetClass", "CacheEntry", "DataSource", "ResultEnvelope"]
