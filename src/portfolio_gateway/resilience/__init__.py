"""
Resilience Package - Error Taxonomy and Tiered Fallback.

This package provides the degradation machinery every command uses:
    - Error taxonomy (UpstreamFailure, UnknownCommand, ...)
    - TieredResolver: live attempt, then cache/static tiers by policy

Design Principles:
    - Fallback is the retry strategy; nothing is retried automatically
    - Upstream failures become lower-provenance successes
    - Only caller-facing and persistence errors escape
"""

from portfolio_gateway.resilience.errors import (
    GatewayError,
    InsufficientResults,
    InvalidPayload,
    PersistenceFailure,
    StreamFailure,
    UnknownCommand,
    UpstreamFailure,
)
from portfolio_gateway.resilience.tiered_resolver import (
    CACHE_THEN_STATIC,
    STATIC_ONLY,
    STATIC_THEN_CACHE,
    LiveAttempt,
    StaticValue,
    Tier,
    TieredResolver,
    TierPolicy,
    attempt_live,
    gather_required,
)

__all__ = [
    "GatewayError",
    "InsufficientResults",
    "InvalidPayload",
    "PersistenceFailure",
    "StreamFailure",
    "UnknownCommand",
    "UpstreamFailure",
    "CACHE_THEN_STATIC",
    "STATIC_ONLY",
    "STATIC_THEN_CACHE",
    "LiveAttempt",
    "StaticValue",
    "Tier",
    "TieredResolver",
    "TierPolicy",
    "attempt_live",
    "gather_required",
]
