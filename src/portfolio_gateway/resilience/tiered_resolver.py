"""
Tiered Resolver - Live, Cache and Static Fallback Tiers.

Provides:
    - One live attempt per resolution, converted into a LiveAttempt value
    - Explicit tier selection over a per-command fallback order
    - Provenance tagging of every result

Design Notes:
    - The live step never leaks an UpstreamFailure: it becomes a value
    - A failed live attempt is abandoned entirely, never merged with fallback
    - No retries; falling back one tier is the retry strategy
    - Cache read failures are treated as cache misses
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, List, Optional, Protocol, Tuple, TypeVar

from portfolio_gateway.domain.entities import CacheEntry, DataSource, ResultEnvelope
from portfolio_gateway.resilience.errors import GatewayError, UpstreamFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P")

# Malformed upstream bodies surface as one of these while being transformed.
_MALFORMED_RESPONSE_ERRORS = (LookupError, TypeError, ValueError, AttributeError)


class Tier(str, Enum):
    """A fallback tier consulted after the live attempt failed."""

    CACHE = "cache"
    STATIC = "static"


@dataclass(frozen=True)
class TierPolicy:
    """Ordered fallback tiers for one command."""

    fallback_order: Tuple[Tier, ...] = (Tier.STATIC,)

    def __post_init__(self) -> None:
        if Tier.STATIC not in self.fallback_order:
            raise ValueError("A tier policy must end in the static tier")
        if len(set(self.fallback_order)) != len(self.fallback_order):
            raise ValueError(f"Duplicate tiers in policy: {self.fallback_order}")

    @property
    def uses_cache(self) -> bool:
        return Tier.CACHE in self.fallback_order


STATIC_ONLY = TierPolicy((Tier.STATIC,))
CACHE_THEN_STATIC = TierPolicy((Tier.CACHE, Tier.STATIC))
STATIC_THEN_CACHE = TierPolicy((Tier.STATIC, Tier.CACHE))


class CacheReaderProtocol(Protocol):
    """Read side of the cache store."""

    async def read(self, key: str) -> Optional[CacheEntry]:
        ...


@dataclass(frozen=True)
class LiveAttempt(Generic[T]):
    """Outcome of the live tier: either data or the failure that ended it."""

    data: Optional[T] = None
    failure: Optional[UpstreamFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class StaticValue(Generic[T]):
    """Static tier lookup result; ``found`` is False for the empty default."""

    data: T
    found: bool = True


async def attempt_live(
    fetch: Callable[[], Awaitable[T]],
    source: str = "live",
) -> LiveAttempt[T]:
    """
    Run a live fetch and capture its failure as a value.

    Args:
        fetch: Coroutine factory issuing the upstream call(s)
        source: Name used when wrapping a malformed response

    Returns:
        LiveAttempt holding the data or the failure
    """
    try:
        return LiveAttempt(data=await fetch())
    except UpstreamFailure as e:
        return LiveAttempt(failure=e)
    except _MALFORMED_RESPONSE_ERRORS as e:
        return LiveAttempt(
            failure=UpstreamFailure(source, f"malformed response: {e!r}")
        )


async def gather_required(*aws: Awaitable[Any]) -> List[Any]:
    """
    Await concurrent live calls that are all required.

    Every call settles before the first failure (in argument order) is
    raised, so no call is left running behind a failed resolution.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


class TieredResolver(Generic[P, T]):
    """
    Produces a ResultEnvelope for one logical query, preferring freshness.

    Usage:
        resolver = TieredResolver(
            name="getCompanyProfile",
            live=lambda ticker: fetch_profile(ticker),
            static=lambda ticker: StaticValue(store.profile(ticker)),
        )
        envelope = await resolver.resolve("AAPL")
    """

    def __init__(
        self,
        name: str,
        static: Callable[[P], StaticValue[T]],
        live: Optional[Callable[[P], Awaitable[T]]] = None,
        policy: TierPolicy = STATIC_ONLY,
        cache_store: Optional[CacheReaderProtocol] = None,
        cache_key: Optional[Callable[[P], str]] = None,
        decode_cached: Optional[Callable[[Any], T]] = None,
    ) -> None:
        """
        Initialize resolver.

        Args:
            name: Command name for logging
            static: Static tier lookup
            live: Live tier fetch (None for static-only commands)
            policy: Fallback order after a failed live attempt
            cache_store: Store read by the cache tier
            cache_key: Maps params to a cache bucket key
            decode_cached: Rebuilds the payload type from cached data
        """
        if policy.uses_cache and (cache_store is None or cache_key is None):
            raise ValueError(f"{name}: cache tier needs a cache store and key")
        self.name = name
        self.static = static
        self.live = live
        self.policy = policy
        self.cache_store = cache_store
        self.cache_key = cache_key
        self.decode_cached = decode_cached

    async def resolve(self, params: P) -> ResultEnvelope[T]:
        """
        Resolve params to an envelope. Never raises for upstream failures.

        Args:
            params: Parsed command parameters

        Returns:
            ResultEnvelope tagged with the tier that produced the data
        """
        if self.live is None:
            return self._static_envelope(params)

        live = self.live
        attempt = await attempt_live(lambda: live(params), source=self.name)
        if attempt.succeeded:
            return ResultEnvelope(data=attempt.data, source=DataSource.LIVE)

        logger.warning(f"{self.name}: live tier failed, falling back: {attempt.failure}")
        return await self.select_fallback(params)

    async def select_fallback(self, params: P) -> ResultEnvelope[T]:
        """Walk the policy's fallback tiers in order."""
        for tier in self.policy.fallback_order:
            if tier is Tier.CACHE:
                cached = await self._read_cache(params)
                if cached is not None:
                    return cached
                continue

            static = self.static(params)
            if static.found:
                return ResultEnvelope(data=static.data, source=DataSource.STATIC)

        # No tier had the key: the command's empty default, still static.
        return self._static_envelope(params)

    def _static_envelope(self, params: P) -> ResultEnvelope[T]:
        return ResultEnvelope(data=self.static(params).data, source=DataSource.STATIC)

    async def _read_cache(self, params: P) -> Optional[ResultEnvelope[T]]:
        """Read the command's cache bucket; any failure counts as a miss."""
        assert self.cache_store is not None and self.cache_key is not None
        key = self.cache_key(params)
        try:
            entry = await self.cache_store.read(key)
        except GatewayError as e:
            logger.warning(f"{self.name}: cache read failed for {key}: {e}")
            return None

        if entry is None:
            logger.debug(f"{self.name}: cache MISS for {key}")
            return None

        data = entry.data
        if self.decode_cached is not None:
            try:
                data = self.decode_cached(entry.data)
            except _MALFORMED_RESPONSE_ERRORS as e:
                logger.warning(f"{self.name}: unreadable cache entry {key}: {e}")
                return None

        logger.debug(f"{self.name}: cache HIT for {key}")
        return ResultEnvelope(data=data, source=DataSource.CACHE)
