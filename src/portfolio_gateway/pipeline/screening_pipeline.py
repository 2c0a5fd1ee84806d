"""
Screening Pipeline - Template Screener Cron Run.

Runs every screen concurrently, collects one cache row per screen that
produced assets and writes them in a single batched upsert.

Design Notes:
    - Settle-all fan-out: one screen failing never cancels another
    - A screen with zero assets is left out of the batch so it cannot
      overwrite an earlier good row with an empty one
    - The run fails only when the upsert fails or no row was produced
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from portfolio_gateway.domain.entities import Asset, CacheEntry, ResultEnvelope
from portfolio_gateway.interfaces.cache_store import CacheStore
from portfolio_gateway.interfaces.metrics_collector import MetricsCollector
from portfolio_gateway.pipeline.strategies import ScreenStrategy
from portfolio_gateway.resilience.errors import PersistenceFailure

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Template screener cron job completed successfully."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ScreenOutcome:
    """What one screen contributed to a run."""

    name: str
    cache_key: str
    envelope: Optional[ResultEnvelope[List[Asset]]] = None
    error: Optional[str] = None

    @property
    def assets(self) -> List[Asset]:
        return list(self.envelope.data) if self.envelope else []

    @property
    def cacheable(self) -> bool:
        return bool(self.assets)


@dataclass
class ScreeningRunStatus:
    """Result of one pipeline run."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    outcomes: List[ScreenOutcome] = field(default_factory=list)
    persisted_keys: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def status_code(self) -> int:
        return 200 if self.success else 500

    def to_payload(self) -> Dict[str, Any]:
        if self.success:
            return {"message": self.message}
        return {"error": self.error}


class ScreeningPipeline:
    """Fans out to the screens and persists their results."""

    def __init__(
        self,
        screens: Sequence[ScreenStrategy],
        cache_store: CacheStore,
        metrics_collector: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            screens: Screens to run on every trigger
            cache_store: Destination of the batched upsert
            metrics_collector: For performance metrics
            clock: Timestamp source for ``last_fetched``
        """
        self.screens = list(screens)
        self.cache_store = cache_store
        self.metrics_collector = metrics_collector
        self.clock = clock

    async def run(self) -> ScreeningRunStatus:
        """
        Execute one cron run.

        Returns:
            ScreeningRunStatus; never raises for screen or store failures
        """
        start_time = time.perf_counter()
        logger.info(f"Screening run started: {len(self.screens)} screens")

        results = await asyncio.gather(
            *(screen.screen() for screen in self.screens),
            return_exceptions=True,
        )
        outcomes = [
            self._collect(screen, result)
            for screen, result in zip(self.screens, results)
        ]

        stamped_at = self.clock()
        rows = [
            CacheEntry(
                key=outcome.cache_key,
                data=[asset.to_payload() for asset in outcome.assets],
                last_fetched=stamped_at,
            )
            for outcome in outcomes
            if outcome.cacheable
        ]

        status = await self._persist(rows, outcomes)
        status.duration_seconds = time.perf_counter() - start_time
        if self.metrics_collector:
            self.metrics_collector.record_timing(
                "screening_total_seconds",
                status.duration_seconds,
                {"success": str(status.success).lower()},
            )
        return status

    def _collect(self, screen: ScreenStrategy, result: Any) -> ScreenOutcome:
        """Turn a settled screen result into an outcome, logging it."""
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(f"Screen {screen.name} failed: {result!r}")
            return ScreenOutcome(screen.name, screen.cache_key, error=str(result))

        outcome = ScreenOutcome(screen.name, screen.cache_key, envelope=result)
        if outcome.cacheable:
            logger.info(
                f"Screen {screen.name}: {len(outcome.assets)} assets "
                f"({result.source.value})"
            )
        else:
            logger.warning(f"Screen {screen.name} produced no assets; not cached")

        if self.metrics_collector:
            self.metrics_collector.record_count(
                "screen_assets_total",
                len(outcome.assets),
                {"screen": screen.name, "source": result.source.value},
            )
        return outcome

    async def _persist(
        self,
        rows: List[CacheEntry],
        outcomes: List[ScreenOutcome],
    ) -> ScreeningRunStatus:
        if not rows:
            error = "No screen produced cacheable output."
            logger.error(f"Screening run failed: {error}")
            return ScreeningRunStatus(success=False, error=error, outcomes=outcomes)

        try:
            await self.cache_store.upsert(rows)
        except PersistenceFailure as e:
            error = f"Failed to write to cache: {e}"
            logger.error(f"Screening run failed: {error}")
            return ScreeningRunStatus(success=False, error=error, outcomes=outcomes)

        keys = [row.key for row in rows]
        logger.info(f"Upserted {len(keys)} keys to cache: {', '.join(keys)}")
        return ScreeningRunStatus(
            success=True,
            message=SUCCESS_MESSAGE,
            outcomes=outcomes,
            persisted_keys=keys,
        )
