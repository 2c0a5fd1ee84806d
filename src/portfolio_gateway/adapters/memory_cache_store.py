"""
In-Memory Cache Store.

Dict-backed implementation of the shared cache table, for development,
tests and single-process deployments.

Design Notes:
    - Thread-safe with Lock
    - Whole-row replacement on upsert; rows are never deleted
    - Optional failure injection for read and write paths
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Optional, Sequence

from portfolio_gateway.domain.entities import CacheEntry
from portfolio_gateway.resilience.errors import PersistenceFailure, UpstreamFailure

logger = logging.getLogger(__name__)


class InMemoryCacheStore:
    """CacheStore keeping rows in a dict keyed by ``CacheEntry.key``."""

    def __init__(self, entries: Optional[Sequence[CacheEntry]] = None) -> None:
        self._rows: Dict[str, CacheEntry] = {e.key: e for e in entries or ()}
        self._lock = Lock()
        self.fail_reads = False
        self.fail_writes = False
        self.upsert_calls = 0

    async def read(self, key: str) -> Optional[CacheEntry]:
        if self.fail_reads:
            raise UpstreamFailure("cache_store", f"read of {key} failed")
        with self._lock:
            return self._rows.get(key)

    async def upsert(self, entries: Sequence[CacheEntry]) -> None:
        with self._lock:
            self.upsert_calls += 1
            if self.fail_writes:
                raise PersistenceFailure(
                    f"upsert of {len(entries)} rows failed: store unavailable"
                )
            for entry in entries:
                self._rows[entry.key] = entry
        logger.debug(f"Upserted {len(entries)} cache rows")

    def keys(self) -> list:
        with self._lock:
            return sorted(self._rows)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
