"""
Cache Store Protocol.

Defines the abstract interface for the shared cache table written by the
screening pipeline and read by cache-backed resolvers.

Design Notes:
    - Rows are keyed by ``CacheEntry.key``; an upsert replaces whole rows
    - Atomicity of one upsert call belongs to the store
    - The subsystem never deletes rows
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from portfolio_gateway.domain.entities import CacheEntry


@runtime_checkable
class CacheStore(Protocol):
    """Abstract interface for the shared cache table."""

    async def read(self, key: str) -> Optional[CacheEntry]:
        """
        Read one row.

        Returns:
            The entry, or None when no row has this key

        Raises:
            UpstreamFailure: If the store could not be read
        """
        ...

    async def upsert(self, entries: Sequence[CacheEntry]) -> None:
        """
        Create or replace rows in one batched call.

        Raises:
            PersistenceFailure: If the write did not complete
        """
        ...
