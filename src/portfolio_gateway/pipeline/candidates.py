"""
Candidate Deduplication and Ranking.

Screens produce candidate lists from several upstream pages (one per
sector, one per ETF holding); these helpers collapse duplicates and cap
the list before it is cached.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

from portfolio_gateway.domain.entities import Asset

T = TypeVar("T")


def dedupe(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """
    Collapse items sharing a key. The last occurrence wins and keeps the
    position of the first one.

    Idempotent: deduplicating an already deduplicated list returns an equal
    list.
    """
    by_key: Dict[Hashable, T] = {}
    for item in items:
        by_key[key(item)] = item
    return list(by_key.values())


def dedupe_by_ticker(assets: Iterable[Asset]) -> List[Asset]:
    return dedupe(assets, key=lambda asset: asset.ticker)


def rank_and_limit(
    items: Sequence[T],
    limit: int,
    sort_key: Optional[Callable[[T], float]] = None,
) -> List[T]:
    """
    Keep the first ``limit`` items.

    With a ``sort_key`` the items are ordered by it descending first (ties
    keep upstream order); without one, upstream order is kept.
    """
    if sort_key is not None:
        items = sorted(items, key=sort_key, reverse=True)
    return list(items[:limit])
