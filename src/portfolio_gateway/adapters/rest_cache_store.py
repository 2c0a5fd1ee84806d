"""
REST Cache Store - PostgREST-style Table over HTTP.

Reads and writes the ``api_cache`` table through a PostgREST endpoint
(``<url>/rest/v1/<table>``), the shape exposed by hosted Postgres
platforms.

    read:   GET  ?key=eq.<key>&select=key,data,last_fetched
    upsert: POST [rows]  with  Prefer: resolution=merge-duplicates

Read failures raise UpstreamFailure (resolvers treat them as a miss);
write failures raise PersistenceFailure.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from portfolio_gateway.domain.entities import CacheEntry
from portfolio_gateway.resilience.errors import PersistenceFailure, UpstreamFailure

logger = logging.getLogger(__name__)


class RestCacheStore:
    """CacheStore backed by a PostgREST table."""

    SOURCE = "cache_store"

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "api_cache",
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self._headers: Dict[str, str] = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def read(self, key: str) -> Optional[CacheEntry]:
        params = {"key": f"eq.{key}", "select": "key,data,last_fetched"}
        try:
            response = await self._client.get(
                self._endpoint, params=params, headers=self._headers
            )
        except httpx.HTTPError as e:
            raise UpstreamFailure(self.SOURCE, f"read {key}: {e!r}") from e

        if not response.is_success:
            raise UpstreamFailure(
                self.SOURCE, f"read {key}", status_code=response.status_code
            )

        try:
            rows: Any = response.json()
            if not rows:
                return None
            return CacheEntry.model_validate(rows[0])
        except (ValueError, LookupError, TypeError) as e:
            raise UpstreamFailure(self.SOURCE, f"read {key}: bad row: {e}") from e

    async def upsert(self, entries: Sequence[CacheEntry]) -> None:
        rows = [entry.to_row() for entry in entries]
        headers = {
            **self._headers,
            "Prefer": "resolution=merge-duplicates",
        }
        try:
            response = await self._client.post(
                self._endpoint,
                params={"on_conflict": "key"},
                json=rows,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise PersistenceFailure(f"upsert of {len(rows)} rows failed: {e!r}") from e

        if not response.is_success:
            raise PersistenceFailure(
                f"upsert of {len(rows)} rows failed: "
                f"HTTP {response.status_code} {response.text}"
            )
        logger.info(f"Upserted {len(rows)} rows into {self._endpoint}")

    async def aclose(self) -> None:
        await self._client.aclose()
