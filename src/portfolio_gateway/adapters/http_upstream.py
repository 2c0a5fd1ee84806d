"""
HTTP Upstream Client.

Talks to one external JSON API over httpx. Any non-success status,
transport error or undecodable body is raised as ``UpstreamFailure`` so the
tiered resolver can fall back.

Design Notes:
    - One shared AsyncClient per source; close with ``aclose()``
    - No retries and, unless configured, no timeout
    - The API key travels as a query parameter whose name is per-source
      (``apikey`` for the market API, ``apiKey`` for the news API)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from portfolio_gateway.resilience.errors import UpstreamFailure

logger = logging.getLogger(__name__)

# Error bodies the market API returns with a 200 status.
_ERROR_BODY_KEYS = ("Error Message", "error")


class HttpUpstreamClient:
    """UpstreamClient backed by an httpx.AsyncClient."""

    def __init__(
        self,
        source: str,
        base_url: str,
        api_key: Optional[str] = None,
        api_key_param: str = "apikey",
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize client.

        Args:
            source: Name reported in failures (e.g. ``market``, ``news``)
            base_url: Base URL the request paths are joined to
            api_key: Key attached to every request, if any
            api_key_param: Query parameter name carrying the key
            timeout_seconds: Per-request timeout; None means unbounded
            client: Pre-built AsyncClient (tests inject a MockTransport one)
        """
        self._source = source
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._api_key_param = api_key_param
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True
        )

    @property
    def source(self) -> str:
        return self._source

    def _url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        GET ``path`` and decode the JSON body.

        Raises:
            UpstreamFailure: On non-2xx, transport error or bad JSON
        """
        query = dict(params or {})
        if self._api_key:
            query[self._api_key_param] = self._api_key

        url = self._url_for(path)
        try:
            response = await self._client.get(url, params=query)
        except httpx.HTTPError as e:
            raise UpstreamFailure(self._source, f"{path}: {e!r}") from e

        if not response.is_success:
            raise UpstreamFailure(
                self._source,
                f"{path}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamFailure(self._source, f"{path}: invalid JSON body") from e

        if isinstance(body, dict):
            for key in _ERROR_BODY_KEYS:
                if isinstance(body.get(key), str):
                    raise UpstreamFailure(self._source, f"{path}: {body[key]}")

        logger.debug(f"{self._source} GET {path} -> {response.status_code}")
        return body

    async def aclose(self) -> None:
        await self._client.aclose()
