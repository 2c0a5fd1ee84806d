"""
Upstream Client Protocol.

Defines the abstract interface for a named external JSON source
(market-data API, news API).

The client is responsible for:
    - Building the request URL and attaching the API key
    - Returning the decoded JSON body on success
    - Raising UpstreamFailure on any non-success status, transport error
      or undecodable body

Design Notes:
    - The client never retries; the tiered resolver falls back instead
    - Response schemas stay opaque here; command handlers interpret them
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class UpstreamClient(Protocol):
    """Abstract interface for one upstream JSON API."""

    @property
    def source(self) -> str:
        """Name used in UpstreamFailure messages (e.g. ``market``)."""
        ...

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a GET against the source.

        Args:
            path: Path relative to the source's base URL
            params: Extra query parameters

        Returns:
            Decoded JSON body

        Raises:
            UpstreamFailure: On non-2xx, transport error or bad JSON
        """
        ...
