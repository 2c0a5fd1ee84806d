"""
Scripted Upstream Client.

A fake upstream for development and testing. Responses are scripted per
path; unscripted paths fail like a 404 from the real API. Every call is
recorded so tests can assert on what was requested.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from portfolio_gateway.resilience.errors import UpstreamFailure

Response = Union[Any, BaseException, Callable[[Dict[str, Any]], Any]]


class ScriptedUpstreamClient:
    """UpstreamClient returning canned bodies keyed by request path."""

    def __init__(
        self,
        source: str = "market",
        responses: Optional[Dict[str, Response]] = None,
    ) -> None:
        """
        Initialize scripted client.

        Args:
            source: Name reported in failures
            responses: Path -> body, exception to raise, or a callable
                taking the query params and returning a body
        """
        self._source = source
        self._responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    @property
    def source(self) -> str:
        return self._source

    def script(self, path: str, response: Response) -> None:
        self._responses[path] = response

    def fail(self, path: str, status_code: int = 500) -> None:
        self._responses[path] = UpstreamFailure(
            self._source, f"{path}: scripted failure", status_code=status_code
        )

    def paths_called(self) -> List[str]:
        return [path for path, _ in self.calls]

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        query = dict(params or {})
        self.calls.append((path, query))

        if path not in self._responses:
            raise UpstreamFailure(self._source, f"{path}: not found", status_code=404)

        response = self._responses[path]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(query)
        return response
