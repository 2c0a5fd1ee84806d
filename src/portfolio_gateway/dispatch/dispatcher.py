"""
Command Dispatcher.

Receives one ``{command, payload}`` request, invokes exactly one handler
and turns the outcome into a DispatchResponse: a JSON envelope, a chat
byte stream, or a uniform ``{error}`` body. Nothing raised by a handler
escapes to the transport.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from portfolio_gateway.commands.chat import ChatStream
from portfolio_gateway.commands.registry import CommandRegistry
from portfolio_gateway.domain.entities import ResultEnvelope
from portfolio_gateway.interfaces.metrics_collector import MetricsCollector
from portfolio_gateway.resilience.errors import GatewayError, UnknownCommand

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class DispatchResponse:
    """Transport-neutral response of one dispatch."""

    status_code: int
    body: Optional[Dict[str, Any]] = None
    stream: Optional[ChatStream] = None

    @property
    def is_stream(self) -> bool:
        return self.stream is not None

    @property
    def media_type(self) -> str:
        return self.stream.media_type if self.stream is not None else JSON_MEDIA_TYPE

    @classmethod
    def error(cls, status_code: int, message: str) -> "DispatchResponse":
        return cls(status_code=status_code, body={"error": message})


class CommandDispatcher:
    """Routes requests to the handlers of a frozen CommandRegistry."""

    def __init__(
        self,
        registry: CommandRegistry,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> None:
        if not registry.is_frozen:
            raise ValueError("CommandDispatcher needs a frozen registry")
        self.registry = registry
        self.metrics_collector = metrics_collector

    async def dispatch(self, request: Any) -> DispatchResponse:
        """
        Handle one request.

        Args:
            request: Decoded request body, expected ``{command, payload}``

        Returns:
            DispatchResponse; never raises for handler failures
        """
        start_time = time.perf_counter()
        command = request.get("command") if isinstance(request, Mapping) else None
        logger.info(f"Handling command: {command}")

        try:
            info = self.registry.get(command)
            result = await info.handler(request.get("payload"))
        except GatewayError as e:
            log = logger.warning if isinstance(e, UnknownCommand) else logger.error
            log(f"Command {command} failed: {e}")
            return self._finish(command, start_time, DispatchResponse.error(e.status_code, str(e)))
        except Exception as e:
            logger.exception(f"Command {command} raised unexpectedly")
            message = str(e) or type(e).__name__
            return self._finish(command, start_time, DispatchResponse.error(500, message))

        if isinstance(result, ChatStream):
            return self._finish(command, start_time, DispatchResponse(200, stream=result))

        if not isinstance(result, ResultEnvelope):
            logger.error(f"Command {command} returned {type(result).__name__}, not an envelope")
            return self._finish(
                command, start_time, DispatchResponse.error(500, "Handler returned no envelope")
            )

        if self.metrics_collector:
            self.metrics_collector.record_count(
                "envelope_source_total",
                1,
                {"command": str(command), "source": result.source.value},
            )
        return self._finish(command, start_time, DispatchResponse(200, body=result.to_payload()))

    def _finish(
        self, command: Any, start_time: float, response: DispatchResponse
    ) -> DispatchResponse:
        if self.metrics_collector:
            self.metrics_collector.record_timing(
                "command_duration_seconds",
                time.perf_counter() - start_time,
                {"command": str(command), "status": str(response.status_code)},
            )
        return response
