"""
Unit Tests for CommandDispatcher.

Test Aspects Covered:
    ✅ Business Logic: Exactly one handler per request, envelope on the wire
    ✅ Error Handling: Unknown command, invalid payload, handler crash
    ✅ Security: Malformed request bodies never reach a handler
    ✅ Integration: Provenance and duration metrics
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from portfolio_gateway.adapters.metrics_collector import InMemoryMetricsCollector
from portfolio_gateway.adapters.scripted_upstream import ScriptedUpstreamClient
from portfolio_gateway.commands.chat import ChatStream
from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.registry import CommandRegistry
from portfolio_gateway.dispatch.dispatcher import CommandDispatcher
from portfolio_gateway.domain.entities import DataSource, ResultEnvelope


def _registry_with(**overrides) -> CommandRegistry:
    """Complete registry; ``overrides`` maps wire names to handlers."""

    async def default(payload):
        return ResultEnvelope(data=None, source=DataSource.STATIC)

    registry = CommandRegistry()
    registry.register_all(
        {name: overrides.get(name.value, default) for name in CommandName}
    )
    return registry.freeze()


class TestDispatchErrors:
    """Test cases for error responses."""

    def test_unknown_command_is_400(self, dispatcher: CommandDispatcher) -> None:
        """
        SCENARIO: {"command": "doesNotExist"}
        EXPECTED: 400 with {error} naming the command; no handler runs
        """
        response = asyncio.run(dispatcher.dispatch({"command": "doesNotExist", "payload": {}}))

        assert response.status_code == 400
        assert response.body == {"error": "Unknown command: doesNotExist"}
        assert not response.is_stream

    @pytest.mark.parametrize("request_body", [{}, {"payload": {}}, [], "getFxRate", None])
    def test_missing_command_is_400(self, dispatcher: CommandDispatcher, request_body) -> None:
        response = asyncio.run(dispatcher.dispatch(request_body))

        assert response.status_code == 400
        assert "Unknown command" in response.body["error"]

    def test_invalid_payload_is_400(
        self, dispatcher: CommandDispatcher, market: ScriptedUpstreamClient
    ) -> None:
        """
        SCENARIO: getAssetPriceHistory without a ticker
        EXPECTED: 400, upstream never called
        """
        response = asyncio.run(
            dispatcher.dispatch({"command": "getAssetPriceHistory", "payload": {}})
        )

        assert response.status_code == 400
        assert "ticker" in response.body["error"]
        assert market.calls == []

    def test_non_object_payload_is_400(self, dispatcher: CommandDispatcher) -> None:
        response = asyncio.run(
            dispatcher.dispatch({"command": "getCompanyProfile", "payload": "AAPL"})
        )

        assert response.status_code == 400
        assert "payload must be an object" in response.body["error"]

    def test_handler_crash_is_500(self, caplog: pytest.LogCaptureFixture) -> None:
        """
        SCENARIO: A handler raises an unexpected exception
        EXPECTED: 500 with {error}; the exception is logged, not propagated
        """
        async def broken(payload):
            raise KeyError("boom")

        dispatcher = CommandDispatcher(_registry_with(getRiskFreeRate=broken))

        with caplog.at_level(logging.ERROR):
            response = asyncio.run(dispatcher.dispatch({"command": "getRiskFreeRate"}))

        assert response.status_code == 500
        assert "boom" in response.body["error"]
        assert "raised unexpectedly" in caplog.text

    def test_non_envelope_result_is_500(self) -> None:
        async def sloppy(payload):
            return {"data": 1}

        dispatcher = CommandDispatcher(_registry_with(getRiskFreeRate=sloppy))

        response = asyncio.run(dispatcher.dispatch({"command": "getRiskFreeRate"}))

        assert response.status_code == 500

    def test_requires_frozen_registry(self) -> None:
        with pytest.raises(ValueError, match="frozen"):
            CommandDispatcher(CommandRegistry())


class TestDispatchSuccess:
    """Test cases for successful dispatch."""

    def test_envelope_payload(self, dispatcher: CommandDispatcher) -> None:
        response = asyncio.run(dispatcher.dispatch({"command": "getRiskFreeRate"}))

        assert response.status_code == 200
        assert response.body == {"data": 0.042, "source": "static"}
        assert response.media_type == "application/json"

    def test_live_upstream_failure_is_still_200(
        self, dispatcher: CommandDispatcher, market: ScriptedUpstreamClient
    ) -> None:
        """
        SCENARIO: Quote endpoint returns HTTP 500
        EXPECTED: 200 with the static summary, never an error
        """
        market.fail("quote/AAPL", 500)

        response = asyncio.run(
            dispatcher.dispatch({"command": "getAssetPriceSummary", "payload": {"ticker": "AAPL"}})
        )

        assert response.status_code == 200
        assert response.body["source"] == "static"
        assert response.body["data"]["close"] == 172.5

    def test_chat_stream_response(self, dispatcher: CommandDispatcher) -> None:
        async def run():
            response = await dispatcher.dispatch(
                {"command": "startChatStream", "payload": {"message": "hi"}}
            )
            chunks = [chunk async for chunk in response.stream]
            return response, chunks

        response, chunks = asyncio.run(run())

        assert response.is_stream
        assert isinstance(response.stream, ChatStream)
        assert response.media_type.startswith("text/plain")
        assert b"".join(chunks) == b"Hello, world"

    def test_logs_command_name(
        self, dispatcher: CommandDispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="portfolio_gateway.dispatch.dispatcher"):
            asyncio.run(dispatcher.dispatch({"command": "getRiskFreeRate"}))

        assert "Handling command: getRiskFreeRate" in caplog.text

    def test_records_source_and_duration(
        self, dispatcher: CommandDispatcher, metrics_collector: InMemoryMetricsCollector
    ) -> None:
        asyncio.run(dispatcher.dispatch({"command": "getRiskFreeRate"}))
        asyncio.run(dispatcher.dispatch({"command": "nope"}))

        assert metrics_collector.total(
            "envelope_source_total", command="getRiskFreeRate", source="static"
        ) == 1
        assert len(metrics_collector.entries("command_duration_seconds", status="200")) == 1
        assert len(metrics_collector.entries("command_duration_seconds", status="400")) == 1
