"""Dispatch Package - Request to handler routing."""

from portfolio_gateway.dispatch.dispatcher import CommandDispatcher, DispatchResponse

__all__ = ["CommandDispatcher", "DispatchResponse"]
