"""API Package - FastAPI transport and server entry point."""

from portfolio_gateway.api.server import GatewayServices, build_services, create_app, main

__all__ = ["GatewayServices", "build_services", "create_app", "main"]
