"""
Portfolio Gateway - Tiered Market Data Access and Template Screening.

A command-dispatching data-access layer that puts several unreliable
upstream providers (market data, news, LLM chat) behind one request
protocol. Every answer carries its provenance: ``live`` when the upstream
answered, ``cache`` when a pre-computed bucket was used, ``static`` when
the built-in fallback tables were used.

A companion batch pipeline screens curated template asset lists on a
schedule and writes them to the shared cache in a single upsert.

Architecture:
    - Hexagonal Architecture (Ports & Adapters)
    - Dependency Injection for testability
    - Strategy Pattern for per-command tier policies and screens
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Core entities (Asset, ResultEnvelope, CacheEntry)
    - interfaces: Protocols for upstream clients, cache stores, chat models
    - adapters: httpx upstream client, cache stores, Gemini chat, metrics
    - fallback: Static fallback store and shared display formatting
    - resilience: Error taxonomy and the tiered resolver
    - commands: Command catalogue and closed registry
    - dispatch: Command dispatcher
    - pipeline: Template screening pipeline and screen strategies
    - api: FastAPI transport

Example:
    >>> from portfolio_gateway.api.server import create_app
    >>> from portfolio_gateway.config.loader import load_config
    >>> app = create_app(load_config("config/default.yaml"))

"""

import logging

__version__ = "0.4.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for Portfolio Gateway.

    Call this at application startup (the server entry point does).

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import portfolio_gateway
        >>> portfolio_gateway.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("portfolio_gateway").setLevel(level)
    # httpx logs full request URLs at INFO, and upstream keys travel in the query.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
