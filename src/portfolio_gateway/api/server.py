"""
Portfolio Gateway HTTP Server
=============================

FastAPI transport for the command dispatcher and the screening cron.

Endpoints:
- POST    /                          -> {command, payload} -> {data, source}
                                        or a text stream (startChatStream)
- OPTIONS /                          -> CORS preflight
- POST    /cron/screen-templates     -> run the screening pipeline
- GET     /metrics                   -> in-process metrics summary

Usage:
    portfolio-gateway --config config/default.yaml --profile production
"""

from __future__ import annotations

import argparse
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from portfolio_gateway import __version__, configure_logging
from portfolio_gateway.adapters.gemini_chat import GeminiChatModel
from portfolio_gateway.adapters.http_upstream import HttpUpstreamClient
from portfolio_gateway.adapters.memory_cache_store import InMemoryCacheStore
from portfolio_gateway.adapters.metrics_collector import InMemoryMetricsCollector
from portfolio_gateway.adapters.rest_cache_store import RestCacheStore
from portfolio_gateway.commands import build_registry
from portfolio_gateway.config.loader import load_config
from portfolio_gateway.config.models import CacheStoreConfig, GatewayConfig
from portfolio_gateway.dispatch.dispatcher import CommandDispatcher
from portfolio_gateway.fallback.static_store import StaticFallbackStore
from portfolio_gateway.interfaces.cache_store import CacheStore
from portfolio_gateway.interfaces.chat_model import ChatModel
from portfolio_gateway.interfaces.upstream_client import UpstreamClient
from portfolio_gateway.pipeline.screening_pipeline import ScreeningPipeline
from portfolio_gateway.pipeline.strategies import build_screens

logger = logging.getLogger(__name__)


@dataclass
class GatewayServices:
    """Everything the HTTP layer talks to, wired once per process."""

    config: GatewayConfig
    dispatcher: CommandDispatcher
    pipeline: ScreeningPipeline
    metrics: InMemoryMetricsCollector
    closers: List[Callable[[], Awaitable[None]]] = field(default_factory=list)

    async def aclose(self) -> None:
        for close in self.closers:
            await close()


def _build_cache_store(config: CacheStoreConfig, timeout: Optional[float]) -> CacheStore:
    if config.backend == "rest":
        if not config.url or not config.api_key:
            raise ValueError("cache_store.backend 'rest' needs CACHE_STORE_URL and CACHE_STORE_KEY")
        return RestCacheStore(config.url, config.api_key, config.table, timeout_seconds=timeout)
    return InMemoryCacheStore()


def build_services(
    config: GatewayConfig,
    market: Optional[UpstreamClient] = None,
    news: Optional[UpstreamClient] = None,
    chat_model: Optional[ChatModel] = None,
    cache_store: Optional[CacheStore] = None,
    static_store: Optional[StaticFallbackStore] = None,
    metrics: Optional[InMemoryMetricsCollector] = None,
) -> GatewayServices:
    """
    Wire config -> adapters -> registry -> dispatcher and pipeline.

    Any collaborator passed in replaces the one built from config.
    """
    closers: List[Callable[[], Awaitable[None]]] = []
    upstream = config.upstream

    if market is None:
        market_client = HttpUpstreamClient(
            "market",
            upstream.market_base_url,
            api_key=upstream.market_api_key,
            api_key_param="apikey",
            timeout_seconds=upstream.timeout_seconds,
        )
        closers.append(market_client.aclose)
        market = market_client
    if news is None:
        news_client = HttpUpstreamClient(
            "news",
            upstream.news_base_url,
            api_key=upstream.news_api_key,
            api_key_param="apiKey",
            timeout_seconds=upstream.timeout_seconds,
        )
        closers.append(news_client.aclose)
        news = news_client
    if chat_model is None:
        chat_model = GeminiChatModel(
            api_key=config.chat.api_key,
            model=config.chat.model,
            system_instruction=config.chat.system_instruction,
        )
    if cache_store is None:
        cache_store = _build_cache_store(config.cache_store, upstream.timeout_seconds)
        if isinstance(cache_store, RestCacheStore):
            closers.append(cache_store.aclose)

    static_store = static_store or StaticFallbackStore.build_default()
    metrics = metrics or InMemoryMetricsCollector()

    registry = build_registry(
        market=market,
        news=news,
        chat_model=chat_model,
        cache_store=cache_store,
        static_store=static_store,
        screens=build_screens(config.screening, market, static_store),
    )
    pipeline = ScreeningPipeline(
        screens=list(
            build_screens(config.screening, market, static_store, enabled_only=True).values()
        ),
        cache_store=cache_store,
        metrics_collector=metrics,
    )
    return GatewayServices(
        config=config,
        dispatcher=CommandDispatcher(registry, metrics_collector=metrics),
        pipeline=pipeline,
        metrics=metrics,
        closers=closers,
    )


def create_app(
    config: Optional[GatewayConfig] = None,
    services: Optional[GatewayServices] = None,
) -> FastAPI:
    """Application factory."""
    if services is None:
        services = build_services(config or GatewayConfig())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Portfolio Gateway {__version__} starting")
        yield
        await services.aclose()
        logger.info("Portfolio Gateway stopped")

    app = FastAPI(
        title="Portfolio Gateway",
        version=__version__,
        description="Tiered-fallback market data commands and template screening",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=services.config.server.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.options("/")
    async def preflight() -> Response:
        return Response(status_code=200)

    @app.post("/")
    async def handle_command(request: Request) -> Response:
        try:
            body: Any = await request.json()
        except ValueError:
            return JSONResponse({"error": "Request body must be JSON"}, status_code=400)

        result = await services.dispatcher.dispatch(body)
        if result.stream is not None:
            return StreamingResponse(result.stream, media_type=result.media_type)
        return JSONResponse(result.body, status_code=result.status_code)

    @app.post("/cron/screen-templates")
    async def screen_templates() -> JSONResponse:
        status = await services.pipeline.run()
        return JSONResponse(status.to_payload(), status_code=status.status_code)

    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        return JSONResponse(services.metrics.get_metrics())

    return app


def main(argv: Optional[List[str]] = None) -> None:
    """Run the gateway under uvicorn."""
    parser = argparse.ArgumentParser(description="Portfolio Gateway server")
    parser.add_argument(
        "--config",
        default=os.environ.get("GATEWAY_CONFIG", "config/default.yaml"),
        help="YAML config file",
    )
    parser.add_argument(
        "--profile",
        default=os.environ.get("GATEWAY_PROFILE"),
        help="Profile under config/profiles to overlay",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.INFO))
    config = load_config(args.config, profile=args.profile)
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
