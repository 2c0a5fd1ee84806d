"""
Pipeline Package - Template Screening.

    - candidates: dedup and rank/limit helpers
    - strategies: the screen strategies (aggressive, shariah)
    - screening_pipeline: settle-all fan-out and batched cache write
"""

from portfolio_gateway.pipeline.candidates import dedupe, dedupe_by_ticker, rank_and_limit
from portfolio_gateway.pipeline.screening_pipeline import (
    ScreenOutcome,
    ScreeningPipeline,
    ScreeningRunStatus,
)
from portfolio_gateway.pipeline.strategies import (
    AggressiveGrowthScreen,
    BaseScreen,
    ShariahScreen,
    build_screens,
)

__all__ = [
    "dedupe",
    "dedupe_by_ticker",
    "rank_and_limit",
    "ScreenOutcome",
    "ScreeningPipeline",
    "ScreeningRunStatus",
    "AggressiveGrowthScreen",
    "BaseScreen",
    "ShariahScreen",
    "build_screens",
]
