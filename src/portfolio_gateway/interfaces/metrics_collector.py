"""
Metrics Collector Protocol.

Defines the abstract interface for performance metrics collection.

The metrics collector is responsible for:
    - Recording timing metrics (histograms)
    - Recording count metrics (counters)
    - Recording gauge metrics (current values)

Design Notes:
    - Non-blocking metric recording
    - Tag/label support for dimensionality
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class MetricsCollector(Protocol):
    """Abstract interface for metrics collection."""

    def record_timing(
        self, name: str, duration_seconds: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def record_count(
        self, name: str, value: int, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def record_gauge(
        self, name: str, value: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def get_metrics(self) -> Dict[str, Any]:
        ...
