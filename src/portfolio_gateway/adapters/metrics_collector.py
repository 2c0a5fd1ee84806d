"""
In-Memory Metrics Collector.

Keeps every sample in process memory, tagged, so the dispatcher's
provenance counters and the pipeline's run timings can be inspected by
tests and by the ``GET /metrics`` endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class MetricSample:
    """One recorded value."""

    kind: str
    value: float
    tags: Mapping[str, str] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def matches(self, tags: Mapping[str, str]) -> bool:
        return all(self.tags.get(k) == v for k, v in tags.items())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "value": self.value,
            "tags": dict(self.tags),
            "timestamp": self.recorded_at.isoformat(),
        }


class InMemoryMetricsCollector:
    """MetricsCollector storing tagged samples per metric name."""

    def __init__(self) -> None:
        self._samples: Dict[str, List[MetricSample]] = {}
        self._lock = Lock()

    def record_timing(
        self,
        name: str,
        duration_seconds: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._record(name, MetricSample("timing", duration_seconds, dict(tags or {})))

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._record(name, MetricSample("count", value, dict(tags or {})))

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._record(name, MetricSample("gauge", value, dict(tags or {})))

    def get_metrics(self) -> Dict[str, Any]:
        """
        Summary per metric name.

        Counts are also broken down by their tag sets, e.g.
        ``envelope_source_total`` by command and source.
        """
        with self._lock:
            snapshot = {name: list(samples) for name, samples in self._samples.items()}

        summary: Dict[str, Any] = {}
        for name, samples in snapshot.items():
            if not samples:
                continue
            values = [s.value for s in samples]
            entry: Dict[str, Any] = {
                "count": len(values),
                "total": sum(values),
                "last": values[-1],
            }
            if samples[0].kind == "count":
                by_tags: Dict[str, float] = {}
                for sample in samples:
                    label = ",".join(f"{k}={v}" for k, v in sorted(sample.tags.items()))
                    by_tags[label] = by_tags.get(label, 0) + sample.value
                entry["by_tags"] = by_tags
            summary[name] = entry
        return summary

    def entries(self, name: str, **tags: str) -> List[Dict[str, Any]]:
        """Samples of ``name`` whose tags include all of ``tags``."""
        with self._lock:
            samples = list(self._samples.get(name, ()))
        return [s.to_dict() for s in samples if s.matches(tags)]

    def total(self, name: str, **tags: str) -> float:
        return sum(e["value"] for e in self.entries(name, **tags))

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def _record(self, name: str, sample: MetricSample) -> None:
        with self._lock:
            self._samples.setdefault(name, []).append(sample)
