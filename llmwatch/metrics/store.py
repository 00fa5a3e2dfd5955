"""
Bounded in-memory metrics store.

Holds the most recent MetricRecords (FIFO eviction past `max_size`) plus
two monotonically increasing counters. Every method takes the same lock,
and only for the duration of the in-memory operation, so request handlers
and the demo generator can share one instance. Nothing is persisted; all
state is lost when the process restarts.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from llmwatch.models import AggregateView, MetricRecord, ProviderGroupStats


DEFAULT_MAX_SIZE = 500
DEFAULT_AGGREGATE_WINDOW = 10


class MetricsStore:
    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._lock = threading.Lock()
        self._records: Deque[MetricRecord] = deque(maxlen=max_size)
        self._requests_total = 0
        self._errors_total = 0

    def append(self, record: MetricRecord) -> None:
        with self._lock:
            # deque(maxlen=...) drops the oldest entry on overflow.
            self._records.append(record)
            self._requests_total += 1
            if record.error is not None:
                self._errors_total += 1

    def get_all(self) -> List[MetricRecord]:
        with self._lock:
            return list(self._records)

    def get_latest(self) -> Optional[MetricRecord]:
        with self._lock:
            return self._records[-1] if self._records else None

    def get_last(self, count: int) -> List[MetricRecord]:
        if count <= 0:
            return []
        with self._lock:
            records = list(self._records)
        return records[-count:]

    def get_by_provider(self, provider: str) -> List[MetricRecord]:
        return [r for r in self.get_all() if r.provider == provider]

    def get_aggregates(self, count: int = DEFAULT_AGGREGATE_WINDOW) -> AggregateView:
        recent = self.get_last(count)
        if not recent:
            return AggregateView()

        total = len(recent)
        errors = sum(1 for r in recent if r.error is not None)
        return AggregateView(
            avg_latency=sum(r.latency_ms for r in recent) / total,
            avg_cost=sum(r.cost for r in recent) / total,
            error_rate=errors / total,
            total_requests=total,
        )

    def get_grouped_by_provider_model(self) -> Dict[Tuple[str, str], ProviderGroupStats]:
        groups: Dict[Tuple[str, str], ProviderGroupStats] = {}
        for r in self.get_all():
            key = (r.provider or "unknown", r.model or "default")
            stats = groups.get(key)
            if stats is None:
                stats = groups[key] = ProviderGroupStats()
            stats.count += 1
            stats.sum_latency += r.latency_ms
            stats.latest_latency = r.latency_ms
            stats.sum_cost += r.cost
            stats.sum_tokens += r.total_tokens
            if r.error is not None:
                stats.error_count += 1
        return groups

    def get_counters(self) -> Dict[str, int]:
        with self._lock:
            return {
                "requests_total": self._requests_total,
                "errors_total": self._errors_total,
            }

    @property
    def requests_total(self) -> int:
        with self._lock:
            return self._requests_total

    @property
    def errors_total(self) -> int:
        with self._lock:
            return self._errors_total

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._requests_total = 0
            self._errors_total = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = ["DEFAULT_AGGREGATE_WINDOW", "DEFAULT_MAX_SIZE", "MetricsStore"]
