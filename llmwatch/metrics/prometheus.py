"""
Prometheus text exposition (format 0.0.4) for the metrics store.

Label order is fixed (provider, model, then stat/status) because the
dashboards and scrape configs match on the exact series lines.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .store import MetricsStore


CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def format_value(value: float) -> str:
    """Integral values print without a fractional part: 100.0 -> "100"."""
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _labels(pairs: Sequence[Tuple[str, str]]) -> str:
    if not pairs:
        return ""
    inner = ",".join(f'{k}="{escape_label_value(v)}"' for k, v in pairs)
    return "{" + inner + "}"


def _sample(name: str, pairs: Sequence[Tuple[str, str]], value: float) -> str:
    return f"{name}{_labels(pairs)} {format_value(value)}"


def render_prometheus(store: MetricsStore) -> str:
    counters = store.get_counters()
    groups = store.get_grouped_by_provider_model()

    duration: List[str] = []
    by_status: List[str] = []
    cost: List[str] = []
    tokens: List[str] = []
    for (provider, model), stats in groups.items():
        base = (("provider", provider), ("model", model))
        duration.append(
            _sample("llm_request_duration_ms", base + (("stat", "avg"),), stats.avg_latency)
        )
        duration.append(
            _sample(
                "llm_request_duration_ms", base + (("stat", "latest"),), stats.latest_latency
            )
        )
        by_status.append(
            _sample("llm_requests_total", base + (("status", "success"),), stats.success_count)
        )
        by_status.append(
            _sample("llm_requests_total", base + (("status", "error"),), stats.error_count)
        )
        cost.append(_sample("llm_request_cost_usd", base, stats.sum_cost))
        tokens.append(_sample("llm_tokens_total", base, stats.sum_tokens))

    # Per-group request counts share the llm_requests_total family.
    lines: List[str] = [
        "# HELP llm_requests_total Total LLM requests observed by the agent",
        "# TYPE llm_requests_total counter",
        _sample("llm_requests_total", (), counters["requests_total"]),
        *by_status,
        "# HELP llm_errors_total Total failed LLM requests",
        "# TYPE llm_errors_total counter",
        _sample("llm_errors_total", (), counters["errors_total"]),
    ]
    if groups:
        lines += [
            "# HELP llm_request_duration_ms Request latency per provider and model",
            "# TYPE llm_request_duration_ms gauge",
            *duration,
            "# HELP llm_request_cost_usd Estimated cost in USD of retained requests",
            "# TYPE llm_request_cost_usd gauge",
            *cost,
            "# HELP llm_tokens_total Tokens used by retained requests",
            "# TYPE llm_tokens_total counter",
            *tokens,
        ]

    return "\n".join(lines) + "\n"


__all__ = ["CONTENT_TYPE", "escape_label_value", "format_value", "render_prometheus"]
