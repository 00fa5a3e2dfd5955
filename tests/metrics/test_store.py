from concurrent.futures import ThreadPoolExecutor

import pytest

from llmwatch.metrics import MetricsStore
from llmwatch.models import AggregateView, MetricRecord


def _record(
    latency: float = 100.0,
    *,
    provider: str = "cerebras",
    model: str = "llama3.1-8b",
    cost: float = 0.0,
    tokens: int = 0,
    error: str | None = None,
) -> MetricRecord:
    return MetricRecord(
        provider=provider,
        model=model,
        latency_ms=latency,
        total_tokens=tokens,
        cost=cost,
        error=error,
    )


def test_append_and_latest():
    store = MetricsStore(max_size=5)
    assert store.get_latest() is None

    store.append(_record(1))
    store.append(_record(2))

    latest = store.get_latest()
    assert latest is not None
    assert latest.latency_ms == 2
    assert [r.latency_ms for r in store.get_all()] == [1, 2]


def test_fifo_eviction_keeps_newest():
    store = MetricsStore(max_size=3)
    for i in range(5):
        store.append(_record(float(i)))

    assert len(store) == 3
    assert [r.latency_ms for r in store.get_all()] == [2.0, 3.0, 4.0]
    # Counters keep counting past eviction.
    assert store.requests_total == 5


def test_invalid_max_size_rejected():
    with pytest.raises(ValueError):
        MetricsStore(max_size=0)


def test_get_last_handles_bounds():
    store = MetricsStore()
    for i in range(4):
        store.append(_record(float(i)))

    assert [r.latency_ms for r in store.get_last(2)] == [2.0, 3.0]
    assert len(store.get_last(100)) == 4
    assert store.get_last(0) == []
    assert store.get_last(-3) == []


def test_aggregates_of_empty_store_are_zero():
    aggregates = MetricsStore().get_aggregates()

    assert aggregates == AggregateView()
    assert aggregates.model_dump(by_alias=True) == {
        "avgLatency": 0.0,
        "avgCost": 0.0,
        "errorRate": 0.0,
        "totalRequests": 0,
    }


def test_aggregates_over_identical_records():
    store = MetricsStore()
    for _ in range(4):
        store.append(_record(120.0, cost=0.002))

    aggregates = store.get_aggregates(10)

    assert aggregates.avg_latency == pytest.approx(120.0)
    assert aggregates.avg_cost == pytest.approx(0.002)
    assert aggregates.error_rate == 0.0
    assert aggregates.total_requests == 4


def test_aggregates_use_only_last_window():
    store = MetricsStore()
    store.append(_record(1000.0, error="boom"))
    store.append(_record(100.0))
    store.append(_record(300.0, error="boom"))

    aggregates = store.get_aggregates(2)

    assert aggregates.avg_latency == pytest.approx(200.0)
    assert aggregates.error_rate == pytest.approx(0.5)
    assert aggregates.total_requests == 2


def test_read_operations_are_idempotent():
    store = MetricsStore()
    store.append(_record(10.0))
    store.append(_record(30.0, error="x"))

    first = (store.get_all(), store.get_aggregates(), store.get_counters())
    second = (store.get_all(), store.get_aggregates(), store.get_counters())

    assert first == second
    assert len(store) == 2


def test_grouped_by_provider_model():
    store = MetricsStore()
    store.append(_record(100.0, cost=0.1, tokens=10))
    store.append(_record(300.0, cost=0.2, tokens=20, error="upstream"))
    store.append(_record(50.0, provider="openrouter", model="gpt-4o-mini"))

    groups = store.get_grouped_by_provider_model()

    assert list(groups) == [("cerebras", "llama3.1-8b"), ("openrouter", "gpt-4o-mini")]
    stats = groups[("cerebras", "llama3.1-8b")]
    assert stats.count == 2
    assert stats.error_count == 1
    assert stats.success_count == 1
    assert stats.avg_latency == pytest.approx(200.0)
    assert stats.latest_latency == 300.0
    assert stats.sum_cost == pytest.approx(0.3)
    assert stats.sum_tokens == 30


def test_counters_and_clear():
    store = MetricsStore()
    store.append(_record())
    store.append(_record(error="boom"))

    assert store.get_counters() == {"requests_total": 2, "errors_total": 1}

    store.clear()

    assert len(store) == 0
    assert store.get_counters() == {"requests_total": 0, "errors_total": 0}


def test_concurrent_appends_are_all_counted():
    store = MetricsStore(max_size=50)
    appends = 400

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: store.append(_record(float(i))), range(appends)))

    assert store.requests_total == appends
    assert len(store) == 50


def test_get_by_provider_filters_in_order():
    store = MetricsStore()
    store.append(_record(1.0, provider="cerebras"))
    store.append(_record(2.0, provider="llama"))
    store.append(_record(3.0, provider="cerebras"))

    assert [r.latency_ms for r in store.get_by_provider("cerebras")] == [1.0, 3.0]
    assert store.get_by_provider("mcp") == []
