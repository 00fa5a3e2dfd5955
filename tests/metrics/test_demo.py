import asyncio
import random

import pytest

from llmwatch.metrics import DemoMetricGenerator, MetricsStore, generate_demo_metric
from llmwatch.metrics.demo import DEMO_COST_PER_MILLION, DEMO_MODELS, DEMO_PROVIDER


def test_generated_metric_bounds():
    rng = random.Random(42)

    for _ in range(200):
        record = generate_demo_metric(rng)
        assert record.provider == DEMO_PROVIDER
        assert record.model in DEMO_MODELS
        assert 50.0 <= record.latency_ms <= 250.0
        assert 0 <= record.prompt_tokens < 100
        assert 0 <= record.completion_tokens < 150
        assert record.total_tokens == record.prompt_tokens + record.completion_tokens
        assert record.cost == pytest.approx(
            record.total_tokens / 1_000_000 * DEMO_COST_PER_MILLION
        )
        assert record.error in (None, "demo_error")


def test_tick_appends_one_record():
    store = MetricsStore(max_size=2)
    generator = DemoMetricGenerator(store, 1000, rng=random.Random(1))

    first = generator.tick()
    generator.tick()
    generator.tick()

    assert len(store) == 2
    assert store.requests_total == 3
    assert first not in store.get_all()


@pytest.mark.asyncio
async def test_disabled_generator_does_not_start():
    generator = DemoMetricGenerator(MetricsStore(), 0)

    generator.start()

    assert generator.enabled is False
    assert generator.is_running is False
    await generator.stop()


@pytest.mark.asyncio
async def test_start_and_stop_background_task():
    store = MetricsStore()
    generator = DemoMetricGenerator(store, 5, rng=random.Random(7))

    generator.start()
    assert generator.is_running
    with pytest.raises(RuntimeError):
        generator.start()

    await asyncio.sleep(0.1)
    await generator.stop()

    assert generator.is_running is False
    produced = len(store)
    assert produced >= 1
    await asyncio.sleep(0.05)
    assert len(store) == produced
