"""
Background generator of synthetic "demo" metrics.

Gives dashboards something to render before any real call has been made.
The generator is owned by the application lifespan: `start()` on startup,
`stop()` on shutdown. Tests can call `tick()` to append exactly one record
without running the loop.
"""

from __future__ import annotations

import asyncio
import random
from typing import Optional, Sequence

from llmwatch.logging_config import logger
from llmwatch.models import MetricRecord
from llmwatch.provider.extraction import compute_cost

from .store import MetricsStore


DEMO_PROVIDER = "demo"
DEMO_MODELS: Sequence[str] = ("llama3.1-8b", "llama3.1-70b", "gpt-4")
DEMO_COST_PER_MILLION = 1.0
DEMO_ERROR_RATE = 0.05
DEMO_ERROR_MESSAGE = "demo_error"


def generate_demo_metric(rng: Optional[random.Random] = None) -> MetricRecord:
    rng = rng or random.Random()
    prompt_tokens = rng.randrange(100)
    completion_tokens = rng.randrange(150)
    total_tokens = prompt_tokens + completion_tokens
    return MetricRecord(
        provider=DEMO_PROVIDER,
        model=rng.choice(DEMO_MODELS),
        latency_ms=rng.uniform(50.0, 250.0),
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
        cost=compute_cost(total_tokens, DEMO_COST_PER_MILLION),
        error=DEMO_ERROR_MESSAGE if rng.random() < DEMO_ERROR_RATE else None,
    )


class DemoMetricGenerator:
    """Append one demo record to the store every `interval_ms`."""

    def __init__(
        self,
        store: MetricsStore,
        interval_ms: int,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.interval_ms = interval_ms
        self._rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.interval_ms > 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> MetricRecord:
        record = generate_demo_metric(self._rng)
        self.store.append(record)
        return record

    async def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        while True:
            await asyncio.sleep(interval)
            self.tick()

    def start(self) -> None:
        if not self.enabled:
            logger.info("Demo metric generator disabled (DEMO_INTERVAL=%s)", self.interval_ms)
            return
        if self.is_running:
            raise RuntimeError("Demo metric generator already running")
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="demo-metric-generator"
        )
        logger.info("Demo metric generator started (every %sms)", self.interval_ms)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Demo metric generator stopped")


__all__ = [
    "DEMO_COST_PER_MILLION",
    "DEMO_MODELS",
    "DEMO_PROVIDER",
    "DemoMetricGenerator",
    "generate_demo_metric",
]
