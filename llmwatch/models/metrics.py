import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


class MetricRecord(BaseModel):
    """
    One immutable observation of a single provider call attempt.

    Field names are snake_case in Python and camelCase on the wire
    (`latencyMs`, `promptTokens`, ...).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        protected_namespaces=(),
    )

    timestamp: int = Field(
        default_factory=now_ms, description="Creation time (epoch milliseconds)"
    )
    provider: str = Field(..., description="Provider id, e.g. 'cerebras' or 'demo'")
    model: str = Field(..., description="Model identifier used for the call")
    latency_ms: float = Field(0.0, description="Observed latency in ms", ge=0)
    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)
    total_tokens: int = Field(0, ge=0)
    cost: float = Field(0.0, description="Estimated cost in USD", ge=0)
    error: Optional[str] = Field(None, description="Error message if the call failed")

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class AggregateView(BaseModel):
    """
    Rolling-window statistics over the most recent records.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    avg_latency: float = Field(0.0, ge=0)
    avg_cost: float = Field(0.0, ge=0)
    error_rate: float = Field(0.0, description="Error rate in [0, 1]", ge=0.0, le=1.0)
    total_requests: int = Field(0, description="Records actually aggregated", ge=0)


class ProviderGroupStats(BaseModel):
    """
    Per (provider, model) totals used by the Prometheus exposition.
    """

    count: int = 0
    sum_latency: float = 0.0
    latest_latency: float = 0.0
    error_count: int = 0
    sum_cost: float = 0.0
    sum_tokens: int = 0

    @property
    def success_count(self) -> int:
        return self.count - self.error_count

    @property
    def avg_latency(self) -> float:
        return self.sum_latency / self.count if self.count else 0.0


__all__ = ["AggregateView", "MetricRecord", "ProviderGroupStats", "now_ms"]
