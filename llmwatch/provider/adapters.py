"""
Provider adapters.

An adapter turns a generic `(prompt, model)` request into one upstream
call and normalizes the reply into a `NormalizedResult`. Adapters never
retry and never touch the metrics store; failures surface as typed
`LLMWatchError` subclasses.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

import httpx

from llmwatch.errors import ApiKeyMissingError, InvalidRequestError
from llmwatch.logging_config import logger
from llmwatch.models import NormalizedResult, ProviderConfig

from .extraction import (
    CHAT_COMPLETION_STRATEGIES,
    CHOICE_MESSAGE,
    CHOICE_TEXT,
    GATEWAY_RESPONSE,
    OUTPUT_CONTENT,
    RESULT,
    ExtractionStrategy,
    compute_cost,
    extract_text,
    extract_usage,
)
from .transport import post_json


class ProviderAdapter:
    """
    Base adapter for OpenAI-style chat-completion endpoints.

    Subclasses customise the payload, the ordered extraction strategies
    and how cost is derived.
    """

    strategies: Tuple[ExtractionStrategy, ...] = CHAT_COMPLETION_STRATEGIES

    def __init__(self, config: ProviderConfig) -> None:
        self.config = config

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def default_model(self) -> str:
        return self.config.default_model

    def build_payload(self, prompt: str, model: str) -> Dict[str, Any]:
        return {"model": model, "messages": [{"role": "user", "content": prompt}]}

    def build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        # Provider-specific extra headers take precedence.
        if self.config.custom_headers:
            headers.update(self.config.custom_headers)
        return headers

    def _check_request(self, prompt: Any) -> None:
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidRequestError(
                "Field 'prompt' must be a non-empty string",
                details={"provider": self.name},
            )
        if self.config.requires_api_key and not self.config.has_api_key:
            raise ApiKeyMissingError(self.name, self.config.api_key_env)

    async def call(
        self, client: httpx.AsyncClient, prompt: str, model: Optional[str] = None
    ) -> NormalizedResult:
        self._check_request(prompt)
        model = model or self.default_model

        start = time.perf_counter()
        payload = await post_json(
            client, self.config, self.build_payload(prompt, model), headers=self.build_headers()
        )
        latency_ms = (time.perf_counter() - start) * 1000.0

        result = self.normalize(payload, prompt=prompt, model=model, latency_ms=latency_ms)
        logger.info(
            "Provider %s model=%s answered in %.1fms (tokens=%d, cost=%.8f)",
            self.name,
            result.model,
            result.latency_ms,
            result.total_tokens,
            result.cost,
        )
        return result

    def compute_cost(self, payload: Any, total_tokens: int) -> float:
        return compute_cost(total_tokens, self.config.cost_per_million_tokens)

    def normalize(
        self, payload: Any, *, prompt: str, model: str, latency_ms: float
    ) -> NormalizedResult:
        text = extract_text(payload, self.strategies)
        usage = extract_usage(payload, prompt, text)
        return NormalizedResult(
            ok=True,
            provider=self.name,
            model=model,
            text=text,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
            cost=self.compute_cost(payload, usage.total_tokens),
            latency_ms=latency_ms,
            error=None,
        )


class CerebrasAdapter(ProviderAdapter):
    strategies = (CHOICE_MESSAGE, CHOICE_TEXT)


class OpenRouterAdapter(ProviderAdapter):
    strategies = (CHOICE_MESSAGE, CHOICE_TEXT)


class LlamaAdapter(ProviderAdapter):
    # Llama-compatible hosts answer in several shapes; the responses-style
    # output list is checked first.
    strategies = (OUTPUT_CONTENT, CHOICE_MESSAGE, CHOICE_TEXT, RESULT)


class McpGatewayAdapter(ProviderAdapter):
    """
    Forwards the prompt to the MCP gateway, which calls the real provider
    and answers with an already-normalized envelope.
    """

    strategies = (GATEWAY_RESPONSE, CHOICE_MESSAGE, CHOICE_TEXT, RESULT)

    def build_payload(self, prompt: str, model: str) -> Dict[str, Any]:
        return {
            "provider": self.config.target_provider or "cerebras",
            "model": model,
            "prompt": prompt,
        }

    def compute_cost(self, payload: Any, total_tokens: int) -> float:
        # The gateway prices the call with the target provider's rate.
        cost = payload.get("cost") if isinstance(payload, dict) else None
        if isinstance(cost, (int, float)) and not isinstance(cost, bool) and cost >= 0:
            return float(cost)
        return 0.0

    def normalize(
        self, payload: Any, *, prompt: str, model: str, latency_ms: float
    ) -> NormalizedResult:
        result = super().normalize(payload, prompt=prompt, model=model, latency_ms=latency_ms)
        if not isinstance(payload, dict):
            return result
        updates: Dict[str, Any] = {}
        if isinstance(payload.get("model"), str) and payload["model"]:
            updates["model"] = payload["model"]
        reported = payload.get("latencyMs")
        if isinstance(reported, (int, float)) and not isinstance(reported, bool) and reported >= 0:
            updates["latency_ms"] = float(reported)
        return result.model_copy(update=updates) if updates else result


__all__ = [
    "CerebrasAdapter",
    "LlamaAdapter",
    "McpGatewayAdapter",
    "OpenRouterAdapter",
    "ProviderAdapter",
]
