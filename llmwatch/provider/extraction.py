"""
Completion-text extraction from heterogeneous upstream response bodies.

Providers nest the generated text differently. Each shape is a named
strategy; adapters declare an ordered tuple of strategies and the first
one that yields a non-empty string wins. When none match the text is "".
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class ExtractionStrategy:
    name: str
    extract: Callable[[Any], Optional[str]]

    def __call__(self, payload: Any) -> Optional[str]:
        return self.extract(payload)


def _first(payload: Any, key: str) -> Any:
    """Return payload[key][0] when it is a non-empty list, else None."""
    if not isinstance(payload, dict):
        return None
    items = payload.get(key)
    if isinstance(items, list) and items:
        return items[0]
    return None


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, list):
        # Content blocks: [{"type": "text", "text": "..."}]
        segments = [
            part["text"]
            for part in value
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        joined = "".join(segments)
        return joined or None
    return None


def _choice_message_content(payload: Any) -> Optional[str]:
    choice = _first(payload, "choices")
    if not isinstance(choice, dict):
        return None
    message = choice.get("message")
    if not isinstance(message, dict):
        return None
    return _as_text(message.get("content"))


def _choice_text(payload: Any) -> Optional[str]:
    choice = _first(payload, "choices")
    if not isinstance(choice, dict):
        return None
    return _as_text(choice.get("text"))


def _output_content(payload: Any) -> Optional[str]:
    item = _first(payload, "output")
    if not isinstance(item, dict):
        return None
    return _as_text(item.get("content"))


def _top_level(key: str) -> Callable[[Any], Optional[str]]:
    def _extract(payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        return _as_text(payload.get(key))

    return _extract


CHOICE_MESSAGE = ExtractionStrategy("choices[0].message.content", _choice_message_content)
CHOICE_TEXT = ExtractionStrategy("choices[0].text", _choice_text)
OUTPUT_CONTENT = ExtractionStrategy("output[0].content", _output_content)
RESULT = ExtractionStrategy("result", _top_level("result"))
GATEWAY_RESPONSE = ExtractionStrategy("response", _top_level("response"))

CHAT_COMPLETION_STRATEGIES: Tuple[ExtractionStrategy, ...] = (CHOICE_MESSAGE, CHOICE_TEXT)


def extract_text(payload: Any, strategies: Iterable[ExtractionStrategy]) -> str:
    for strategy in strategies:
        text = strategy(payload)
        if text:
            return text
    return ""


def estimate_tokens(text: str) -> int:
    """
    Approximate token count from whitespace-separated words (x1.3).
    """
    if not text:
        return 0
    return math.ceil(len(text.split()) * 1.3)


def _coerce_count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)) and value >= 0:
        return int(value)
    return None


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


def extract_usage(payload: Any, prompt: str, completion: str) -> TokenUsage:
    """
    Read `usage` from an upstream body, estimating whatever is missing.

    A provider-reported `total_tokens` is kept as-is even when it differs
    from prompt + completion.
    """
    usage: Dict[str, Any] = {}
    if isinstance(payload, dict) and isinstance(payload.get("usage"), dict):
        usage = payload["usage"]

    prompt_tokens = _coerce_count(usage.get("prompt_tokens"))
    if prompt_tokens is None:
        prompt_tokens = estimate_tokens(prompt)
    completion_tokens = _coerce_count(usage.get("completion_tokens"))
    if completion_tokens is None:
        completion_tokens = estimate_tokens(completion)
    total_tokens = _coerce_count(usage.get("total_tokens"))
    if total_tokens is None:
        total_tokens = prompt_tokens + completion_tokens

    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
    )


def compute_cost(total_tokens: int, cost_per_million_tokens: float) -> float:
    return total_tokens / 1_000_000 * cost_per_million_tokens


__all__ = [
    "CHAT_COMPLETION_STRATEGIES",
    "CHOICE_MESSAGE",
    "CHOICE_TEXT",
    "ExtractionStrategy",
    "GATEWAY_RESPONSE",
    "OUTPUT_CONTENT",
    "RESULT",
    "TokenUsage",
    "compute_cost",
    "estimate_tokens",
    "extract_text",
    "extract_usage",
]
