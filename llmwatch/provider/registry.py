from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from llmwatch.errors import InvalidRequestError
from llmwatch.settings import Settings

from .adapters import (
    CerebrasAdapter,
    LlamaAdapter,
    McpGatewayAdapter,
    OpenRouterAdapter,
    ProviderAdapter,
)
from .config import load_provider_configs


class ProviderRegistry:
    """Name -> adapter lookup, kept in registration order."""

    def __init__(self, adapters: Iterable[ProviderAdapter] = ()) -> None:
        self._adapters: Dict[str, ProviderAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.name] = adapter

    def get_adapter(self, name: str) -> ProviderAdapter:
        adapter = self._adapters.get(name)
        if adapter is None:
            known = ", ".join(self._adapters) or "none"
            raise InvalidRequestError(
                f"Unknown provider: {name!r}. Known providers: {known}",
                details={"provider": name, "knownProviders": self.list_providers()},
            )
        return adapter

    def list_providers(self) -> List[str]:
        return list(self._adapters)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters


def build_default_registry(settings: Optional[Settings] = None) -> ProviderRegistry:
    configs = load_provider_configs(settings)
    return ProviderRegistry(
        [
            CerebrasAdapter(configs["cerebras"]),
            OpenRouterAdapter(configs["openrouter"]),
            LlamaAdapter(configs["llama"]),
            McpGatewayAdapter(configs["mcp"]),
        ]
    )


__all__ = ["ProviderRegistry", "build_default_registry"]
