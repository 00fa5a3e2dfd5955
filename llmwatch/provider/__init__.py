from .adapters import (
    CerebrasAdapter,
    LlamaAdapter,
    McpGatewayAdapter,
    OpenRouterAdapter,
    ProviderAdapter,
)
from .registry import ProviderRegistry, build_default_registry

__all__ = [
    "CerebrasAdapter",
    "LlamaAdapter",
    "McpGatewayAdapter",
    "OpenRouterAdapter",
    "ProviderAdapter",
    "ProviderRegistry",
    "build_default_registry",
]
