import pytest

from llmwatch.errors import InvalidRequestError
from llmwatch.provider import (
    CerebrasAdapter,
    LlamaAdapter,
    McpGatewayAdapter,
    OpenRouterAdapter,
    ProviderRegistry,
    build_default_registry,
)
from llmwatch.settings import Settings


def test_default_registry_knows_all_providers():
    registry = build_default_registry(Settings(CEREBRAS_API_KEY=""))

    assert registry.list_providers() == ["cerebras", "openrouter", "llama", "mcp"]
    assert isinstance(registry.get_adapter("cerebras"), CerebrasAdapter)
    assert isinstance(registry.get_adapter("openrouter"), OpenRouterAdapter)
    assert isinstance(registry.get_adapter("llama"), LlamaAdapter)
    assert isinstance(registry.get_adapter("mcp"), McpGatewayAdapter)
    assert "mcp" in registry
    assert "demo" not in registry


def test_unknown_provider_raises_invalid_request():
    registry = build_default_registry(Settings())

    with pytest.raises(InvalidRequestError) as excinfo:
        registry.get_adapter("nonexistent")

    err = excinfo.value
    assert err.status_code == 400
    assert "nonexistent" in err.message
    assert err.details["knownProviders"] == ["cerebras", "openrouter", "llama", "mcp"]


def test_empty_registry_lists_nothing():
    registry = ProviderRegistry()

    assert registry.list_providers() == []
    with pytest.raises(InvalidRequestError):
        registry.get_adapter("cerebras")
