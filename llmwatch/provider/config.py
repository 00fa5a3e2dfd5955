"""
Provider configuration loading.

Provider definitions are read from the flat environment options exposed by
`Settings`:

    CEREBRAS_API_KEY / CEREBRAS_API_URL / CEREBRAS_TIMEOUT / CEREBRAS_COST_PER_MILLION
    OPENROUTER_API_KEY / OPENROUTER_API_URL / OPENROUTER_TIMEOUT / ...
    LLAMA_API_KEY / LLAMA_API_URL / LLAMA_TIMEOUT / ...
    MCP_GATEWAY_URL / MCP_TIMEOUT / MCP_TARGET_PROVIDER

Providers without an API key are still returned; the adapter reports
API_KEY_MISSING when it is actually used so that one missing key never
takes the whole agent down.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from llmwatch.logging_config import logger
from llmwatch.models import ProviderConfig
from llmwatch.settings import Settings, settings as default_settings


CEREBRAS_DEFAULT_MODEL = "llama3.1-8b"
OPENROUTER_DEFAULT_MODEL = "gpt-4o-mini"
LLAMA_DEFAULT_MODEL = "meta-llama/llama-3-8b-instruct:free"

# OpenRouter asks callers to identify themselves.
_OPENROUTER_HEADERS: Dict[str, str] = {
    "HTTP-Referer": "https://github.com/anglerfishlyy/llm-watch-grafana",
    "X-Title": "LLM Watch",
}


def load_provider_configs(settings: Optional[Settings] = None) -> Dict[str, ProviderConfig]:
    """
    Build every known provider config, keyed by provider name, in
    registration order.
    """
    s = settings or default_settings
    return {
        "cerebras": ProviderConfig(
            name="cerebras",
            api_url=s.cerebras_api_url,
            api_key=s.cerebras_api_key,
            api_key_env="CEREBRAS_API_KEY",
            timeout_ms=s.cerebras_timeout,
            cost_per_million_tokens=s.cerebras_cost_per_million,
            default_model=CEREBRAS_DEFAULT_MODEL,
        ),
        "openrouter": ProviderConfig(
            name="openrouter",
            api_url=s.openrouter_api_url,
            api_key=s.openrouter_api_key,
            api_key_env="OPENROUTER_API_KEY",
            timeout_ms=s.openrouter_timeout,
            cost_per_million_tokens=s.openrouter_cost_per_million,
            default_model=OPENROUTER_DEFAULT_MODEL,
            custom_headers=dict(_OPENROUTER_HEADERS),
        ),
        "llama": ProviderConfig(
            name="llama",
            api_url=s.llama_api_url,
            api_key=s.llama_api_key,
            api_key_env="LLAMA_API_KEY",
            timeout_ms=s.llama_timeout,
            cost_per_million_tokens=s.llama_cost_per_million,
            default_model=LLAMA_DEFAULT_MODEL,
            custom_headers=dict(_OPENROUTER_HEADERS),
        ),
        "mcp": ProviderConfig(
            name="mcp",
            api_url=f"{s.mcp_gateway_url.rstrip('/')}/forward",
            requires_api_key=False,
            timeout_ms=s.mcp_timeout,
            default_model=CEREBRAS_DEFAULT_MODEL,
            target_provider=s.mcp_target_provider,
        ),
    }


def get_provider_config(
    name: str, settings: Optional[Settings] = None
) -> Optional[ProviderConfig]:
    return load_provider_configs(settings).get(name)


def log_configuration_warnings(settings: Optional[Settings] = None) -> List[str]:
    """
    Log one warning per provider that requires a key but has none.
    Returns the warnings so callers and tests can inspect them.
    """
    warnings: List[str] = []
    for cfg in load_provider_configs(settings).values():
        if cfg.requires_api_key and not cfg.has_api_key:
            warnings.append(
                f"{cfg.api_key_env} not set - {cfg.name} provider will be unavailable"
            )
    for message in warnings:
        logger.warning("Configuration warning: %s", message)
    return warnings


__all__ = [
    "CEREBRAS_DEFAULT_MODEL",
    "LLAMA_DEFAULT_MODEL",
    "OPENROUTER_DEFAULT_MODEL",
    "get_provider_config",
    "load_provider_configs",
    "log_configuration_warnings",
]
