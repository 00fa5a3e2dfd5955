from llmwatch.provider.config import (
    CEREBRAS_DEFAULT_MODEL,
    get_provider_config,
    load_provider_configs,
    log_configuration_warnings,
)
from llmwatch.settings import Settings


def _settings(**values) -> Settings:
    base = {
        "CEREBRAS_API_KEY": "",
        "OPENROUTER_API_KEY": "",
        "LLAMA_API_KEY": "",
    }
    base.update(values)
    return Settings(**base)


def test_load_provider_configs_order_and_defaults():
    configs = load_provider_configs(_settings(CEREBRAS_API_KEY="sk-test"))

    assert list(configs) == ["cerebras", "openrouter", "llama", "mcp"]
    cerebras = configs["cerebras"]
    assert cerebras.api_key == "sk-test"  # pragma: allowlist secret
    assert cerebras.api_url == "https://api.cerebras.ai/v1/chat/completions"
    assert cerebras.timeout_ms == 30000
    assert cerebras.cost_per_million_tokens == 0.10
    assert cerebras.default_model == CEREBRAS_DEFAULT_MODEL
    assert cerebras.requires_api_key is True


def test_provider_config_reads_timeout_and_cost():
    cfg = get_provider_config(
        "llama",
        _settings(LLAMA_TIMEOUT=1500, LLAMA_COST_PER_MILLION=2.5),
    )

    assert cfg is not None
    assert cfg.timeout_ms == 1500
    assert cfg.timeout_seconds == 1.5
    assert cfg.cost_per_million_tokens == 2.5


def test_openrouter_url_accepts_legacy_name():
    cfg = get_provider_config("openrouter", _settings(OPENROUTER_URL="https://or.mock.local/v1"))

    assert cfg is not None
    assert cfg.api_url == "https://or.mock.local/v1"
    assert cfg.custom_headers and "X-Title" in cfg.custom_headers


def test_mcp_config_points_at_forward_endpoint():
    cfg = get_provider_config(
        "mcp",
        _settings(MCP_GATEWAY_URL="http://gateway:8081/", MCP_TARGET_PROVIDER="llama"),
    )

    assert cfg is not None
    assert cfg.api_url == "http://gateway:8081/forward"
    assert cfg.requires_api_key is False
    assert cfg.target_provider == "llama"


def test_get_provider_config_unknown_returns_none():
    assert get_provider_config("nope", _settings()) is None


def test_log_configuration_warnings_lists_missing_keys():
    warnings = log_configuration_warnings(_settings(OPENROUTER_API_KEY="sk-or"))

    assert len(warnings) == 2
    assert any("CEREBRAS_API_KEY" in w for w in warnings)
    assert any("LLAMA_API_KEY" in w for w in warnings)
    assert not any("OPENROUTER_API_KEY" in w for w in warnings)
