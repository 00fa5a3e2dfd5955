from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read from OS env and optional .env file in project root.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server
    port: int = Field(8080, alias="PORT")
    host: str = Field("0.0.0.0", alias="HOST")
    cors_enabled: bool = Field(True, alias="CORS_ENABLED")

    # Cerebras
    cerebras_api_key: str = Field("", alias="CEREBRAS_API_KEY")
    cerebras_api_url: str = Field(
        "https://api.cerebras.ai/v1/chat/completions", alias="CEREBRAS_API_URL"
    )
    cerebras_timeout: int = Field(
        30000, alias="CEREBRAS_TIMEOUT", description="Upstream timeout in ms"
    )
    cerebras_cost_per_million: float = Field(
        0.10, alias="CEREBRAS_COST_PER_MILLION", ge=0
    )

    # OpenRouter
    openrouter_api_key: str = Field("", alias="OPENROUTER_API_KEY")
    openrouter_api_url: str = Field(
        "https://openrouter.ai/api/v1/chat/completions",
        validation_alias=AliasChoices("OPENROUTER_API_URL", "OPENROUTER_URL"),
    )
    openrouter_timeout: int = Field(30000, alias="OPENROUTER_TIMEOUT")
    openrouter_cost_per_million: float = Field(
        0.50, alias="OPENROUTER_COST_PER_MILLION", ge=0
    )

    # Llama (OpenRouter-compatible endpoint)
    llama_api_key: str = Field("", alias="LLAMA_API_KEY")
    llama_api_url: str = Field(
        "https://openrouter.ai/api/v1/chat/completions", alias="LLAMA_API_URL"
    )
    llama_timeout: int = Field(30000, alias="LLAMA_TIMEOUT")
    llama_cost_per_million: float = Field(0.50, alias="LLAMA_COST_PER_MILLION", ge=0)

    # MCP gateway
    mcp_gateway_url: str = Field("http://mcp-gateway:8081", alias="MCP_GATEWAY_URL")
    mcp_gateway_port: int = Field(8081, alias="MCP_GATEWAY_PORT")
    mcp_timeout: int = Field(30000, alias="MCP_TIMEOUT")
    mcp_target_provider: str = Field(
        "cerebras",
        alias="MCP_TARGET_PROVIDER",
        description="Provider the MCP gateway should forward to",
    )

    # Metrics
    metrics_max_size: int = Field(500, alias="METRICS_MAX_SIZE", ge=1)
    demo_interval: int = Field(
        3000,
        alias="DEMO_INTERVAL",
        description="Demo metric interval in ms; 0 or less disables the generator",
    )

    # Prometheus
    prometheus_enabled: bool = Field(True, alias="PROMETHEUS_ENABLED")
    prometheus_endpoint: str = Field("/metrics", alias="PROMETHEUS_ENDPOINT")

    # Application log level for our llmwatch logger.
    # Can be overridden via LOG_LEVEL env var, e.g. "DEBUG" while debugging.
    log_level: str = Field(
        "INFO",
        alias="LOG_LEVEL",
        description="Application log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_timezone: Optional[str] = Field(
        default=None,
        alias="LOG_TIMEZONE",
        description="Timezone name for log timestamps, e.g. 'Europe/Berlin'. Defaults to system local time.",
    )
    log_dir: str = Field("logs", alias="LOG_DIR")


settings = Settings()  # Reads from environment if available
