from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """
    Static configuration for one upstream provider, built from settings
    once at startup and read-only afterwards.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str = Field(..., description="Provider id used in /call, e.g. 'cerebras'")
    api_url: str = Field(..., description="Endpoint receiving the request")
    api_key: str = Field("", description="Bearer token; empty when not configured")
    api_key_env: Optional[str] = Field(
        None, description="Environment variable that holds the API key"
    )
    requires_api_key: bool = True
    timeout_ms: int = Field(30000, description="Upstream timeout in ms", gt=0)
    cost_per_million_tokens: float = Field(0.0, ge=0)
    default_model: str = Field(..., description="Model used when the caller omits one")
    custom_headers: Optional[Dict[str, str]] = Field(
        None, description="Extra headers to send to this provider"
    )
    target_provider: Optional[str] = Field(
        None, description="Provider the MCP gateway forwards to"
    )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


class NormalizedResult(BaseModel):
    """
    Adapter output after the upstream response has been normalized.
    """

    model_config = ConfigDict(protected_namespaces=())

    ok: bool = True
    provider: str
    model: str
    text: str = ""
    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)
    total_tokens: int = Field(0, ge=0)
    cost: float = Field(0.0, ge=0)
    latency_ms: float = Field(0.0, ge=0)
    error: Optional[str] = None


__all__ = ["NormalizedResult", "ProviderConfig"]
