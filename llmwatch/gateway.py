"""
MCP gateway service.

A small standalone app that forwards `{provider, model, prompt}` to the
Cerebras or OpenRouter adapter and answers with a normalized envelope.
The agent's `mcp` provider talks to this service's `/forward` endpoint.

Run with `python -m llmwatch.gateway` (listens on MCP_GATEWAY_PORT).
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .deps import get_http_client, get_provider_registry
from .errors import (
    InvalidRequestError,
    LLMWatchError,
    ProviderError,
    error_payload,
    install_exception_handlers,
)
from .logging_config import logger
from .models import now_ms
from .provider import ProviderRegistry, build_default_registry
from .provider.config import log_configuration_warnings
from .settings import Settings, settings as default_settings


# Gateway provider name -> agent adapter that serves it.
FORWARD_ROUTES: Dict[str, str] = {
    "cerebras": "cerebras",
    "openrouter": "openrouter",
    "llama": "openrouter",
}


class ForwardRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    provider: str = "cerebras"
    model: Optional[str] = None
    prompt: str = ""


def create_gateway_app(
    settings: Optional[Settings] = None,
    *,
    registry: Optional[ProviderRegistry] = None,
) -> FastAPI:
    cfg = settings or default_settings
    if registry is None:
        registry = build_default_registry(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_configuration_warnings(cfg)
        logger.info("MCP gateway ready: forward endpoint POST /forward")
        yield

    app = FastAPI(title="LLM Watch MCP Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.provider_registry = registry
    install_exception_handlers(app)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {
            "ok": True,
            "status": "healthy",
            "service": "mcp-gateway",
            "timestamp": now_ms(),
        }

    @app.post("/forward")
    async def forward(
        request: Request,
        client: httpx.AsyncClient = Depends(get_http_client),
        registry: ProviderRegistry = Depends(get_provider_registry),
    ):
        start = time.perf_counter()
        provider_name = "cerebras"
        try:
            try:
                body = ForwardRequest.model_validate(await request.json())
            except (ValueError, ValidationError):
                raise InvalidRequestError(
                    "Body must be a JSON object with 'provider', 'model' and 'prompt'"
                )
            provider_name = body.provider
            logger.info(
                "MCP gateway: forwarding to %s, model=%s",
                provider_name,
                body.model or "default",
            )
            route = FORWARD_ROUTES.get(provider_name)
            if route is None:
                raise InvalidRequestError(
                    f"Provider {provider_name!r} cannot be forwarded. "
                    f"Supported: {', '.join(FORWARD_ROUTES)}"
                )
            adapter = registry.get_adapter(route)
            result = await adapter.call(client, body.prompt, body.model)
        except LLMWatchError as exc:
            error = exc
        except Exception as exc:
            logger.exception("MCP gateway error forwarding to %s", provider_name)
            error = ProviderError(provider_name, str(exc) or type(exc).__name__)
        else:
            return {
                "ok": True,
                "provider": provider_name,
                "model": result.model,
                "response": result.text,
                "usage": {
                    "prompt_tokens": result.prompt_tokens,
                    "completion_tokens": result.completion_tokens,
                    "total_tokens": result.total_tokens,
                },
                "cost": result.cost,
                "latencyMs": result.latency_ms,
            }

        latency_ms = (time.perf_counter() - start) * 1000.0
        return JSONResponse(
            status_code=error.status_code,
            content=error_payload(error, provider=provider_name, latencyMs=latency_ms),
        )

    return app


def run() -> None:
    import uvicorn

    from .logging_config import setup_logging

    setup_logging()
    uvicorn.run(
        create_gateway_app(),
        host="0.0.0.0",
        port=default_settings.mcp_gateway_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
