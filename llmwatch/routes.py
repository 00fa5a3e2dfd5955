import random
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .deps import get_http_client, get_metrics_store, get_provider_registry
from .errors import (
    InvalidRequestError,
    LLMWatchError,
    ProviderError,
    error_payload,
    install_exception_handlers,
)
from .logging_config import logger
from .metrics import CONTENT_TYPE, DemoMetricGenerator, MetricsStore, render_prometheus
from .metrics.store import DEFAULT_AGGREGATE_WINDOW
from .models import MetricRecord, NormalizedResult, now_ms
from .provider import ProviderRegistry, build_default_registry
from .provider.config import log_configuration_warnings
from .settings import Settings, settings as default_settings


DEFAULT_PROVIDER = "cerebras"


class CallRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    provider: Optional[str] = Field(None, description="Provider name, default 'cerebras'")
    prompt: Optional[str] = None
    model: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool = True
    status: str = "healthy"
    providers: List[str] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)


async def _read_call_request(request: Request) -> CallRequest:
    try:
        raw = await request.json()
    except ValueError:
        raise InvalidRequestError("Request body must be a JSON object")
    if not isinstance(raw, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    try:
        return CallRequest.model_validate(raw)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
        raise InvalidRequestError(
            f"Invalid request fields: {fields}",
            details={"provider": raw.get("provider")},
        )


def _success_record(result: NormalizedResult) -> MetricRecord:
    return MetricRecord(
        provider=result.provider,
        model=result.model,
        latency_ms=result.latency_ms,
        prompt_tokens=result.prompt_tokens,
        completion_tokens=result.completion_tokens,
        total_tokens=result.total_tokens,
        cost=result.cost,
        error=None,
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    registry: Optional[ProviderRegistry] = None,
    store: Optional[MetricsStore] = None,
    demo_rng: Optional[random.Random] = None,
) -> FastAPI:
    cfg = settings or default_settings
    if store is None:
        store = MetricsStore(cfg.metrics_max_size)
    if registry is None:
        registry = build_default_registry(cfg)
    demo_generator = DemoMetricGenerator(store, cfg.demo_interval, rng=demo_rng)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        startup: report missing provider keys, start the demo generator.
        shutdown: stop the demo generator. Metrics are not persisted.
        """
        log_configuration_warnings(cfg)
        demo_generator.start()
        logger.info(
            "LLM Watch agent ready (providers=%s, max_metrics=%s)",
            registry.list_providers(),
            store.max_size,
        )
        try:
            yield
        finally:
            await demo_generator.stop()

    app = FastAPI(title="LLM Watch Agent", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.metrics_store = store
    app.state.provider_registry = registry
    app.state.demo_generator = demo_generator

    if cfg.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    install_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client_host = request.client.host if request.client else "-"
        logger.debug("HTTP %s %s from %s", request.method, request.url.path, client_host)
        response = await call_next(request)
        logger.info(
            "HTTP %s %s -> %s", request.method, request.url.path, response.status_code
        )
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health(
        registry: ProviderRegistry = Depends(get_provider_registry),
    ) -> HealthResponse:
        return HealthResponse(providers=registry.list_providers())

    @app.post("/call")
    async def call_provider(
        request: Request,
        client: httpx.AsyncClient = Depends(get_http_client),
        store: MetricsStore = Depends(get_metrics_store),
        registry: ProviderRegistry = Depends(get_provider_registry),
    ):
        """
        Invoke one provider and record exactly one metric, success or not.
        """
        start = time.perf_counter()
        provider_name = DEFAULT_PROVIDER
        model: Optional[str] = None
        try:
            body = await _read_call_request(request)
            if body.provider is not None and not body.provider.strip():
                provider_name = "unknown"
                raise InvalidRequestError("Field 'provider' must be a non-empty string")
            provider_name = body.provider or DEFAULT_PROVIDER
            adapter = registry.get_adapter(provider_name)
            model = body.model or adapter.default_model
            result = await adapter.call(client, body.prompt, model)
        except LLMWatchError as exc:
            error = exc
            if provider_name == DEFAULT_PROVIDER and isinstance(exc.details.get("provider"), str):
                provider_name = exc.details["provider"]
        except Exception as exc:
            logger.exception("Unexpected error calling provider %s", provider_name)
            error = ProviderError(provider_name, str(exc) or type(exc).__name__)
        else:
            record = _success_record(result)
            store.append(record)
            return {
                "ok": True,
                "metrics": record.to_wire(),
                "output": result.text,
                "provider": result.provider,
                "model": result.model,
            }

        latency_ms = (time.perf_counter() - start) * 1000.0
        record = MetricRecord(
            provider=provider_name,
            model=model or "unknown",
            latency_ms=latency_ms,
            error=error.message,
        )
        store.append(record)
        logger.warning(
            "Call to provider %s failed with %s: %s",
            provider_name,
            error.code,
            error.message,
        )
        return JSONResponse(
            status_code=error.status_code,
            content=error_payload(error, metrics=record.to_wire()),
        )

    @app.get("/metrics/latest")
    async def metrics_latest(
        store: MetricsStore = Depends(get_metrics_store),
    ) -> Dict[str, Any]:
        latest = store.get_latest()
        return {"ok": True, "metrics": latest.to_wire() if latest else None}

    @app.get("/metrics/all")
    async def metrics_all(
        provider: Optional[str] = Query(None, description="Only records of this provider"),
        store: MetricsStore = Depends(get_metrics_store),
    ) -> Dict[str, Any]:
        records = store.get_all() if provider is None else store.get_by_provider(provider)
        return {
            "ok": True,
            "metrics": [r.to_wire() for r in records],
            "count": len(records),
        }

    @app.get("/metrics/aggregates")
    async def metrics_aggregates(
        count: int = Query(DEFAULT_AGGREGATE_WINDOW, ge=1),
        store: MetricsStore = Depends(get_metrics_store),
    ) -> Dict[str, Any]:
        aggregates = store.get_aggregates(count)
        return {
            "ok": True,
            "aggregates": aggregates.model_dump(by_alias=True),
            "sampleSize": count,
        }

    if cfg.prometheus_enabled:

        async def prometheus_metrics(
            store: MetricsStore = Depends(get_metrics_store),
        ) -> Response:
            return Response(content=render_prometheus(store), media_type=CONTENT_TYPE)

        app.add_api_route(
            cfg.prometheus_endpoint,
            prometheus_metrics,
            methods=["GET"],
            response_class=Response,
            include_in_schema=False,
        )

    return app


__all__ = ["CallRequest", "DEFAULT_PROVIDER", "create_app"]
