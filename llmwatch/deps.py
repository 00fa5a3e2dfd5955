from typing import AsyncIterator

import httpx
from fastapi import Request

from .metrics import MetricsStore
from .provider import ProviderRegistry


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """
    Short-lived AsyncClient for upstream HTTP calls.

    Each adapter passes its own provider timeout per request.
    """
    async with httpx.AsyncClient() as client:
        yield client


def get_metrics_store(request: Request) -> MetricsStore:
    """
    The store created by create_app(); tests may override this dependency.
    """
    return request.app.state.metrics_store


def get_provider_registry(request: Request) -> ProviderRegistry:
    return request.app.state.provider_registry
