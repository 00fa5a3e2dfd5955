"""
Upstream HTTP transport.

Sends one JSON POST to a provider and converts every failure into the
typed errors from `llmwatch.errors`. Connection failures are classified
by walking the exception chain down to the socket-level cause
(`socket.gaierror`, `ConnectionRefusedError`) instead of matching
rendered error messages.
"""

from __future__ import annotations

import asyncio
import errno
import socket
from typing import Any, Dict, Iterator, Optional
from urllib.parse import urlsplit

import httpx

from llmwatch.errors import NetworkError, ProviderError, UpstreamTimeoutError
from llmwatch.logging_config import logger
from llmwatch.models import ProviderConfig


MAX_ERROR_BODY_CHARS = 500


def _truncate(text: str, limit: int = MAX_ERROR_BODY_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "...(truncated)"


def _iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """
    Yield exc and everything reachable through __cause__/__context__ and
    exception groups (anyio wraps per-address connect failures in one).
    """
    seen: set[int] = set()
    stack = [exc]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        nested = getattr(current, "exceptions", None)
        if isinstance(nested, (list, tuple)):
            stack.extend(e for e in nested if isinstance(e, BaseException))
        if current.__cause__ is not None:
            stack.append(current.__cause__)
        if current.__context__ is not None:
            stack.append(current.__context__)


def classify_connect_error(provider: ProviderConfig, exc: BaseException) -> NetworkError:
    host = urlsplit(provider.api_url).hostname or provider.api_url
    for cause in _iter_exception_chain(exc):
        if isinstance(cause, socket.gaierror):
            return NetworkError(
                provider.name,
                f"Cannot reach {host} (DNS resolution failed). Check internet "
                "connectivity, container DNS settings and firewall rules. "
                f"Original error: {cause}",
                reason=NetworkError.DNS,
            )
        if isinstance(cause, ConnectionRefusedError) or (
            isinstance(cause, OSError) and cause.errno == errno.ECONNREFUSED
        ):
            return NetworkError(
                provider.name,
                f"Connection refused by {host}. The service may be down or "
                f"unreachable. Original error: {cause}",
                reason=NetworkError.CONNECTION_REFUSED,
            )
    return NetworkError(provider.name, f"Could not connect to {host}: {exc}")


async def post_json(
    client: httpx.AsyncClient,
    provider: ProviderConfig,
    json_body: Dict[str, Any],
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """
    POST json_body to the provider endpoint and return the decoded JSON.

    Raises UpstreamTimeoutError, NetworkError or ProviderError; never
    retries.
    """
    request_headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if headers:
        request_headers.update(headers)

    logger.info("Calling provider %s at %s", provider.name, provider.api_url)
    try:
        # httpx timeouts apply per phase; wait_for bounds the whole exchange
        # including a body that trickles in.
        resp = await asyncio.wait_for(
            client.post(
                provider.api_url,
                json=json_body,
                headers=request_headers,
                timeout=provider.timeout_seconds,
            ),
            timeout=provider.timeout_seconds,
        )
    except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
        logger.warning("Provider %s timed out after %sms", provider.name, provider.timeout_ms)
        raise UpstreamTimeoutError(provider.name, provider.timeout_ms) from exc
    except httpx.ConnectError as exc:
        error = classify_connect_error(provider, exc)
        logger.warning("Provider %s unreachable (%s): %s", provider.name, error.reason, exc)
        raise error from exc
    except httpx.TransportError as exc:
        logger.warning("Provider %s transport error: %s", provider.name, exc)
        raise NetworkError(provider.name, str(exc) or type(exc).__name__) from exc

    if not resp.is_success:
        body = _truncate(resp.text)
        logger.warning(
            "Provider %s returned HTTP %s; response=%s",
            provider.name,
            resp.status_code,
            body,
        )
        raise ProviderError(
            provider.name,
            f"API returned {resp.status_code}: {body}",
            upstream_status=resp.status_code,
        )

    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderError(
            provider.name,
            f"API returned a body that is not valid JSON: {_truncate(resp.text)}",
            upstream_status=resp.status_code,
        ) from exc


__all__ = ["MAX_ERROR_BODY_CHARS", "classify_connect_error", "post_json"]
