"""
Typed error hierarchy shared by the agent and the MCP gateway.

Every error carries a machine-readable `code` and the HTTP status the
surface should answer with:

    API_KEY_MISSING  -> 500
    INVALID_REQUEST  -> 400
    PROVIDER_ERROR   -> 502
    NETWORK_ERROR    -> 503
    TIMEOUT          -> 504
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .logging_config import logger


class LLMWatchError(Exception):
    """Base class for errors surfaced to API clients."""

    code: str = "INTERNAL_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})


class ApiKeyMissingError(LLMWatchError):
    code = "API_KEY_MISSING"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, provider: str, env_var: str | None = None) -> None:
        hint = f" Set {env_var} in the agent configuration." if env_var else ""
        super().__init__(
            f"API key not configured for provider '{provider}'.{hint}",
            details={"provider": provider},
        )
        self.provider = provider


class InvalidRequestError(LLMWatchError):
    code = "INVALID_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST


class ProviderError(LLMWatchError):
    """Upstream answered with a non-2xx status or an unusable body."""

    code = "PROVIDER_ERROR"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        upstream_status: int | None = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        merged = {"provider": provider, **(details or {})}
        if upstream_status is not None:
            merged["statusCode"] = upstream_status
        super().__init__(f"Provider '{provider}' error: {message}", details=merged)
        self.provider = provider
        self.upstream_status = upstream_status


class NetworkError(LLMWatchError):
    """The upstream host could not be reached at all."""

    code = "NETWORK_ERROR"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    DNS = "dns"
    CONNECTION_REFUSED = "connection_refused"
    TRANSPORT = "transport"

    def __init__(self, provider: str, message: str, *, reason: str = TRANSPORT) -> None:
        super().__init__(
            f"Network error for provider '{provider}': {message}",
            details={"provider": provider, "reason": reason},
        )
        self.provider = provider
        self.reason = reason


class UpstreamTimeoutError(LLMWatchError):
    code = "TIMEOUT"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, provider: str, timeout_ms: int) -> None:
        super().__init__(
            f"Request to provider '{provider}' timed out after {timeout_ms}ms. "
            "Raise the provider timeout or check upstream health.",
            details={"provider": provider, "timeout": timeout_ms},
        )
        self.provider = provider
        self.timeout_ms = timeout_ms


class ErrorResponse(BaseModel):
    """
    Standard error body returned by every endpoint:

    {
        "ok": false,
        "error": "API key not configured for provider 'cerebras'.",
        "errorCode": "API_KEY_MISSING"
    }
    """

    ok: bool = False
    error: str = Field(..., description="Human-readable error message")
    errorCode: str = Field(..., description="Machine-readable error type")


def error_payload(exc: LLMWatchError, **extra: Any) -> Dict[str, Any]:
    """
    Build the JSON body for an error response, merged with extra fields.
    """
    body = ErrorResponse(error=exc.message, errorCode=exc.code).model_dump()
    body.update(extra)
    return body


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request"


async def handle_llmwatch_error(request: Request, exc: LLMWatchError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidRequestError(_describe_validation_error(exc))
    return JSONResponse(status_code=error.status_code, content=error_payload(error))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler: log with an error id and answer with a
    structured 500 body.
    """
    error_id = uuid.uuid4().hex
    logger.exception(
        "Unhandled error %s %s (error_id=%s)",
        request.method,
        request.url.path,
        error_id,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "ok": False,
            "error": "Internal server error",
            "errorCode": "INTERNAL_ERROR",
            "errorId": error_id,
        },
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LLMWatchError, handle_llmwatch_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = [
    "install_exception_handlers",
    "LLMWatchError",
    "ApiKeyMissingError",
    "InvalidRequestError",
    "ProviderError",
    "NetworkError",
    "UpstreamTimeoutError",
    "ErrorResponse",
    "error_payload",
]
