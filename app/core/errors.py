"""Map every failure to the ``{status: false, code, message, ...details}`` error envelope."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.services.exceptions import (
    Conflict,
    IdentityServiceError,
    NotFound,
    PaymentGatewayError,
    PermissionDenied,
    ServiceError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    429: "rate_limited",
    500: "internal_server_error",
}

SERVICE_ERROR_STATUS: dict[type[ServiceError], int] = {
    ValidationFailed: 400,
    PermissionDenied: 403,
    NotFound: 404,
    Conflict: 409,
    PaymentGatewayError: 500,
    IdentityServiceError: 500,
}

# Location prefixes FastAPI adds that mean nothing to API clients.
_REQUEST_SECTIONS = {"body", "query", "path", "header"}


def _phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Request failed"


def _as_fields(details: Any) -> dict:
    if details is None:
        return {}
    if isinstance(details, dict):
        return dict(details)
    if isinstance(details, list):
        return {"errors": details}
    return {"detail": str(details)}


def error_response(
    status_code: int,
    code: str | None = None,
    message: str | None = None,
    details: Any = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Build an error envelope; detail fields sit beside the envelope keys but never override them."""
    body = _as_fields(details)
    body.update(
        status=False,
        code=code or HTTP_ERROR_CODES.get(status_code, "http_error"),
        message=message or _phrase(status_code),
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def status_for_service_error(exc: ServiceError) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in SERVICE_ERROR_STATUS:
            return SERVICE_ERROR_STATUS[exc_type]
    return 400


def describe_validation_errors(errors: list[dict]) -> str:
    """Turn the first pydantic error into ``field: reason``."""
    if not errors:
        return "Validation failed"
    first = errors[0]
    location = tuple(first.get("loc") or ())
    if location == ("body",) and first.get("type") == "missing":
        return "Request body is required"
    reason = first.get("msg") or "Validation failed"
    field = ".".join(str(part) for part in location if part not in _REQUEST_SECTIONS)
    return f"{field}: {reason}" if field else str(reason)


async def on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    headers = getattr(exc, "headers", None)
    if isinstance(detail, dict):
        extra = detail.get("details")
        if extra is None:
            extra = {k: v for k, v in detail.items() if k not in {"code", "message", "detail"}}
        return error_response(
            exc.status_code,
            detail.get("code"),
            detail.get("message") or detail.get("detail"),
            extra,
            headers=headers,
        )
    if isinstance(detail, str):
        return error_response(exc.status_code, message=detail, headers=headers)
    return error_response(exc.status_code, details=detail, headers=headers)


async def on_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    status_code = status_for_service_error(exc)
    if status_code >= 500:
        logger.error("Service failure", extra={"code": exc.code, "reason": exc.message})
    return error_response(status_code, exc.code, exc.message, exc.details)


async def on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    return error_response(400, "validation_error", describe_validation_errors(errors), {"errors": errors})


async def on_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = error_response(429, details=getattr(exc, "detail", None))
    headers = getattr(exc, "headers", None)
    if isinstance(headers, dict):
        response.headers.update(headers)
    return response


async def on_unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, message="Internal server error", details={"error": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, on_http_exception)
    app.add_exception_handler(RequestValidationError, on_validation_error)
    app.add_exception_handler(ServiceError, on_service_error)
    app.add_exception_handler(RateLimitExceeded, on_rate_limited)
    app.add_exception_handler(Exception, on_unhandled)
