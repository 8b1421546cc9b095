from __future__ import annotations

from typing import Any


class ServiceError(ValueError):
    """Base error raised by service functions; mapped to an HTTP status by the API layer."""

    default_code = "bad_request"

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationFailed(ServiceError):
    default_code = "validation_error"


class NotFound(ServiceError):
    default_code = "not_found"


class Conflict(ServiceError):
    default_code = "conflict"


class PermissionDenied(ServiceError):
    default_code = "forbidden"


class PaymentGatewayError(ServiceError):
    default_code = "payment_processor_error"


class IdentityServiceError(ServiceError):
    default_code = "identity_not_configured"
