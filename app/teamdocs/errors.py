"""
API error hierarchy.

Every error raised from a request handler or a service is rendered as
``{"ok": false, "error": <id>, "status": <code>, "message": <text>}``.
"""
from __future__ import annotations


class ApiError(Exception):
    status = 500
    error = "internal_error"
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"ok": False, "error": self.error, "status": self.status, "message": self.message}


class ValidationError(ApiError):
    status = 400
    error = "validation_error"
    default_message = "Validation failed."


class AuthenticationError(ApiError):
    status = 401
    error = "authentication_required"
    default_message = "Authentication required."


class PaymentRequiredError(ApiError):
    status = 402
    error = "payment_required"
    default_message = "This feature is only available on the hosted plan."


class AuthorizationError(ApiError):
    status = 403
    error = "authorization_error"
    default_message = "Authorization error."


class UserSuspendedError(AuthorizationError):
    error = "user_suspended"
    default_message = "Your access has been suspended by a team admin."


class NotFoundError(ApiError):
    status = 404
    error = "not_found"
    default_message = "Resource not found."


class RateLimitExceededError(ApiError):
    status = 429
    error = "rate_limit_exceeded"
    default_message = "Too many requests. Please wait and try again."
