from __future__ import annotations


class ApiError(Exception):
    """Base for errors rendered to clients as `{"error": message}`."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "No token, authorization denied"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Access denied"


class NotFound(ApiError):
    # Also used for rows that exist but belong to someone else.
    status_code = 404
    default_message = "Not found"


class InvalidInput(ApiError):
    status_code = 400
    default_message = "Invalid input"


class Conflict(ApiError):
    status_code = 409
    default_message = "Already exists"


class CapacityExceeded(ApiError):
    status_code = 400
    default_message = "Ride is full"


class PayloadTooLarge(ApiError):
    status_code = 413
    default_message = "File too large"


class UpstreamError(ApiError):
    status_code = 500
    default_message = "Server error"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too many requests"
