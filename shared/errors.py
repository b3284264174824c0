"""
Shared error handling for the Shipping Relay.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel
from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class RelayException(Exception):
    """Base exception for relay services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        # Get trace ID from current span
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidKeyError(RelayException):
    """Lookup key rejected by its validator."""

    status_code = 400

    def __init__(self, message: str = "Invalid lookup key", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_KEY", message, details)


class MalformedPayloadError(RelayException):
    """Webhook body does not match any known variant."""

    status_code = 400

    def __init__(self, message: str = "Invalid payload format", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_PAYLOAD", message, details)


class UpstreamUnavailableError(RelayException):
    """Network failure or timeout talking to an upstream API."""

    status_code = 502

    def __init__(self, service: str, message: str = "Upstream unavailable",
                 details: Optional[Dict[str, Any]] = None, timeout: bool = False):
        super().__init__(
            "UPSTREAM_UNAVAILABLE",
            f"{service}: {message}",
            details,
            status_code=504 if timeout else None
        )
        self.service = service
        self.timeout = timeout


class UpstreamRejectedError(RelayException):
    """Upstream answered with a non-2xx status."""

    def __init__(self, service: str, upstream_status: int, body: Any = None,
                 message: Optional[str] = None):
        details: Dict[str, Any] = {"status_code": upstream_status}
        if body is not None:
            details["body"] = body
        super().__init__(
            "UPSTREAM_REJECTED",
            f"{service}: {message or f'Request failed with status code {upstream_status}'}",
            details,
            # Only error statuses are mirrored to the caller
            status_code=upstream_status if 400 <= upstream_status < 600 else 502
        )
        self.service = service
        self.upstream_status = upstream_status
        self.body = body


class RateLimitError(RelayException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMITED", message, details)


class ConfigurationError(RelayException):
    """Feature requested but not configured."""

    status_code = 503

    def __init__(self, message: str = "Service not configured", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_CONFIGURED", message, details)
