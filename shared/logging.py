"""
Structured logging for the Shipping Relay.

Events are rendered as JSON lines on stdout. Request ids and the active
OpenTelemetry span are attached automatically; fields that may carry
credentials are masked before rendering.
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Optional
from contextvars import ContextVar

from opentelemetry import trace

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

REDACTED = "[redacted]"

# Matched case-insensitively against event keys
SENSITIVE_KEYS = frozenset({
    "authorization",
    "api_key",
    "api_token",
    "token",
    "x-goog-api-key",
    "discord_webhook_url",
    "webhook_url",
})


def configure_logging(service_name: str, log_level: str = "info", env: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger for a service."""

    static_context = {"service": service_name}
    if env:
        static_context["env"] = env

    def add_static_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in static_context.items():
            event_dict.setdefault(key, value)
        return event_dict

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_static_context,
            add_trace_context,
            add_correlation_context,
            redact_sensitive_fields,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )


def add_trace_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the current span's trace and span ids, if a span is recording."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context.trace_id != 0:
            event_dict["trace_id"] = f"{span_context.trace_id:032x}"
        if span_context.span_id != 0:
            event_dict["span_id"] = f"{span_context.span_id:016x}"

    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    return event_dict


def redact_sensitive_fields(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask credential-bearing values, including inside nested header dicts."""
    return _redact(event_dict)


def _redact(data: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in data.items():
        if isinstance(key, str) and key.lower() in SENSITIVE_KEYS:
            data[key] = REDACTED
        elif isinstance(value, dict):
            data[key] = _redact(dict(value))
    return data


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id for the current context, generating one if absent."""
    if not request_id:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def clear_context():
    request_id_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
