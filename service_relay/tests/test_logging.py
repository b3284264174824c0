"""
Unit tests for the structlog processors.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.logging import (
    REDACTED,
    add_correlation_context,
    clear_context,
    redact_sensitive_fields,
    set_request_id,
)


def test_credentials_masked():
    event = {
        "event": "Calling upstream",
        "Authorization": "Bearer es-token",
        "headers": {"X-Goog-Api-Key": "g-key", "Accept": "application/json"},
        "url": "https://easyship.test/api/v1/countries/14/postal_codes/42",
    }

    redacted = redact_sensitive_fields(None, "info", event)

    assert redacted["Authorization"] == REDACTED
    assert redacted["headers"] == {"X-Goog-Api-Key": REDACTED, "Accept": "application/json"}
    assert redacted["url"].endswith("/42")


def test_request_id_attached_until_cleared():
    request_id = set_request_id("req-1")
    assert request_id == "req-1"
    assert add_correlation_context(None, "info", {})["request_id"] == "req-1"

    clear_context()
    assert "request_id" not in add_correlation_context(None, "info", {})


def test_request_id_generated_when_missing():
    request_id = set_request_id(None)
    try:
        assert len(request_id) == 36
    finally:
        clear_context()
