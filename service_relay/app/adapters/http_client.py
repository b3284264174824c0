"""
Outbound HTTP helpers shared by the relay adapters.
"""

import time
from typing import Any, Dict, Optional
import httpx

from shared.logging import get_logger
from shared.errors import MalformedPayloadError, UpstreamRejectedError, UpstreamUnavailableError
from shared.metrics import MetricsCollector

DEFAULT_TIMEOUT = 5.0

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

logger = get_logger("relay.http_client")


async def send_json(method: str, url: str, *, payload: Any = None,
                    headers: Optional[Dict[str, str]] = None,
                    timeout: float = DEFAULT_TIMEOUT) -> httpx.Response:
    """Send one JSON request with a bounded timeout. No retries."""
    request_headers = {**JSON_HEADERS, **(headers or {})}
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await client.request(method, url, json=payload, headers=request_headers)


def response_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


async def fetch_json(service: str, method: str, url: str, *, payload: Any = None,
                     headers: Optional[Dict[str, str]] = None,
                     timeout: float = DEFAULT_TIMEOUT,
                     metrics: Optional[MetricsCollector] = None) -> Any:
    """Call an upstream API and return its JSON document.

    Raises UpstreamUnavailableError for transport failures and timeouts,
    UpstreamRejectedError for non-2xx answers and MalformedPayloadError
    when the request body cannot be encoded (NaN, Infinity).
    """
    start = time.time()
    outcome = "error"
    try:
        try:
            response = await send_json(method, url, payload=payload, headers=headers, timeout=timeout)
        except httpx.TimeoutException as exc:
            outcome = "timeout"
            logger.warning("Upstream timeout", service=service, url=url, error=str(exc))
            raise UpstreamUnavailableError(
                service,
                f"timeout of {timeout}s exceeded",
                details={"error": str(exc) or type(exc).__name__},
                timeout=True
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            outcome = "unavailable"
            logger.error("Upstream unreachable", service=service, url=url, error=str(exc))
            raise UpstreamUnavailableError(
                service,
                str(exc) or type(exc).__name__,
                details={"error": str(exc) or type(exc).__name__}
            )
        except (TypeError, ValueError) as exc:
            outcome = "invalid_request"
            logger.warning("Request body not encodable", service=service, error=str(exc))
            raise MalformedPayloadError(
                "Request body could not be encoded as JSON",
                details={"error": str(exc)}
            )

        if not response.is_success:
            outcome = "rejected"
            body = response_body(response)
            logger.warning(
                "Upstream rejected request",
                service=service,
                url=url,
                status_code=response.status_code
            )
            raise UpstreamRejectedError(service, response.status_code, body)

        try:
            data = response.json()
        except ValueError:
            outcome = "invalid"
            logger.error("Upstream returned invalid JSON", service=service, url=url)
            raise UpstreamUnavailableError(
                service,
                "invalid JSON in upstream response",
                details={"status_code": response.status_code}
            )

        outcome = "success"
        return data
    finally:
        if metrics is not None:
            metrics.increment_counter("outbound_requests_total", target=service, outcome=outcome)
            metrics.observe_histogram("outbound_request_duration_seconds", time.time() - start, target=service)
