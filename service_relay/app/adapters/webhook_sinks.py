"""
Fire-and-forget webhook sinks: the downstream results endpoint and the
Discord notification channel.

Sends are attempted once. Failures come back as RelayOutcome values and
are never raised.
"""

import time
from typing import Any, Dict, Optional
import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .http_client import DEFAULT_TIMEOUT, send_json
from ..webhooks.models import RelayOutcome, RelaySink


class WebhookSink:
    """POST JSON to a fixed URL and report the outcome."""

    target = "webhook_sink"

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT,
                 metrics: Optional[MetricsCollector] = None):
        self._url = url
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger(f"relay.{self.target}")

    async def _post(self, sink: RelaySink, payload: Any) -> RelayOutcome:
        """POST ``payload`` once and describe what happened."""
        start = time.time()
        try:
            response = await send_json("POST", self._url, payload=payload, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            outcome = RelayOutcome.failure(sink, f"timeout of {self.timeout}s exceeded ({type(exc).__name__})")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            outcome = RelayOutcome.failure(sink, str(exc) or type(exc).__name__)
        except (TypeError, ValueError) as exc:
            # Raised while encoding the body, e.g. NaN or Infinity in the payload
            outcome = RelayOutcome.failure(sink, f"Request body could not be encoded: {exc}")
        else:
            if response.is_success:
                outcome = RelayOutcome.success(sink, response.status_code)
            else:
                outcome = RelayOutcome.failure(
                    sink,
                    f"Request failed with status code {response.status_code}",
                    status_code=response.status_code
                )

        if outcome.succeeded:
            self.logger.info("Webhook sink delivered", sink=sink.value, status_code=outcome.status_code)
        else:
            self.logger.warning("Webhook sink failed", sink=sink.value, error=outcome.status_or_error)

        if self.metrics is not None:
            self.metrics.increment_counter(
                "outbound_requests_total",
                target=sink.value,
                outcome="success" if outcome.succeeded else "error"
            )
            self.metrics.observe_histogram("outbound_request_duration_seconds", time.time() - start, target=sink.value)
        return outcome


class DownstreamForwarder(WebhookSink):
    """Forwards the raw webhook body, unmodified, to the results endpoint."""

    target = "downstream_forwarder"

    async def forward(self, raw_payload: Dict[str, Any]) -> RelayOutcome:
        """Forward the webhook body as received."""
        return await self._post(RelaySink.DOWNSTREAM, raw_payload)


class DiscordNotifier(WebhookSink):
    """Posts messages to a Discord incoming webhook. The URL is a secret and is never logged."""

    target = "discord_notifier"

    async def send(self, message: Dict[str, Any]) -> RelayOutcome:
        """Post an embed message."""
        return await self._post(RelaySink.NOTIFIER, message)

    async def send_fallback(self, message: Dict[str, Any]) -> RelayOutcome:
        """Post the plain-text message used when the embed failed."""
        return await self._post(RelaySink.FALLBACK, message)
