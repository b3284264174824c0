"""
Best-effort webhook relay.
"""

from typing import Any, Awaitable, Dict, Optional, Protocol, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import MalformedPayloadError
from .models import (
    LabelEvent,
    PayloadVariant,
    RelayOutcome,
    RelayReport,
    TrackingEvent,
    Unclassified,
    classify_payload,
)
from .notification import build_fallback_message, build_notification

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class Forwarder(Protocol):
    def forward(self, raw_payload: Dict[str, Any]) -> Awaitable[RelayOutcome]: ...


class Notifier(Protocol):
    def send(self, message: Dict[str, Any]) -> Awaitable[RelayOutcome]: ...

    def send_fallback(self, message: Dict[str, Any]) -> Awaitable[RelayOutcome]: ...


class WebhookRelay:
    """Classify, forward downstream, then notify.

    Only an unclassifiable payload raises; sink failures are recorded in
    the returned RelayReport. Nothing is retried or deduplicated.
    """

    def __init__(self, forwarder: Forwarder, notifier: Notifier, *,
                 fallback_enabled: bool = True,
                 metrics: Optional["MetricsCollector"] = None):
        self.forwarder = forwarder
        self.notifier = notifier
        self.fallback_enabled = fallback_enabled
        self.metrics = metrics
        self.logger = get_logger("relay.webhook_relay")

    async def relay(self, raw_payload: Any, expected: Optional[PayloadVariant] = None) -> RelayReport:
        event = classify_payload(raw_payload)

        if isinstance(event, Unclassified):
            self.logger.warning("Rejected webhook payload", reason=event.reason)
            raise MalformedPayloadError(details={"reason": event.reason})
        if not isinstance(event, (LabelEvent, TrackingEvent)):
            raise TypeError(f"Unhandled payload variant {type(event).__name__}")
        if expected is not None and event.variant is not expected:
            self.logger.warning("Webhook variant mismatch", expected=expected.value, received=event.variant.value)
            raise MalformedPayloadError(
                f"Expected a {expected.value} payload",
                details={"reason": f"received {event.variant.value} payload"}
            )

        downstream = await self.forwarder.forward(event.raw)

        message = build_notification(event, downstream)
        notifier = await self.notifier.send(message)

        fallback = None
        if not notifier.succeeded and self.fallback_enabled:
            fallback = await self.notifier.send_fallback(build_fallback_message(notifier.status_or_error))

        report = RelayReport(
            variant=event.variant,
            downstream=downstream,
            notifier=notifier,
            fallback=fallback,
        )

        self.logger.info(
            "Webhook relayed",
            variant=event.variant.value,
            downstream=downstream.summary,
            notifier=notifier.summary,
            fallback=fallback.summary if fallback else None
        )
        if self.metrics is not None:
            self.metrics.increment_counter("webhooks_relayed_total", variant=event.variant.value)
        return report
