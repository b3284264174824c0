"""
Webhook relay package.

Classifies inbound shipping callbacks, forwards them downstream and posts
a readable summary to the notification channel.
"""

from .models import (
    LabelEvent,
    PayloadVariant,
    RelayOutcome,
    RelayReport,
    RelaySink,
    TrackingEvent,
    Unclassified,
    classify_payload,
)
from .relay import WebhookRelay

__all__ = [
    "LabelEvent",
    "PayloadVariant",
    "RelayOutcome",
    "RelayReport",
    "RelaySink",
    "TrackingEvent",
    "Unclassified",
    "classify_payload",
    "WebhookRelay",
]
