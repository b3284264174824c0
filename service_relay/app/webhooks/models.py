"""
Webhook payload variants and relay outcome models.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Union


class RelaySink(str, Enum):
    """Outbound targets of a relay."""
    DOWNSTREAM = "downstream"
    NOTIFIER = "notifier"
    FALLBACK = "fallback"


class PayloadVariant(str, Enum):
    """Known webhook shapes."""
    LABEL = "label"
    TRACKING = "tracking"


_FAILURE_CODES = {
    RelaySink.DOWNSTREAM: "DOWNSTREAM_FORWARD_FAILED",
    RelaySink.NOTIFIER: "NOTIFY_FAILED",
    RelaySink.FALLBACK: "NOTIFY_FAILED",
}


@dataclass(frozen=True)
class RelayOutcome:
    """Result of one outbound attempt."""
    sink: RelaySink
    succeeded: bool
    status_or_error: str
    status_code: Optional[int] = None
    error_code: Optional[str] = None

    @classmethod
    def success(cls, sink: RelaySink, status_code: int) -> "RelayOutcome":
        """Delivered with a 2xx status."""
        return cls(sink=sink, succeeded=True, status_or_error=str(status_code), status_code=status_code)

    @classmethod
    def failure(cls, sink: RelaySink, error: str, status_code: Optional[int] = None) -> "RelayOutcome":
        """Not delivered; ``error`` is the transport error or status text."""
        return cls(
            sink=sink,
            succeeded=False,
            status_or_error=error,
            status_code=status_code,
            error_code=_FAILURE_CODES[sink],
        )

    @property
    def summary(self) -> str:
        """Human-readable result shown in notifications."""
        if self.succeeded:
            return f"Success - Status: {self.status_or_error}"
        return f"Failed - {self.status_or_error}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["sink"] = self.sink.value
        return data


def _text(value: Any) -> Optional[str]:
    """Coerce a payload value to text; None and "" become None."""
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class LabelDetails:
    easyship_shipment_id: Optional[str] = None
    platform_order_number: Optional[str] = None
    status: Optional[str] = None
    label_url: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_page_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LabelDetails":
        return cls(
            easyship_shipment_id=_text(data.get("easyship_shipment_id")),
            platform_order_number=_text(data.get("platform_order_number")),
            status=_text(data.get("status")),
            label_url=_text(data.get("label_url")),
            tracking_number=_text(data.get("tracking_number")),
            tracking_page_url=_text(data.get("tracking_page_url")),
        )


@dataclass(frozen=True)
class TrackingStatus:
    easyship_shipment_id: Optional[str] = None
    platform_order_number: Optional[str] = None
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_page_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackingStatus":
        return cls(
            easyship_shipment_id=_text(data.get("easyship_shipment_id")),
            platform_order_number=_text(data.get("platform_order_number")),
            status=_text(data.get("status")),
            tracking_number=_text(data.get("tracking_number")),
            tracking_page_url=_text(data.get("tracking_page_url")),
        )


@dataclass(frozen=True)
class LabelEvent:
    """Label lifecycle callback (label created, failed, ...)."""
    event_type: str
    label: LabelDetails
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    variant = PayloadVariant.LABEL


@dataclass(frozen=True)
class TrackingEvent:
    """Tracking status callback."""
    tracking_status: TrackingStatus
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    variant = PayloadVariant.TRACKING


@dataclass(frozen=True)
class Unclassified:
    """Payload that matches no known variant."""
    reason: str
    raw: Any = field(default=None, repr=False, compare=False)


WebhookPayload = Union[LabelEvent, TrackingEvent, Unclassified]


def classify_payload(raw: Any) -> WebhookPayload:
    """Map a decoded JSON body to exactly one payload variant."""
    if not isinstance(raw, dict):
        return Unclassified("payload is not a JSON object", raw)

    is_label = bool(raw.get("event_type")) and isinstance(raw.get("label"), dict)
    is_tracking = isinstance(raw.get("tracking_status"), dict)

    if is_label and is_tracking:
        return Unclassified("payload matches both label and tracking shapes", raw)
    if is_label:
        return LabelEvent(
            event_type=str(raw["event_type"]),
            label=LabelDetails.from_dict(raw["label"]),
            resource_type=_text(raw.get("resource_type")),
            resource_id=_text(raw.get("resource_id")),
            raw=raw,
        )
    if is_tracking:
        return TrackingEvent(tracking_status=TrackingStatus.from_dict(raw["tracking_status"]), raw=raw)
    return Unclassified("missing event_type/label or tracking_status", raw)


@dataclass(frozen=True)
class RelayReport:
    """Everything that happened while relaying one webhook."""
    variant: PayloadVariant
    downstream: RelayOutcome
    notifier: RelayOutcome
    fallback: Optional[RelayOutcome] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant": self.variant.value,
            "downstream": self.downstream.to_dict(),
            "notifier": self.notifier.to_dict(),
            "fallback": self.fallback.to_dict() if self.fallback else None,
        }
