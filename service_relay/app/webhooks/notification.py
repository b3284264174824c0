"""
Discord embed builders for relayed webhooks.
"""

from typing import Any, Dict, List, Optional

from .models import LabelEvent, RelayOutcome, TrackingEvent

SUCCESS_COLOR = 0x00FF00
FAILURE_COLOR = 0xFF0000

SUCCESS_STATUSES = frozenset({"success", "delivered"})

# Discord rejects embed titles and field values longer than these
MAX_TITLE_LENGTH = 256
MAX_FIELD_LENGTH = 1024


def severity_color(status: Optional[str]) -> int:
    """Green for success-like statuses, red for everything else."""
    if status and status.strip().lower() in SUCCESS_STATUSES:
        return SUCCESS_COLOR
    return FAILURE_COLOR


def _clip(value: str, limit: int = MAX_FIELD_LENGTH) -> str:
    if len(value) <= limit:
        return value
    return value[:limit - 3] + "..."


def _field(name: str, value: Optional[str], inline: bool = False) -> Dict[str, Any]:
    """Embed field, with an "Unknown <name>" placeholder for missing values."""
    return {"name": name, "value": _clip(value or f"Unknown {name}"), "inline": inline}


def _link_field(name: str, text: str, url: Optional[str]) -> Dict[str, Any]:
    if not url:
        return _field(name, None)
    return _field(name, f"[{text}]({url})")


def _embed(title: str, status: Optional[str], fields: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Single-embed message coloured by status."""
    return {
        "content": None,
        "embeds": [
            {
                "title": _clip(title, MAX_TITLE_LENGTH),
                "color": severity_color(status),
                "fields": fields,
            }
        ],
    }


def build_label_notification(event: LabelEvent, forward: RelayOutcome) -> Dict[str, Any]:
    """Label event embed, including the forwarding result."""
    label = event.label
    shipment_id = label.easyship_shipment_id or "Unknown Easyship Shipment ID"
    return _embed(
        f"Label Event - {shipment_id}",
        label.status,
        [
            _field("Event Type", event.event_type, inline=True),
            _field("Resource Type", event.resource_type, inline=True),
            _field("Resource ID", event.resource_id, inline=True),
            _field("Easyship Shipment ID", label.easyship_shipment_id),
            _field("Platform Order Number", label.platform_order_number),
            _field("Status", label.status, inline=True),
            _link_field("Label URL", "Download Label", label.label_url),
            _field("Tracking Number", label.tracking_number, inline=True),
            _link_field("Tracking Page", "Track Shipment", label.tracking_page_url),
            _field("API Forwarding Status", forward.summary),
        ],
    )


def build_tracking_notification(event: TrackingEvent, forward: RelayOutcome) -> Dict[str, Any]:
    """Tracking update embed, including the forwarding result."""
    tracking = event.tracking_status
    shipment_id = tracking.easyship_shipment_id or "Unknown Easyship Shipment ID"
    return _embed(
        f"Tracking Update - {shipment_id}",
        tracking.status,
        [
            _field("Easyship Shipment ID", tracking.easyship_shipment_id),
            _field("Platform Order Number", tracking.platform_order_number),
            _field("Status", tracking.status, inline=True),
            _field("Tracking Number", tracking.tracking_number, inline=True),
            _link_field("Tracking Page", "Track Shipment", tracking.tracking_page_url),
            _field("API Forwarding Status", forward.summary),
        ],
    )


def build_notification(event: Any, forward: RelayOutcome) -> Dict[str, Any]:
    """Build the channel message for a classified payload."""
    if isinstance(event, LabelEvent):
        return build_label_notification(event, forward)
    if isinstance(event, TrackingEvent):
        return build_tracking_notification(event, forward)
    raise TypeError(f"No notification format for {type(event).__name__}")


def build_fallback_message(error: str) -> Dict[str, Any]:
    """Plain-text message sent when the embed itself could not be delivered."""
    return {"content": _clip(f"Webhook notification failed: {error}")}
