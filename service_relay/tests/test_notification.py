"""
Unit tests for Discord notification building.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_relay.app.webhooks.models import RelayOutcome, RelaySink, Unclassified, classify_payload
from service_relay.app.webhooks.notification import (
    FAILURE_COLOR,
    MAX_FIELD_LENGTH,
    MAX_TITLE_LENGTH,
    SUCCESS_COLOR,
    build_fallback_message,
    build_notification,
    severity_color,
)
from shared.test_helpers import WebhookPayloadFactory

label_payload = WebhookPayloadFactory.label_event
tracking_payload = WebhookPayloadFactory.tracking_event

FORWARD_OK = RelayOutcome.success(RelaySink.DOWNSTREAM, 200)


def fields_by_name(message):
    return {field["name"]: field["value"] for field in message["embeds"][0]["fields"]}


class TestSeverityColor:

    @pytest.mark.parametrize("status", ["success", "SUCCESS", "Delivered", " delivered "])
    def test_success_like(self, status):
        assert severity_color(status) == SUCCESS_COLOR

    @pytest.mark.parametrize("status", ["failed", "In Transit", "", None])
    def test_everything_else(self, status):
        assert severity_color(status) == FAILURE_COLOR


class TestLabelNotification:

    def test_success_label(self):
        message = build_notification(classify_payload(label_payload()), FORWARD_OK)
        embed = message["embeds"][0]

        assert message["content"] is None
        assert embed["title"] == "Label Event - ESAU1234567"
        assert embed["color"] == SUCCESS_COLOR

        fields = fields_by_name(message)
        assert fields["Status"] == "success"
        assert fields["Label URL"] == "[Download Label](https://labels.test/ESAU1234567.pdf)"
        assert fields["Tracking Page"] == "[Track Shipment](https://track.test/TRK123)"
        assert fields["API Forwarding Status"] == "Success - Status: 200"

    def test_failed_label_uses_failure_marker(self):
        message = build_notification(classify_payload(label_payload(status="failed")), FORWARD_OK)
        assert message["embeds"][0]["color"] == FAILURE_COLOR

    def test_missing_fields_use_placeholders(self):
        event = classify_payload({"event_type": "shipment.label.failed", "label": {}})
        message = build_notification(event, FORWARD_OK)
        fields = fields_by_name(message)

        assert message["embeds"][0]["title"] == "Label Event - Unknown Easyship Shipment ID"
        assert fields["Resource Type"] == "Unknown Resource Type"
        assert fields["Status"] == "Unknown Status"
        assert fields["Label URL"] == "Unknown Label URL"
        assert fields["Tracking Page"] == "Unknown Tracking Page"
        assert message["embeds"][0]["color"] == FAILURE_COLOR

    def test_field_order_is_stable(self):
        message = build_notification(classify_payload(label_payload()), FORWARD_OK)
        names = [field["name"] for field in message["embeds"][0]["fields"]]
        assert names == [
            "Event Type",
            "Resource Type",
            "Resource ID",
            "Easyship Shipment ID",
            "Platform Order Number",
            "Status",
            "Label URL",
            "Tracking Number",
            "Tracking Page",
            "API Forwarding Status",
        ]


class TestTrackingNotification:

    def test_tracking_update(self):
        message = build_notification(classify_payload(tracking_payload()), FORWARD_OK)
        embed = message["embeds"][0]

        assert embed["title"] == "Tracking Update - ESAU1234567"
        assert embed["color"] == SUCCESS_COLOR
        assert fields_by_name(message)["Tracking Number"] == "TRK123"

    def test_forward_failure_text_reported(self):
        failed = RelayOutcome.failure(RelaySink.DOWNSTREAM, "timeout of 5.0s exceeded (ReadTimeout)")
        message = build_notification(classify_payload(tracking_payload(status="In Transit")), failed)

        assert fields_by_name(message)["API Forwarding Status"] == "Failed - timeout of 5.0s exceeded (ReadTimeout)"
        assert message["embeds"][0]["color"] == FAILURE_COLOR

    def test_long_values_clipped(self):
        failed = RelayOutcome.failure(RelaySink.DOWNSTREAM, "x" * 5000)
        message = build_notification(classify_payload(tracking_payload()), failed)
        value = fields_by_name(message)["API Forwarding Status"]
        assert len(value) == MAX_FIELD_LENGTH
        assert value.endswith("...")

    def test_long_shipment_id_title_clipped(self):
        long_id = "ESAU" + "9" * 400
        message = build_notification(classify_payload(tracking_payload(easyship_shipment_id=long_id)), FORWARD_OK)
        title = message["embeds"][0]["title"]

        assert len(title) == MAX_TITLE_LENGTH
        assert title.startswith("Tracking Update - ESAU")
        assert title.endswith("...")
        assert len(fields_by_name(message)["Easyship Shipment ID"]) == len(long_id)


def test_unclassified_has_no_format():
    with pytest.raises(TypeError):
        build_notification(Unclassified("nope"), FORWARD_OK)


def test_fallback_message():
    assert build_fallback_message("Request failed with status code 400") == {
        "content": "Webhook notification failed: Request failed with status code 400"
    }
