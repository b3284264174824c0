"""
Unit tests for webhook payload classification and outcome models.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_relay.app.webhooks.models import (
    LabelEvent,
    PayloadVariant,
    RelayOutcome,
    RelayReport,
    RelaySink,
    TrackingEvent,
    Unclassified,
    classify_payload,
)
from shared.test_helpers import WebhookPayloadFactory


label_payload = WebhookPayloadFactory.label_event
tracking_payload = WebhookPayloadFactory.tracking_event


class TestClassifyPayload:

    def test_label_event(self):
        raw = label_payload()
        event = classify_payload(raw)

        assert isinstance(event, LabelEvent)
        assert event.variant is PayloadVariant.LABEL
        assert event.event_type == "shipment.label.created"
        assert event.resource_id == "ESAU1234567"
        assert event.label.status == "success"
        assert event.raw is raw

    def test_tracking_event(self):
        raw = tracking_payload()
        event = classify_payload(raw)

        assert isinstance(event, TrackingEvent)
        assert event.variant is PayloadVariant.TRACKING
        assert event.tracking_status.status == "Delivered"
        assert event.raw is raw

    def test_label_without_label_object_is_unclassified(self):
        raw = label_payload()
        del raw["label"]
        assert isinstance(classify_payload(raw), Unclassified)

    def test_label_without_event_type_is_unclassified(self):
        raw = label_payload()
        raw["event_type"] = ""
        assert isinstance(classify_payload(raw), Unclassified)

    def test_label_must_be_object(self):
        raw = label_payload()
        raw["label"] = "not-an-object"
        assert isinstance(classify_payload(raw), Unclassified)

    def test_tracking_status_must_be_object(self):
        assert isinstance(classify_payload({"tracking_status": "Delivered"}), Unclassified)

    @pytest.mark.parametrize("raw", [None, [], "text", 42, {}])
    def test_non_matching_bodies(self, raw):
        event = classify_payload(raw)
        assert isinstance(event, Unclassified)
        assert event.reason

    def test_both_shapes_is_ambiguous(self):
        raw = label_payload()
        raw.update(tracking_payload())
        event = classify_payload(raw)
        assert isinstance(event, Unclassified)
        assert "both" in event.reason

    def test_missing_sub_fields_become_none(self):
        event = classify_payload({"event_type": "shipment.label.failed", "label": {}})
        assert isinstance(event, LabelEvent)
        assert event.label.easyship_shipment_id is None
        assert event.resource_type is None

    def test_numeric_fields_coerced_to_text(self):
        event = classify_payload(tracking_payload(tracking_number=123456))
        assert event.tracking_status.tracking_number == "123456"


class TestRelayOutcome:

    def test_success(self):
        outcome = RelayOutcome.success(RelaySink.DOWNSTREAM, 200)
        assert outcome.succeeded is True
        assert outcome.status_or_error == "200"
        assert outcome.error_code is None
        assert outcome.summary == "Success - Status: 200"

    def test_downstream_failure_code(self):
        outcome = RelayOutcome.failure(RelaySink.DOWNSTREAM, "Connection refused")
        assert outcome.error_code == "DOWNSTREAM_FORWARD_FAILED"
        assert outcome.summary == "Failed - Connection refused"

    def test_notifier_failure_code(self):
        outcome = RelayOutcome.failure(RelaySink.NOTIFIER, "Request failed with status code 400", status_code=400)
        assert outcome.error_code == "NOTIFY_FAILED"
        assert outcome.status_code == 400

    def test_report_to_dict(self):
        report = RelayReport(
            variant=PayloadVariant.TRACKING,
            downstream=RelayOutcome.success(RelaySink.DOWNSTREAM, 202),
            notifier=RelayOutcome.failure(RelaySink.NOTIFIER, "boom"),
        )
        data = report.to_dict()
        assert data["variant"] == "tracking"
        assert data["downstream"]["sink"] == "downstream"
        assert data["notifier"]["succeeded"] is False
        assert data["fallback"] is None
