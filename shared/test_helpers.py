"""
Test helper functions and factory methods for the Shipping Relay.
"""

from typing import Dict, Any


class WebhookPayloadFactory:
    """Factory for Easyship webhook bodies."""

    @staticmethod
    def label_event(**label_overrides) -> Dict[str, Any]:
        """Label created callback; keyword arguments override label fields."""
        label = {
            "easyship_shipment_id": "ESAU1234567",
            "platform_order_number": "#1001",
            "status": "success",
            "label_url": "https://labels.test/ESAU1234567.pdf",
            "tracking_number": "TRK123",
            "tracking_page_url": "https://track.test/TRK123",
        }
        label.update(label_overrides)
        return {
            "event_type": "shipment.label.created",
            "resource_type": "shipment",
            "resource_id": "ESAU1234567",
            "label": label,
        }

    @staticmethod
    def tracking_event(**status_overrides) -> Dict[str, Any]:
        """Tracking status callback; keyword arguments override tracking fields."""
        status = {
            "platform_order_number": "#1001",
            "easyship_shipment_id": "ESAU1234567",
            "status": "Delivered",
            "tracking_page_url": "https://track.test/TRK123",
            "tracking_number": "TRK123",
        }
        status.update(status_overrides)
        return {"tracking_status": status}


class RelayConfigFactory:
    """Factory for complete relay settings."""

    @staticmethod
    def settings(**overrides) -> Dict[str, Any]:
        settings: Dict[str, Any] = {
            "postal_code_base_url": "https://easyship.test/api/v1/countries/14/postal_codes/",
            "item_categories_url": "https://public-api.easyship.test/2024-09/item_categories",
            "easyship_api_token": "test-easyship-token",
            "forwarding_url": "https://downstream.test/webhooks/shipping/result",
            "discord_webhook_url": "https://discord.test/api/webhooks/1/secret",
            "cache_check_period_seconds": 0,
        }
        settings.update(overrides)
        return settings


class FakeClock:
    """Manually advanced clock for TTL and rate limit tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
