"""
Unit tests for the Google Routes client.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_relay.app.adapters.routes_client import (
    TRANSIT_FIELD_MASK,
    GoogleRoutesClient,
    missing_route_fields,
)
from shared.errors import MalformedPayloadError, UpstreamRejectedError

ROUTES_URL = "https://routes.test/directions/v2:computeRoutes"

ROUTE_REQUEST = {
    "origin": {"address": "Central Station, Sydney"},
    "destination": {"address": "Bondi Junction"},
    "arrivalTime": "2026-10-19T09:00:00Z",
    "travelMode": "TRANSIT",
    "transitPreferences": {"allowedTravelModes": ["TRAIN"]},
}


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(status_code=status_code, request=httpx.Request("POST", ROUTES_URL), **kwargs)


def test_missing_route_fields():
    assert missing_route_fields(ROUTE_REQUEST) == []
    assert missing_route_fields({"origin": {}, "travelMode": "TRANSIT"}) == [
        "origin", "destination", "arrivalTime", "transitPreferences"
    ]
    assert missing_route_fields([]) == [
        "origin", "destination", "arrivalTime", "travelMode", "transitPreferences"
    ]


class TestGoogleRoutesClient:
    """Test cases for GoogleRoutesClient."""

    @pytest.fixture
    def client(self):
        return GoogleRoutesClient(ROUTES_URL, "g-key", timeout=5.0)

    @pytest.mark.asyncio
    async def test_compute_routes(self, client):
        body = dict(ROUTE_REQUEST, computeAlternativeRoutes=True, languageCode="en")

        with patch('httpx.AsyncClient') as mock_client:
            request = AsyncMock(return_value=_response(200, json={"routes": [{"legs": []}]}))
            mock_client.return_value.__aenter__.return_value.request = request

            result = await client.compute_routes(body)

        assert result == {"routes": [{"legs": []}]}
        args, kwargs = request.call_args
        assert args == ("POST", ROUTES_URL)
        assert kwargs["headers"]["X-Goog-Api-Key"] == "g-key"
        assert kwargs["headers"]["X-Goog-FieldMask"] == TRANSIT_FIELD_MASK
        assert kwargs["json"] == dict(ROUTE_REQUEST, computeAlternativeRoutes=True)

    @pytest.mark.asyncio
    async def test_missing_fields_never_reach_upstream(self, client):
        with patch('httpx.AsyncClient') as mock_client:
            with pytest.raises(MalformedPayloadError) as exc_info:
                await client.compute_routes({"origin": {"address": "Central"}})

        mock_client.assert_not_called()
        assert exc_info.value.details["missing"] == [
            "destination", "arrivalTime", "travelMode", "transitPreferences"
        ]

    @pytest.mark.asyncio
    async def test_upstream_error_mirrored(self, client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=_response(403, json={"error": {"status": "PERMISSION_DENIED"}})
            )

            with pytest.raises(UpstreamRejectedError) as exc_info:
                await client.compute_routes(ROUTE_REQUEST)

        assert exc_info.value.status_code == 403
        assert exc_info.value.details["body"] == {"error": {"status": "PERMISSION_DENIED"}}

    @pytest.mark.asyncio
    async def test_unencodable_body_rejected(self, client):
        body = dict(ROUTE_REQUEST, origin={"location": {"latLng": {"latitude": float("nan")}}})

        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                side_effect=ValueError("Out of range float values are not JSON compliant")
            )

            with pytest.raises(MalformedPayloadError) as exc_info:
                await client.compute_routes(body)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Request body could not be encoded as JSON"
