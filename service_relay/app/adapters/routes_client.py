"""
Google Routes API client used by the public transport proxy.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

from shared.errors import MalformedPayloadError
from .http_client import DEFAULT_TIMEOUT, fetch_json

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

REQUIRED_FIELDS = ("origin", "destination", "arrivalTime", "travelMode", "transitPreferences")
OPTIONAL_FIELDS = ("computeAlternativeRoutes",)

TRANSIT_FIELD_MASK = "routes.legs.steps.transitDetails"


def missing_route_fields(body: Any) -> List[str]:
    """Names of the required route fields that are absent or empty."""
    if not isinstance(body, dict):
        return list(REQUIRED_FIELDS)
    return [name for name in REQUIRED_FIELDS if not body.get(name)]


class GoogleRoutesClient:
    """Computes transit routes through the Google Routes API."""

    SERVICE = "google_routes"

    def __init__(self, routes_url: str, api_key: str, *, timeout: float = DEFAULT_TIMEOUT,
                 metrics: Optional["MetricsCollector"] = None):
        self.routes_url = routes_url
        self._api_key = api_key
        self.timeout = timeout
        self.metrics = metrics

    async def compute_routes(self, body: Any) -> Any:
        """Validate the request and POST the required fields to Google Routes."""
        missing = missing_route_fields(body)
        if missing:
            raise MalformedPayloadError(
                f"Missing required fields: {', '.join(missing)}.",
                details={"missing": missing}
            )

        payload: Dict[str, Any] = {name: body[name] for name in REQUIRED_FIELDS}
        for name in OPTIONAL_FIELDS:
            if name in body:
                payload[name] = body[name]

        return await fetch_json(
            self.SERVICE,
            "POST",
            self.routes_url,
            payload=payload,
            headers={
                "X-Goog-Api-Key": self._api_key,
                "X-Goog-FieldMask": TRANSIT_FIELD_MASK,
            },
            timeout=self.timeout,
            metrics=self.metrics
        )
