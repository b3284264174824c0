"""
Easyship API client for the Relay.
"""

from typing import Any, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import RateLimitError
from .http_client import DEFAULT_TIMEOUT, fetch_json

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector
    from ..ratelimit.token_bucket import TokenBucket


class EasyshipClient:
    """Client for the postal-code and item-category endpoints."""

    SERVICE = "easyship"

    def __init__(
        self,
        postal_code_base_url: str,
        item_categories_url: str,
        api_token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limiter: Optional["TokenBucket"] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.postal_code_base_url = postal_code_base_url.rstrip('/')
        self.item_categories_url = item_categories_url
        self._api_token = api_token
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self.metrics = metrics
        self.logger = get_logger("relay.easyship_client")

    async def get_postal_code(self, postal_code_id: str) -> Any:
        """Fetch one postal code document by its numeric id."""
        url = f"{self.postal_code_base_url}/{postal_code_id}"
        return await self._get(url)

    async def get_item_categories(self) -> Any:
        """Fetch the item-category (HS code) listing. Requires the bearer token."""
        data = await self._get(
            self.item_categories_url,
            headers={"authorization": f"Bearer {self._api_token}"}
        )
        self.logger.info("Fetched item categories from Easyship API")
        return data

    async def _get(self, url: str, headers: Optional[dict] = None) -> Any:
        if self.rate_limiter is not None:
            try:
                await self.rate_limiter.acquire()
            except RateLimitError:
                if self.metrics is not None:
                    self.metrics.increment_counter("rate_limit_hits_total", direction="outbound")
                raise
        return await fetch_json(
            self.SERVICE,
            "GET",
            url,
            headers=headers,
            timeout=self.timeout,
            metrics=self.metrics
        )
