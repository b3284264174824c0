"""
Shipping relay service.

Proxies Easyship postal-code lookups through a read-through cache and
relays Easyship webhooks to the downstream results endpoint and Discord.
"""

import asyncio
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Response
from fastapi.responses import PlainTextResponse

from shared.base_service import BaseService
from shared.config import RelayConfig
from shared.errors import ConfigurationError, MalformedPayloadError, RateLimitError
from .adapters import DiscordNotifier, DownstreamForwarder, EasyshipClient, GoogleRoutesClient
from .caching import CacheAsideLookupService, TTLCache, is_numeric_key
from .ratelimit import InboundRateLimiter, TokenBucket
from .webhooks import PayloadVariant, WebhookRelay

WEBHOOK_ACK = "Payload processed successfully"


class RelayService(BaseService):
    """Relay service implementation."""

    def __init__(self, config: Optional[RelayConfig] = None):
        super().__init__("relay", config)
        cfg = self.config
        timeout = cfg.outbound_timeout_seconds

        self.outbound_limiter: Optional[TokenBucket] = None
        if cfg.outbound_rate_limit > 0:
            self.outbound_limiter = TokenBucket(
                cfg.outbound_rate_limit,
                cfg.outbound_rate_burst,
                max_wait=cfg.outbound_max_wait_seconds,
                name="easyship"
            )

        self.easyship_client = EasyshipClient(
            cfg.postal_code_base_url,
            cfg.item_categories_url,
            cfg.easyship_api_token.get_secret_value(),
            timeout=timeout,
            rate_limiter=self.outbound_limiter,
            metrics=self.metrics
        )

        self.postal_code_cache = TTLCache(cfg.cache_ttl_seconds, name="postal_codes")
        self.postal_codes = CacheAsideLookupService(
            self._fetch_postal_code,
            self.postal_code_cache,
            validator=is_numeric_key,
            name="postal_code",
            metrics=self.metrics
        )

        self.webhook_relay = WebhookRelay(
            DownstreamForwarder(cfg.forwarding_url, timeout=timeout, metrics=self.metrics),
            DiscordNotifier(cfg.discord_webhook_url.get_secret_value(), timeout=timeout, metrics=self.metrics),
            fallback_enabled=cfg.notify_fallback_enabled,
            metrics=self.metrics
        )

        self.routes_client: Optional[GoogleRoutesClient] = None
        if cfg.google_api_key is not None and cfg.google_routes_url:
            self.routes_client = GoogleRoutesClient(
                cfg.google_routes_url,
                cfg.google_api_key.get_secret_value(),
                timeout=timeout,
                metrics=self.metrics
            )

        self.inbound_limiter = InboundRateLimiter(
            cfg.redis_url,
            cfg.inbound_rate_limit,
            cfg.inbound_rate_window_seconds
        )

        self._sweeper: Optional[asyncio.Task] = None

        @self.app.on_event("startup")
        async def _startup():
            if cfg.cache_check_period_seconds > 0:
                self._sweeper = asyncio.create_task(
                    self.postal_code_cache.sweep_periodically(cfg.cache_check_period_seconds)
                )

        @self.app.on_event("shutdown")
        async def _shutdown():
            if self._sweeper is not None:
                self._sweeper.cancel()
                try:
                    await self._sweeper
                except asyncio.CancelledError:
                    pass
                self._sweeper = None
            await self.inbound_limiter.close()

        self._setup_relay_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.relay_service = self

    async def _fetch_postal_code(self, postal_code_id: str) -> Any:
        return await self.easyship_client.get_postal_code(postal_code_id)

    async def _enforce_rate_limit(self, request: Request, response: Response) -> None:
        """FastAPI dependency applying the per-caller inbound budget."""
        if not self.inbound_limiter.enabled:
            return
        try:
            result = await self.inbound_limiter.enforce(request)
        except RateLimitError:
            self.metrics.increment_counter("rate_limit_hits_total", direction="inbound")
            raise
        self._set_rate_limit_headers(response, result)

    def _set_rate_limit_headers(self, response: Response, rate_result: Dict[str, Any]) -> None:
        """Propagate rate limiting metadata via standard headers."""
        limit = rate_result.get("limit")
        remaining = rate_result.get("remaining")
        reset = rate_result.get("reset_in_seconds")

        if limit is not None:
            response.headers["X-RateLimit-Limit"] = str(limit)
        if remaining is not None:
            response.headers["X-RateLimit-Remaining"] = str(remaining)
        if reset is not None:
            response.headers["X-RateLimit-Reset"] = str(reset)

    async def _read_json(self, request: Request) -> Any:
        try:
            return await request.json()
        except ValueError:
            raise MalformedPayloadError("Request body is not valid JSON")

    async def _check_dependencies(self) -> Dict[str, Any]:
        return {
            "postal_code_cache": self.postal_code_cache.get_stats(),
            "outbound_rate_limiter": self.outbound_limiter.get_status() if self.outbound_limiter else "disabled",
            "inbound_rate_limiter": "enabled" if self.inbound_limiter.enabled else "disabled",
            "public_transport": "enabled" if self.routes_client else "disabled",
        }

    def _setup_relay_routes(self):
        """Set up relay routes."""
        rate_limited = [Depends(self._enforce_rate_limit)]

        @self.app.get("/postal_codes/{postal_code_id}", dependencies=rate_limited)
        async def get_postal_code(postal_code_id: str):
            """Postal code document, served from cache while fresh."""
            return await self.postal_codes.lookup(postal_code_id)

        @self.app.get("/hs-code", dependencies=rate_limited)
        async def get_hs_codes():
            """Item categories, always fetched live."""
            return await self.easyship_client.get_item_categories()

        @self.app.post("/webhook", dependencies=rate_limited, response_class=PlainTextResponse)
        async def tracking_webhook(request: Request):
            payload = await self._read_json(request)
            await self.webhook_relay.relay(payload, expected=PayloadVariant.TRACKING)
            return WEBHOOK_ACK

        @self.app.post("/webhook-label", dependencies=rate_limited, response_class=PlainTextResponse)
        async def label_webhook(request: Request):
            payload = await self._read_json(request)
            await self.webhook_relay.relay(payload, expected=PayloadVariant.LABEL)
            return WEBHOOK_ACK

        @self.app.post("/public-transport", dependencies=rate_limited)
        async def public_transport(request: Request):
            """Transit routes via Google Routes."""
            if self.routes_client is None:
                raise ConfigurationError("Public transport routing is not configured")
            body = await self._read_json(request)
            return await self.routes_client.compute_routes(body)


def create_app(config: Optional[RelayConfig] = None):
    """Create FastAPI application."""
    service = RelayService(config)
    return service.app


def main():
    service = RelayService()
    service.run()


if __name__ == "__main__":
    main()
