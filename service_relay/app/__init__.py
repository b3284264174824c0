"""
Relay Service package for the Shipping Relay.

The relay fronts two small jobs:
- Postal-code lookups against Easyship, behind a read-through TTL cache
- Easyship webhooks, forwarded downstream and summarised to Discord

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: HTTP clients for Easyship, Google Routes and webhook sinks.
- app.caching: TTL cache and the cache-aside lookup service.
- app.ratelimit: Outbound token bucket and inbound fixed-window limiter.
- app.webhooks: Payload classification, notification building, relay.
"""
