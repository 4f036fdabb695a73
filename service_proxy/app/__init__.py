"""
Mojang API proxy service package.

The proxy fronts lookups against the Mojang identity API, enforcing:
- Input validation: usernames and profile UUIDs are normalized first
- Caching: positive and negative results are held for a fixed TTL
- Rate limiting: profile lookups are capped per minute to avoid upstream bans

Structure:
- app.main: FastAPI app, routes, and lifecycle wiring.
- app.adapters: HTTP client for the upstream API.
- app.caching: In-memory TTL cache.
- app.ratelimit: Fixed-window request governor.
- app.domain: Identifier normalization and lookup resolution.
"""
