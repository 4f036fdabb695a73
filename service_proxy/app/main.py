"""
Mojang API proxy service.
"""

import os
from typing import Any, Dict, Optional

from fastapi.staticfiles import StaticFiles

from shared.base_service import BaseService, PrettyJSONResponse
from shared.config import ProxyConfig

from service_proxy.app.adapters.mojang_client import MojangClient
from service_proxy.app.caching.ttl_cache import TTLCache
from service_proxy.app.domain.identifiers import normalize_username, normalize_uuid
from service_proxy.app.domain.resolution import ResolutionOrchestrator
from service_proxy.app.ratelimit.fixed_window import RequestGovernor


class ProxyService(BaseService):
    """Caching proxy in front of the Mojang username and profile APIs."""

    def __init__(
        self,
        config: Optional[ProxyConfig] = None,
        *,
        cache: Optional[TTLCache] = None,
        governor: Optional[RequestGovernor] = None,
        client: Optional[MojangClient] = None,
    ):
        super().__init__(config)
        self.logger.info("Starting mojang api proxy instance")

        self.cache = cache if cache is not None else TTLCache(
            self.config.cache.ttl,
            self.config.cache.checkperiod,
            on_change=lambda size: self.metrics.set_gauge("cache_entries", size),
        )
        self.governor = governor if governor is not None else RequestGovernor(
            self.config.max_mojang_profile_requests_per_minute,
            on_change=lambda count: self.metrics.set_gauge("governor_requests_in_window", count),
        )
        self.client = client if client is not None else MojangClient(
            self.config.username_api_url,
            self.config.profile_api_url,
            timeout=self.config.upstream_timeout_seconds,
        )
        self.orchestrator = ResolutionOrchestrator(
            self.cache,
            self.governor,
            self.client,
            metrics=self.metrics,
        )

        self.logger.info(
            "Proxy configured",
            cache_ttl=self.cache.ttl,
            cache_checkperiod=self.cache.checkperiod,
            max_profile_requests_per_minute=self.governor.limit,
            port=self.config.port,
        )

        self._setup_proxy_routes()
        self._mount_static_files()

        # Expose service instance via app state for introspection/testing
        self.app.state.proxy_service = self

    def _setup_proxy_routes(self):
        """Set up lookup routes."""

        # Path converters so empty, nested and trailing-slash forms reach
        # validation instead of the static mount
        @self.app.get("/username_to_uuid/{username:path}")
        async def username_to_uuid(username: str):
            """Resolve a username to its dashed uuid."""
            username = normalize_username(_strip_trailing_slash(username))
            result = await self.orchestrator.username_to_uuid(username)
            return PrettyJSONResponse(content=result)

        @self.app.get("/profile/{uuid:path}")
        async def profile(uuid: str):
            """Fetch a profile by compact or dashed uuid."""
            uuid = normalize_uuid(_strip_trailing_slash(uuid))
            result = await self.orchestrator.profile(uuid)
            return PrettyJSONResponse(content=result)

    def _mount_static_files(self):
        """Serve the static site from ``static_dir`` at the root path."""
        static_dir = self.config.static_dir
        if not os.path.isdir(static_dir):
            self.logger.warning("Static directory not found, static files disabled", static_dir=static_dir)
            return

        # Mounted last so the API routes above take precedence
        self.app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    async def _on_startup(self):
        await self.cache.start()
        await self.governor.start()
        self.logger.info("Listening", host=self.config.host, port=self.config.port)

    async def _on_shutdown(self):
        await self.governor.stop()
        await self.cache.stop()

    def _health_details(self) -> Dict[str, Any]:
        return {
            "cache": self.cache.stats(),
            "governor": self.governor.status(),
        }


def _strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


def create_app(config: Optional[ProxyConfig] = None):
    """Create FastAPI application."""
    service = ProxyService(config)
    return service.app


if __name__ == "__main__":
    service = ProxyService()
    service.run()
