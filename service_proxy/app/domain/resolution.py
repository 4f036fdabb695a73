"""
Lookup resolution: cache, request governor, upstream call, classification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING

from shared.errors import NotFoundError, RateLimitError, UpstreamTransportError
from shared.logging import get_logger

from service_proxy.app.adapters.mojang_client import SERVICE_NAME, MojangClient, UpstreamResponse
from service_proxy.app.caching.ttl_cache import CacheEntry, TTLCache
from service_proxy.app.ratelimit.fixed_window import RequestGovernor

from .identifiers import expand_uuid, is_compact_uuid

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class LookupKind(str, Enum):
    """Lookup namespaces; each prefixes its cache keys."""

    USERNAME_TO_UUID = "username_to_uuid"
    PROFILE = "profile"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    UPSTREAM_ERROR = "error"


@dataclass(frozen=True)
class UpstreamOutcome:
    """What an upstream call amounted to, before caching."""

    kind: OutcomeKind
    payload: Any = None
    error: Optional[UpstreamTransportError] = None


def classify_response(response: UpstreamResponse) -> UpstreamOutcome:
    """404 and 204 mean the entity does not exist; any other accepted status is a success."""
    if response.status_code in (404, 204):
        return UpstreamOutcome(OutcomeKind.NOT_FOUND)
    return UpstreamOutcome(OutcomeKind.SUCCESS, payload=response.body)


def cache_key(kind: LookupKind, identifier: str) -> str:
    return f"{kind.value}:{identifier}"


class ResolutionOrchestrator:
    """
    Resolves lookups through the cache, falling back to the upstream API.

    Found and not-found answers are cached alike. Rate-limit denials and
    upstream failures are never cached. Only profile lookups are counted
    against the request governor.

    Identifiers must already be validated and normalized.
    """

    def __init__(
        self,
        cache: TTLCache,
        governor: RequestGovernor,
        client: MojangClient,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.cache = cache
        self.governor = governor
        self.client = client
        self.metrics = metrics
        self.logger = get_logger("mojang_proxy.resolution")

    async def username_to_uuid(self, username: str) -> Dict[str, str]:
        """Resolve a username to ``{"uuid": <dashed uuid>}``."""
        return await self._resolve(
            LookupKind.USERNAME_TO_UUID,
            username.lower(),
            fetch=lambda: self.client.fetch_uuid(username),
            shape=self._shape_uuid,
            governed=False,
        )

    async def profile(self, uuid: str) -> Any:
        """Resolve a dashed uuid to the upstream profile document."""
        return await self._resolve(
            LookupKind.PROFILE,
            uuid,
            fetch=lambda: self.client.fetch_profile(uuid),
            shape=self._shape_profile,
            governed=True,
        )

    async def _resolve(
        self,
        kind: LookupKind,
        identifier: str,
        *,
        fetch: Callable[[], Awaitable[UpstreamResponse]],
        shape: Callable[[Any], Any],
        governed: bool,
    ) -> Any:
        key = cache_key(kind, identifier)

        entry = self.cache.get(key)
        if entry is not None:
            return self._answer_from_cache(kind, identifier, entry)

        self._count("cache_misses_total", namespace=kind.value)

        if governed and not self.governor.try_acquire():
            self.logger.warning(
                "Profile request limit reached, rejecting to protect the upstream",
                namespace=kind.value,
                identifier=identifier,
                current_count=self.governor.count,
                limit=self.governor.limit,
            )
            self._count("rate_limit_rejections_total")
            raise RateLimitError(
                "Profile request limit reached. Try again in 1 minute",
                details={"limit": self.governor.limit},
                retry_after=self.governor.seconds_until_reset(),
            )

        outcome = await self._call_upstream(fetch)
        self._count("upstream_requests_total", namespace=kind.value, outcome=outcome.kind.value)

        if outcome.kind is OutcomeKind.UPSTREAM_ERROR:
            self.logger.error(
                "Upstream lookup failed",
                namespace=kind.value,
                identifier=identifier,
                error=outcome.error.message,
            )
            raise outcome.error

        if outcome.kind is OutcomeKind.NOT_FOUND:
            self.cache.set(key, CacheEntry.not_found())
            self.logger.info("Not found in upstream", namespace=kind.value, identifier=identifier)
            raise self._not_found(kind, identifier)

        payload = shape(outcome.payload)
        self.cache.set(key, CacheEntry.of(payload))
        self.logger.info("Fetched from upstream", namespace=kind.value, identifier=identifier)
        return payload

    def _answer_from_cache(self, kind: LookupKind, identifier: str, entry: CacheEntry) -> Any:
        self._count("cache_hits_total", namespace=kind.value, entry="found" if entry.found else "not_found")
        if entry.found:
            self.logger.info("Served from cache", namespace=kind.value, identifier=identifier)
            return entry.value

        self.logger.info("Not found, served from cache", namespace=kind.value, identifier=identifier)
        raise self._not_found(kind, identifier)

    async def _call_upstream(self, fetch: Callable[[], Awaitable[UpstreamResponse]]) -> UpstreamOutcome:
        try:
            response = await fetch()
        except UpstreamTransportError as exc:
            return UpstreamOutcome(OutcomeKind.UPSTREAM_ERROR, error=exc)
        return classify_response(response)

    def _shape_uuid(self, body: Any) -> Dict[str, str]:
        raw = body.get("id") if isinstance(body, dict) else None
        if not isinstance(raw, str) or not is_compact_uuid(raw):
            raise UpstreamTransportError(
                service=SERVICE_NAME,
                message="Response did not contain a valid id",
            )
        return {"uuid": expand_uuid(raw.lower())}

    def _shape_profile(self, body: Any) -> Any:
        # Profile documents are forwarded as received
        return body

    def _not_found(self, kind: LookupKind, identifier: str) -> NotFoundError:
        subject = "user" if kind is LookupKind.USERNAME_TO_UUID else "profile"
        return NotFoundError(f"{subject.capitalize()} not found", details={kind.value: identifier})

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, **labels)
