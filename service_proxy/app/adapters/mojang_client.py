"""
Mojang identity API client for the proxy.
"""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from shared.errors import UpstreamTransportError
from shared.logging import get_logger


SERVICE_NAME = "mojang_api"


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and decoded JSON body of an accepted upstream response."""

    status_code: int
    body: Optional[Any] = None


def is_accepted_status(status_code: int) -> bool:
    """2xx and 404 are answers; anything else is a transport failure."""
    return 200 <= status_code < 300 or status_code == 404


class MojangClient:
    """Client for the Mojang username and session profile endpoints.

    No retries are attempted; a failed call surfaces immediately as
    ``UpstreamTransportError``.
    """

    def __init__(
        self,
        username_api_url: str,
        profile_api_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.username_api_url = username_api_url.rstrip('/')
        self.profile_api_url = profile_api_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("mojang_proxy.mojang_client")

    async def fetch_uuid(self, username: str) -> UpstreamResponse:
        """Look up the account identifier for a username."""
        return await self._get(f"{self.username_api_url}/{quote(username, safe='')}")

    async def fetch_profile(self, uuid: str) -> UpstreamResponse:
        """Fetch the session profile of an account."""
        return await self._get(f"{self.profile_api_url}/{quote(uuid, safe='')}")

    async def _get(self, url: str) -> UpstreamResponse:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", url=url, error=str(exc))
            raise UpstreamTransportError(
                service=SERVICE_NAME,
                message="An error occurred while trying to contact the mojang servers",
                details={"error": type(exc).__name__},
            ) from exc

        if not is_accepted_status(response.status_code):
            self.logger.error(
                "Unexpected upstream status",
                url=url,
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise UpstreamTransportError(
                service=SERVICE_NAME,
                message=f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code},
            )

        if response.status_code == 404 or response.status_code == 204:
            return UpstreamResponse(status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            self.logger.error("Upstream returned a non-JSON body", url=url, status_code=response.status_code)
            raise UpstreamTransportError(
                service=SERVICE_NAME,
                message="Malformed response body",
                details={"status_code": response.status_code},
            ) from exc

        self.logger.debug("Upstream response received", url=url, status_code=response.status_code)
        return UpstreamResponse(status_code=response.status_code, body=body)
