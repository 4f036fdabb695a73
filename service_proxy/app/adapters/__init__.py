"""
Adapters package for the proxy service.

Contains the HTTP client wrapper for the Mojang identity API. The adapter
encapsulates:

- Base URLs and request shapes
- Timeouts
- Error handling that maps transport failures to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .mojang_client import MojangClient, UpstreamResponse

__all__ = [
    "MojangClient",
    "UpstreamResponse",
]
