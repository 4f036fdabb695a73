"""
Proxy caching package.

Provides the in-memory TTL cache that remembers upstream lookups, found
or not. Entries expire a fixed time after they are written.
"""

from .ttl_cache import CacheEntry, TTLCache

__all__ = [
    "CacheEntry",
    "TTLCache",
]
