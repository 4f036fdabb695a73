"""
Domain logic for the proxy service.

Identifier normalization and the cache/governor/upstream resolution flow
that turns a lookup into a client response.
"""

from .identifiers import expand_uuid, is_compact_uuid, normalize_username, normalize_uuid
from .resolution import LookupKind, OutcomeKind, ResolutionOrchestrator, UpstreamOutcome, classify_response

__all__ = [
    "expand_uuid",
    "is_compact_uuid",
    "normalize_username",
    "normalize_uuid",
    "LookupKind",
    "OutcomeKind",
    "ResolutionOrchestrator",
    "UpstreamOutcome",
    "classify_response",
]
