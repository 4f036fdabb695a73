"""
Normalization of the two lookup key shapes accepted by the proxy.
"""

import re

from shared.errors import ValidationError


_USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]{1,16}")
_COMPACT_UUID_PATTERN = re.compile(r"[0-9a-f]{32}")
_UUID_V4_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}"
)


def expand_uuid(compact: str) -> str:
    """Insert dashes into a 32 character identifier (8-4-4-4-12)."""
    if len(compact) != 32:
        raise ValueError("compact uuid must be 32 characters long")
    return "-".join((
        compact[0:8],
        compact[8:12],
        compact[12:16],
        compact[16:20],
        compact[20:32],
    ))


def normalize_username(username: str) -> str:
    """
    Validate a Minecraft username.

    The username is returned as given; callers lower-case it for cache keys
    but the upstream request keeps the original spelling.
    """
    if not username or not _USERNAME_PATTERN.fullmatch(username):
        raise ValidationError("Invalid username", details={"username": username})
    return username


def normalize_uuid(value: str) -> str:
    """Lower-case, expand and validate a profile uuid into its dashed form."""
    candidate = (value or "").lower()
    if _COMPACT_UUID_PATTERN.fullmatch(candidate):
        candidate = expand_uuid(candidate)

    if not _UUID_V4_PATTERN.fullmatch(candidate):
        raise ValidationError("Invalid uuid", details={"uuid": value})
    return candidate


def is_compact_uuid(value: str) -> bool:
    """True for a bare 32 hex digit identifier."""
    return bool(_COMPACT_UUID_PATTERN.fullmatch(value.lower()))
