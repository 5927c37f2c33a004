"""Identifier Validation — syntactic checks that run before any store lookup.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - A malformed identifier never reaches the store

Design Decisions:
    - Canonical UUID text form only (hyphenated or 32 hex digits); braces and
      URN prefixes are rejected so ids round-trip through URLs unchanged
"""

import re
from uuid import UUID

_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?"
    r"[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}$",
)


def is_valid_identifier(raw: object) -> bool:
    """True when raw is a string in canonical UUID form."""
    return isinstance(raw, str) and bool(_UUID_PATTERN.match(raw))


def parse_identifier(raw: object) -> UUID | None:
    """Return the UUID for raw, or None when it is not a valid identifier."""
    if isinstance(raw, UUID):
        return raw
    if not is_valid_identifier(raw):
        return None
    return UUID(raw)  # type: ignore[arg-type]


def same_identifier(left: object, right: object) -> bool:
    """Compare two references by identifier value, not by object identity.

    Accepts UUIDs or their string forms in any case; anything that does not
    parse never matches.
    """
    a = parse_identifier(left)
    b = parse_identifier(right)
    return a is not None and a == b
