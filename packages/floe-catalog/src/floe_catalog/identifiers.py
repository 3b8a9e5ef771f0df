"""Identifier helpers shared by every catalog backend.

An identifier is a tuple of path segments, most-specific segment last. For a
table, every segment but the last is the namespace and the last one is the
table name.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeAlias

from floe_catalog.errors import InvalidIdentifierError

Identifier: TypeAlias = tuple[str, ...]
IdentifierLike: TypeAlias = str | Sequence[str]

SEPARATOR = "."


def to_identifier(value: IdentifierLike | None) -> Identifier:
    """Normalize an identifier to tuple format.

    Args:
        value: Dotted string, sequence of segments, or None for the empty identifier.

    Returns:
        Identifier as a tuple of strings.

    Raises:
        InvalidIdentifierError: If a dotted string contains an empty segment.

    Example:
        >>> to_identifier("bronze.raw.events")
        ('bronze', 'raw', 'events')
        >>> to_identifier(["bronze", "raw"])
        ('bronze', 'raw')
    """
    if value is None:
        return ()
    if isinstance(value, str):
        if value == "":
            return ()
        parts = tuple(value.split(SEPARATOR))
        if any(part == "" for part in parts):
            raise InvalidIdentifierError(value, f"Empty segment in identifier: {value!r}")
        return parts
    return tuple(value)


def identifier_to_string(identifier: Sequence[str]) -> str:
    """Render an identifier in dotted form for logs and error messages."""
    return SEPARATOR.join(identifier)


def table_name_from_identifier(identifier: Sequence[str]) -> str:
    """Return the table name (last segment) of an identifier.

    Returns an empty string for an empty identifier; never raises.

    Example:
        >>> table_name_from_identifier(("bronze", "customers"))
        'customers'
        >>> table_name_from_identifier(())
        ''
    """
    if len(identifier) == 0:
        return ""
    return identifier[-1]


def namespace_from_identifier(identifier: Sequence[str]) -> Identifier:
    """Return the namespace part of a table identifier.

    Drops exactly the last segment. A single-segment identifier yields the
    empty namespace.

    Args:
        identifier: Table identifier with at least one segment.

    Returns:
        All segments except the last.

    Raises:
        InvalidIdentifierError: If the identifier is empty.

    Example:
        >>> namespace_from_identifier(("bronze", "raw", "events"))
        ('bronze', 'raw')
        >>> namespace_from_identifier(("events",))
        ()
    """
    if len(identifier) == 0:
        raise InvalidIdentifierError(
            "",
            "Cannot derive a namespace from an empty identifier",
        )
    return tuple(identifier[:-1])
