"""Namespace properties reconciliation.

This module provides:
- PropertiesUpdateSummary: Result model of a properties update
- reconcile_properties: Pure function computing new properties and a summary

Every backend routes update_namespace_properties through
reconcile_properties, so the summary semantics are identical across
catalog types.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from floe_catalog.errors import PropertiesConflictError

Properties = dict[str, str]


class PropertiesUpdateSummary(BaseModel):
    """Summary of a namespace properties update.

    Attributes:
        removed: Keys that existed and were deleted.
        updated: Keys whose value changed, including newly added keys.
        missing: Keys requested for removal that did not exist.

    Example:
        >>> summary = PropertiesUpdateSummary(removed=["b"], updated=["d"], missing=["c"])
        >>> summary.missing
        ['c']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    removed: list[str] = Field(default_factory=list, description="Deleted keys")
    updated: list[str] = Field(default_factory=list, description="Changed or added keys")
    missing: list[str] = Field(default_factory=list, description="Absent removal keys")

    @property
    def has_changes(self) -> bool:
        """Return True if the update removed or changed anything."""
        return bool(self.removed or self.updated)


def find_conflicts(removals: Iterable[str], updates: Mapping[str, str]) -> list[str]:
    """Return every key requested for both removal and update.

    Keys are returned in removal order, without duplicates.
    """
    return list(dict.fromkeys(key for key in removals if key in updates))


def reconcile_properties(
    current: Mapping[str, str],
    removals: Iterable[str] | None = None,
    updates: Mapping[str, str] | None = None,
) -> tuple[Properties, PropertiesUpdateSummary]:
    """Compute the new property set and the change summary.

    The ``current`` mapping is never mutated; a new dict is returned.

    Args:
        current: Current properties.
        removals: Keys to remove.
        updates: Keys to add or overwrite.

    Returns:
        Tuple of (new properties, summary).

    Raises:
        PropertiesConflictError: If any key is in both removals and updates.
            Raised before anything is computed.

    Example:
        >>> props, summary = reconcile_properties(
        ...     {"a": "1", "b": "2"}, ["b", "c"], {"a": "1", "d": "4"}
        ... )
        >>> props
        {'a': '1', 'd': '4'}
        >>> (summary.removed, summary.updated, summary.missing)
        (['b'], ['d'], ['c'])
    """
    requested_removals = list(removals or [])
    requested_updates = dict(updates or {})

    conflicts = find_conflicts(requested_removals, requested_updates)
    if conflicts:
        raise PropertiesConflictError(conflicts)

    new_properties = dict(current)
    removed: list[str] = []
    updated: list[str] = []

    for key in requested_removals:
        if key in new_properties:
            del new_properties[key]
            removed.append(key)

    for key, value in requested_updates.items():
        if key not in new_properties or new_properties[key] != value:
            new_properties[key] = value
            updated.append(key)

    removed_keys = set(removed)
    missing = [key for key in requested_removals if key not in removed_keys]

    return new_properties, PropertiesUpdateSummary(
        removed=removed,
        updated=updated,
        missing=missing,
    )
