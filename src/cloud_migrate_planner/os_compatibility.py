"""Guest OS compatibility lookups for both migration targets."""

from __future__ import annotations

from collections.abc import Sequence

from .catalog import (
    CONTAINER_PLATFORM_OS_COMPATIBILITY,
    CONTAINER_PLATFORM_OS_DEFAULT,
    VSI_OS_COMPATIBILITY,
    VSI_OS_DEFAULT,
)
from .config import Target
from .models import OSCompatibilityEntry

SUPPORTED = "supported"
PARTIAL = "partial"
UNSUPPORTED = "unsupported"

_NORMALIZED_STATUS = {
    "supported": SUPPORTED,
    "fully-supported": SUPPORTED,
    "community": PARTIAL,
    "supported-with-caveats": PARTIAL,
    "unsupported": UNSUPPORTED,
}


def default_os_table(target: Target) -> tuple[tuple[OSCompatibilityEntry, ...], OSCompatibilityEntry]:
    if target == Target.VSI:
        return VSI_OS_COMPATIBILITY, VSI_OS_DEFAULT
    return CONTAINER_PLATFORM_OS_COMPATIBILITY, CONTAINER_PLATFORM_OS_DEFAULT


def lookup_os_compatibility(
    guest_os: str,
    table: Sequence[OSCompatibilityEntry],
    default: OSCompatibilityEntry,
) -> OSCompatibilityEntry:
    """Return the first entry with a pattern contained in *guest_os* (case-insensitive)."""
    os_lower = (guest_os or "").lower()
    for entry in table:
        if any(p.lower() in os_lower for p in entry.patterns):
            return entry
    return default


def os_compatibility_for(guest_os: str, target: Target) -> OSCompatibilityEntry:
    table, default = default_os_table(target)
    return lookup_os_compatibility(guest_os, table, default)


def normalized_status(entry: OSCompatibilityEntry) -> str:
    """Collapse either target's status vocabulary to supported / partial / unsupported."""
    return _NORMALIZED_STATUS.get(entry.status, UNSUPPORTED)


def count_by_os_status(guest_oses: Sequence[str], target: Target) -> dict[str, int]:
    counts: dict[str, int] = {}
    for guest_os in guest_oses:
        status = os_compatibility_for(guest_os, target).status
        counts[status] = counts.get(status, 0) + 1
    return counts
