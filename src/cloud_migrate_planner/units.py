"""Rounding and version-token helpers shared by the scorers."""

from __future__ import annotations

import math
import re

_VERSION_RE = re.compile(r"(\d+)")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round()`` rounds half to even)."""
    return math.floor(value + 0.5)


def hardware_version_number(token: str) -> int:
    """First integer in a hardware version token (``"vmx-13"`` -> 13), or 0."""
    match = _VERSION_RE.search(token or "")
    return int(match.group(1)) if match else 0
