"""Semantic version arithmetic for prompt versions."""

import enum
import logging
from typing import Optional, Tuple

logger = logging.getLogger("prompt_tools.prompts.semver")

INITIAL_VERSION = "1.0.0"
_FALLBACK = (1, 0, 0)


class BumpKind(str, enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


def parse_version(value: str) -> Tuple[int, int, int]:
    """Split "MAJOR.MINOR.PATCH" into integers.

    Anything that is not three non-negative integer segments is read as
    1.0.0 instead of raising.
    """
    parts = (value or "").split(".")
    if len(parts) != 3 or not all(p.isdecimal() for p in parts):
        logger.warning("Malformed version string %r, treating it as %s", value, INITIAL_VERSION)
        return _FALLBACK
    major, minor, patch = (int(p) for p in parts)
    return major, minor, patch


def bump_version(value: str, kind: Optional[str] = None) -> str:
    """Return the successor of ``value`` for the given bump kind (patch by default)."""
    major, minor, patch = parse_version(value)

    if kind == BumpKind.MAJOR:
        return f"{major + 1}.0.0"
    if kind == BumpKind.MINOR:
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"
