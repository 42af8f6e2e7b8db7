"""Version comparison and increment helpers.

Release tags and dependency versions in generated notes come in many shapes
(``v1.2.3``, ``^5.6.2``, ``v8 (major)``). Comparison therefore runs through a
cascade of strategies and never raises: when nothing applies, the caller's
fallback decides.
"""

from __future__ import annotations

import logging
import re

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)

# Full semantic version with an optional leading "v"
_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*)?$"
)

# First major[.minor[.patch]] run anywhere in the string
_COERCE_RE = re.compile(r"(?:^|\D)(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|\D)")

_RANGE_QUALIFIERS_RE = re.compile(r"[\^~]")

_INTEGER_RE = re.compile(r"\d+")

BUMP_TYPES: tuple[str, ...] = ("major", "minor", "patch")


def is_valid_version(version: str) -> bool:
    """Return True if *version* is a strict semantic version (``v`` prefix allowed)."""
    return bool(_SEMVER_RE.match(version.strip()))


_PrereleaseKey = tuple[int, tuple[tuple[int, int, str], ...]]


def _prerelease_key(prerelease: str | None) -> _PrereleaseKey:
    """Order prerelease identifiers by semver precedence.

    A release ranks above any of its prereleases. Numeric identifiers compare
    numerically and rank below alphanumeric ones, which compare in ASCII
    order; a shorter identifier list ranks below a longer one it prefixes.
    """
    if not prerelease:
        return 1, ()
    identifiers = tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part) for part in prerelease.split(".")
    )
    return 0, identifiers


def _parse_strict(version: str) -> tuple[Version, _PrereleaseKey]:
    """Parse a strict semantic version into a precedence key.

    The ``v`` prefix and build metadata are dropped. ``major.minor.patch`` is
    held as a :class:`~packaging.version.Version`; the prerelease is ordered by
    semver rules, which differ from PEP 440 (``1.0.0-1`` is a prerelease, not
    a post release).

    Raises:
        InvalidVersion: If the string is not a semantic version.
    """
    match = _SEMVER_RE.match(version.strip())
    if not match:
        raise InvalidVersion(version)
    major, minor, patch, prerelease = match.groups()
    return Version(f"{major}.{minor}.{patch}"), _prerelease_key(prerelease)


def coerce_version(version: str) -> tuple[int, int, int] | None:
    """Extract the first dotted numeric run as a ``(major, minor, patch)`` tuple."""
    match = _COERCE_RE.search(version)
    if not match:
        return None
    major, minor, patch = match.groups()
    return int(major), int(minor or 0), int(patch or 0)


def is_newer_version(candidate: str, current: str, source_is_generic_update: bool) -> bool:
    """Decide whether *candidate* should replace *current* as the latest version.

    Strategies, first applicable wins:

    1. both strict semantic versions: compare them;
    2. both coercible to ``major.minor.patch``: compare the coerced tuples;
    3. ``^``/``~`` qualifiers stripped, both strict: compare them;
    4. otherwise trust the candidate only for generic (Renovate style) updates.

    Equal versions are never newer.
    """
    if not candidate or not current:
        return source_is_generic_update

    try:
        if is_valid_version(candidate) and is_valid_version(current):
            newer = _parse_strict(candidate) > _parse_strict(current)
            logger.debug("Compared %s with %s as semver: newer=%s", candidate, current, newer)
            return newer

        coerced_candidate = coerce_version(candidate)
        coerced_current = coerce_version(current)
        if coerced_candidate and coerced_current:
            newer = coerced_candidate > coerced_current
            logger.debug("Compared %s with %s after coercion: newer=%s", candidate, current, newer)
            return newer

        stripped_candidate = _RANGE_QUALIFIERS_RE.sub("", candidate)
        stripped_current = _RANGE_QUALIFIERS_RE.sub("", current)
        if is_valid_version(stripped_candidate) and is_valid_version(stripped_current):
            return _parse_strict(stripped_candidate) > _parse_strict(stripped_current)
    except (InvalidVersion, ValueError) as exc:
        logger.debug("Version comparison failed for %s vs %s: %s", candidate, current, exc)
        return source_is_generic_update

    if source_is_generic_update:
        logger.debug("Incomparable versions, keeping most recent %s", candidate)
    return source_is_generic_update


def is_earlier_version(candidate: str, current: str) -> bool:
    """Return True if *candidate* is an earlier version than *current*.

    Used for the "from" endpoint of range bumps. Falls back to comparing the
    first integer in each string, and to False when that is impossible.
    """
    if not candidate or not current:
        return bool(candidate)

    try:
        if is_valid_version(candidate) and is_valid_version(current):
            return _parse_strict(candidate) < _parse_strict(current)
    except InvalidVersion as exc:
        logger.debug("Initial version comparison failed: %s. Keeping existing.", exc)

    candidate_numbers = _INTEGER_RE.findall(candidate)
    current_numbers = _INTEGER_RE.findall(current)
    if candidate_numbers and current_numbers:
        return int(candidate_numbers[0]) < int(current_numbers[0])

    return False


def has_prior_release(tag: str) -> bool:
    """Return True if *tag* denotes a real release, i.e. is greater than ``0.0.0``."""
    return is_newer_version(tag, "0.0.0", source_is_generic_update=False)


def increment_version(version: str, bump: str) -> str | None:
    """Increment a strict semantic version by *bump* (``major``, ``minor`` or ``patch``).

    A prerelease is promoted to its release when the bump does not move past
    it (``1.2.0-rc.1`` + minor -> ``1.2.0``). The ``v`` prefix is not kept.

    Returns:
        The incremented version, or None if *version* is not a semantic version.
    """
    if bump not in BUMP_TYPES:
        raise ValueError(f"Unknown version bump: {bump!r}")

    match = _SEMVER_RE.match(version.strip())
    if not match:
        return None

    major, minor, patch = (int(part) for part in match.groups()[:3])
    prerelease = match.group(4)

    if bump == "major":
        if not (prerelease and minor == 0 and patch == 0):
            major += 1
        minor = patch = 0
    elif bump == "minor":
        if not (prerelease and patch == 0):
            minor += 1
        patch = 0
    elif not prerelease:
        patch += 1

    return f"{major}.{minor}.{patch}"
