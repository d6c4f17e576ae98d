"""Bootstrap package classification.

Builds the list of package patterns that are treated as provided by the
platform ("bootstrap" or system packages) and tests package names against
that list. A pattern is either an exact package name (``java.lang``) or a
prefix pattern ending in ``.*`` (``java.*``).

Prefix patterns are a plain string-prefix test, not a segment test:
``com.foo.*`` matches ``com.foo``, ``com.foo.bar`` and also ``com.foobar``.
"""

import logging
from collections.abc import Iterable
from collections.abc import Sequence
from typing import Any

from .settings import SettingsManager

logger = logging.getLogger(__name__)

WILDCARD = ".*"


def parse_packages(packages: str | None) -> list[str]:
    """Split a comma separated package list into single entries.

    Empty entries are dropped. Entries are not trimmed, so ``"a, b"`` yields
    ``["a", " b"]``.
    """
    logger.debug(f"Parsing packages: {packages!r}")
    if not packages:
        return []
    return [entry for entry in packages.split(",") if entry]


def build_bootstrap_packages(
    primary: str | None,
    secondary: str | None,
    explicit: Iterable[Any] | None = None,
) -> list[str]:
    """Build the ordered list of bootstrap package patterns.

    Args:
        primary: Comma separated patterns from the framework system packages setting
        secondary: Comma separated patterns from the bundle-utils system packages setting
        explicit: Package-like objects (anything with a ``name``) to append verbatim

    Returns:
        Primary patterns, then secondary patterns, then explicit package names.
        Duplicates are kept.
    """
    results = parse_packages(primary)
    results.extend(parse_packages(secondary))
    if explicit is not None:
        results.extend(pkg.name for pkg in explicit)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            f"Ignored packages={','.join(results)}",
            extra={"event": "packages:bootstrap", "packages": list(results)},
        )
    return results


def bootstrap_packages_from_settings(
    settings: SettingsManager,
    explicit: Iterable[Any] | None = None,
) -> list[str]:
    """Build bootstrap packages from the two configured system package properties."""
    primary, secondary = settings.get_system_packages_config()
    return build_bootstrap_packages(primary, secondary, explicit)


def package_match(patterns: Sequence[str], package_name: str | None) -> bool:
    """Is the named package covered by any of the patterns (which may include wildcards)."""
    if package_name is None:
        return False

    for pattern in patterns:
        if pattern.endswith(WILDCARD):
            prefix = pattern[: -len(WILDCARD)]
            if package_name.startswith(prefix):
                return True
        elif pattern == package_name:
            return True
    return False


def get_package_name(name: str) -> str:
    """Given a class name, extract the package name."""
    index = name.rfind(".")
    if index > 0:
        return name[:index]
    return ""


def find_malformed_patterns(patterns: Iterable[str]) -> list[str]:
    """Return the patterns that will not match the way they look like they should.

    Matching never calls this; it is an opt-in check for configuration tooling.
    Flagged are empty patterns, a bare ``.*`` (matches every package), and
    ``*`` anywhere other than a trailing ``.*``.
    """
    malformed = []
    for pattern in patterns:
        if not pattern or pattern == WILDCARD:
            malformed.append(pattern)
            continue
        body = pattern[: -len(WILDCARD)] if pattern.endswith(WILDCARD) else pattern
        if "*" in body:
            malformed.append(pattern)
    if malformed:
        logger.warning(f"Malformed package patterns: {malformed}")
    return malformed
