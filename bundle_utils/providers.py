"""Package enumeration providers.

A loader may or may not be able to list the packages it knows about. The
capability is modelled as the ``PackageSource`` protocol and checked
explicitly; loaders without it contribute nothing.
"""

import logging
import sys
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from typing import Protocol
from typing import runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Package:
    """A package known to a loader."""

    name: str


@runtime_checkable
class PackageSource(Protocol):
    """Loader capable of enumerating its packages."""

    def get_packages(self) -> Iterable[Any]: ...


def get_packages(loader: Any) -> list[Package]:
    """Get the packages known to the given loader.

    Args:
        loader: Any object; only ``PackageSource`` implementations are queried

    Returns:
        Packages reported by the loader, or an empty list when the loader
        lacks the capability or fails while enumerating.
    """
    if not isinstance(loader, PackageSource):
        logger.debug(f"{type(loader).__name__} does not enumerate packages")
        return []

    try:
        return [_as_package(pkg) for pkg in loader.get_packages()]
    except Exception as e:
        logger.warning(f"Failed to enumerate packages from {loader!r}: {e}")
        return []


def _as_package(pkg: Any) -> Package:
    """Normalize a reported package: plain names are wrapped, name-bearing objects keep their name."""
    if isinstance(pkg, Package):
        return pkg
    if isinstance(pkg, str):
        return Package(pkg)
    return Package(pkg.name)


class ImportedPackages:
    """Packages visible through the import system.

    Reports every entry of ``modules`` (``sys.modules`` by default) that is a
    package, i.e. carries a ``__path__``.
    """

    def __init__(self, modules: Mapping[str, Any] | None = None):
        self._modules = modules

    def get_packages(self) -> list[Package]:
        modules = sys.modules if self._modules is None else self._modules
        names = sorted(
            name for name, module in list(modules.items()) if module is not None and hasattr(module, "__path__")
        )
        return [Package(name) for name in names]

    def __repr__(self) -> str:
        return "ImportedPackages(sys.modules)" if self._modules is None else "ImportedPackages(custom)"
