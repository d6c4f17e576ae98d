"""Helpers for bootstrap package classification and bundle lookup."""

from .bundles import Bundle
from .bundles import BundleRegistry
from .bundles import find_bundle
from .bundles import get_fragment_host
from .bundles import is_fragment
from .packages import WILDCARD
from .packages import bootstrap_packages_from_settings
from .packages import build_bootstrap_packages
from .packages import find_malformed_patterns
from .packages import get_package_name
from .packages import package_match
from .providers import ImportedPackages
from .providers import Package
from .providers import get_packages

__all__ = [
    "WILDCARD",
    "Bundle",
    "BundleRegistry",
    "ImportedPackages",
    "Package",
    "bootstrap_packages_from_settings",
    "build_bootstrap_packages",
    "find_bundle",
    "find_malformed_patterns",
    "get_fragment_host",
    "get_package_name",
    "get_packages",
    "is_fragment",
    "package_match",
]
