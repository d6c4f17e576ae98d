"""Load a bundle registry from a YAML file.

The file is a list of manifest header blocks, in registry order:

    - Bundle-SymbolicName: com.acme.core
      Bundle-Version: 1.0.0
    - Bundle-SymbolicName: com.acme.core.nl
      Fragment-Host: com.acme.core
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .bundles import Bundle
from .bundles import BundleRegistry

logger = logging.getLogger(__name__)


class RegistryFileError(ValueError):
    """Registry file is missing or structurally invalid."""


def load_registry(path: Path | str) -> BundleRegistry:
    """Read a YAML registry file.

    Args:
        path: Path to the YAML file

    Returns:
        BundleRegistry with bundles in file order

    Raises:
        RegistryFileError: Unreadable file, invalid YAML, or an invalid entry
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RegistryFileError(f"Cannot read registry file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RegistryFileError(f"Invalid YAML in registry file {path}: {e}") from e

    if data is None:
        data = []
    if not isinstance(data, list):
        raise RegistryFileError(f"Registry file {path} must contain a list of bundles")

    registry = BundleRegistry()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise RegistryFileError(f"Entry {index} in {path} is not a header mapping")
        headers = {str(k): str(v) for k, v in entry.items() if v is not None}
        try:
            registry.add(Bundle.from_headers(headers))
        except (ValueError, ValidationError) as e:
            raise RegistryFileError(f"Entry {index} in {path}: {e}") from e

    logger.debug(f"Loaded {len(registry)} bundles from {path}")
    return registry
