"""Settings manager for bundle-utils properties.

Properties are read from three settings.yaml scopes plus the environment:
- User global (~/.bundle-utils/settings.yaml)
- Project (.bundle-utils/settings.yaml)
- Local (.bundle-utils/settings.local.yaml)
- Environment variable (highest priority)

Each file keeps properties under a ``properties`` mapping with dotted keys:

    properties:
      org.osgi.framework.system.packages: "javax.*,org.w3c.dom"
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

PROPERTIES_KEY = "properties"

# Comma separated bootstrap package patterns, read in this order
FRAMEWORK_SYSTEM_PACKAGES = "org.osgi.framework.system.packages"
SYSTEM_PACKAGES = "bundle_utils.system.packages"


def env_key(key: str) -> str:
    """Environment variable name for a property key (``a.b-c`` -> ``A_B_C``)."""
    return key.upper().replace(".", "_").replace("-", "_")


class SettingsManager:
    """Manages properties across user/project/local scopes and the environment."""

    def __init__(
        self,
        config_dir: Path | None = None,
        user_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """Initialize settings manager with standard paths.

        Args:
            config_dir: Base directory for project/local settings (for testing).
                        If None, uses .bundle-utils in current directory.
            user_dir: Base directory for user settings. If None, uses ~/.bundle-utils.
            environ: Environment mapping. If None, uses os.environ.
        """
        if config_dir is None:
            config_dir = Path(".bundle-utils")
        if user_dir is None:
            user_dir = Path.home() / ".bundle-utils"

        self.user_settings_file = user_dir / "settings.yaml"
        self.project_settings_file = config_dir / "settings.yaml"
        self.local_settings_file = config_dir / "settings.local.yaml"
        self._environ = os.environ if environ is None else environ

    def get_property(self, key: str, default: str = "") -> str:
        """Get a property value.

        Resolution order:
        1. Environment variable (see ``env_key``)
        2. Local settings
        3. Project settings
        4. User settings
        5. default

        Returns:
            Property value as a string
        """
        if (value := self._environ.get(env_key(key))) is not None:
            logger.debug(f"[settings] {key} -> env")
            return value

        properties = self.get_merged_settings().get(PROPERTIES_KEY)
        if not isinstance(properties, dict):
            return default
        value = properties.get(key)
        if value is None:
            return default
        return str(value)

    def get_system_packages_config(self) -> tuple[str, str]:
        """Get the primary and secondary system package lists (raw, comma separated)."""
        return self.get_property(FRAMEWORK_SYSTEM_PACKAGES), self.get_property(SYSTEM_PACKAGES)

    def set_property(self, key: str, value: str, scope: str = "project") -> None:
        """Set a property in the settings file for scope.

        Args:
            key: Property key
            value: Property value
            scope: "user", "project", or "local"
        """
        target_file = self._file_for_scope(scope)
        self._update_settings(target_file, {PROPERTIES_KEY: {key: value}})
        logger.info(f"Set {scope} property {key}={value}")

    def remove_property(self, key: str, scope: str = "project") -> bool:
        """Remove a property from the settings file for scope.

        Returns:
            True if removed, False if not found
        """
        target_file = self._file_for_scope(scope)
        settings = self._read_settings(target_file)

        properties = (settings or {}).get(PROPERTIES_KEY)
        if not isinstance(properties, dict) or key not in properties:
            return False

        del properties[key]
        if not properties:
            del settings[PROPERTIES_KEY]

        self._write_settings(target_file, settings)
        logger.info(f"Removed {scope} property {key}")
        return True

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings
        """
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = self._deep_merge(merged, settings)
        return merged

    def _file_for_scope(self, scope: str) -> Path:
        file_map = {
            "user": self.user_settings_file,
            "project": self.project_settings_file,
            "local": self.local_settings_file,
        }
        if scope not in file_map:
            raise ValueError(f"Unknown scope '{scope}' (expected one of: {', '.join(file_map)})")
        return file_map[scope]

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Returns:
            Settings dict, or None if the file doesn't exist or can't be parsed
        """
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {path}: expected a mapping, got {type(data).__name__}")
            return None
        return data

    def _write_settings(self, path: Path, settings: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, "w") as f:
                yaml.dump(settings, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error(f"Failed to write settings to {path}: {e}")
            raise

    def _update_settings(self, path: Path, updates: dict[str, Any]) -> None:
        existing = self._read_settings(path) or {}
        self._write_settings(path, self._deep_merge(existing, updates))

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
