"""
Orthros User Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.orthros/config.json (cross-project settings)
- Local: .orthros/config.json (project-specific overrides)

Config structure:
{
  "imports": {
    "auto_add": true,                 // Add imports from completion / quick-fix
    "implicit_open_module": "Prelude" // Module imported open rather than explicitly
  },
  "analysis": {
    "host": "127.0.0.1",              // Analysis server address
    "port": 4242,
    "timeout_ms": 5000
  },
  "diagnostics": {
    "organise_imports_hint": true     // Emit HintOrganiseImports diagnostics
  },
  "logging": {
    "level": "INFO",                  // Minimum level (ORTHROS_LOG_LEVEL overrides)
    "file": false                     // Rotating log under .orthros/logs/
  },
  "edits": {
    "document_changes": true          // Client accepts versioned documentChanges
  }
}
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional
from orthros.exceptions import ConfigError
from orthros.logging_config import logger
from orthros.paths import get_paths


# Default configuration
DEFAULT_CONFIG = {
    "imports": {
        "auto_add": True,
        "implicit_open_module": "Prelude",
    },
    "analysis": {
        "host": "127.0.0.1",
        "port": 4242,
        "timeout_ms": 5000,
    },
    "diagnostics": {
        "organise_imports_hint": True,
    },
    "logging": {
        "level": "INFO",
        "file": False,
    },
    "edits": {
        "document_changes": True,
    },
}


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.orthros/config.json)
    3. Local config (.orthros/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None, global_config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            project_root: Project root directory (defaults to CWD)
            global_config_path: Override for the user-wide config file
        """
        paths = get_paths(project_root) if project_root else get_paths()
        self.project_root = paths.project_root
        self.global_config_path = global_config_path or paths.global_config
        self.local_config_path = paths.local_config

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration with hierarchical override.

        Returns:
            Merged configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        for label, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                with open(path, 'r') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load {label} config: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Ignoring {label} config {path}: not a JSON object")
                continue
            config = self._deep_merge(config, data)
            logger.debug(f"Loaded {label} config from {path}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """
        Deep merge two dictionaries, with override taking precedence.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Args:
            key: Dot-separated key (e.g., "imports.auto_add")
            default: Default value if key not found

        Returns:
            Config value

        Examples:
            config.get("imports.implicit_open_module")  # "Prelude"
            config.get("analysis.port")  # 4242
        """
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set_global(self, key: str, value: Any) -> bool:
        """Set a global config value and save to disk."""
        return self._set_and_save(key, value, is_global=True)

    def set_local(self, key: str, value: Any) -> bool:
        """Set a local config value and save to disk."""
        return self._set_and_save(key, value, is_global=False)

    def _set_and_save(self, key: str, value: Any, is_global: bool) -> bool:
        """
        Set a config value and save to appropriate file.

        Args:
            key: Dot-separated key
            value: Value to set
            is_global: True for global config, False for local

        Returns:
            True if successful, False otherwise

        Raises:
            ConfigError: If the key is empty or runs through a non-section value
        """
        config_path = self.global_config_path if is_global else self.local_config_path

        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    config = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load config from {config_path}: {e}")
                return False
        else:
            config = {}

        if not isinstance(config, dict):
            raise ConfigError(f"Config file {config_path} does not hold a JSON object")

        keys = key.split(".")
        if not all(keys):
            raise ConfigError(f"Invalid config key: '{key}'")

        current = config
        for k in keys[:-1]:
            current = current.setdefault(k, {})
            if not isinstance(current, dict):
                raise ConfigError(f"Cannot set '{key}': '{k}' is not a section")

        current[keys[-1]] = value

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

            self._config = self._load_config()

            logger.info(f"Saved {'global' if is_global else 'local'} config: {key}={value}")
            return True
        except OSError as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False

    def get_all(self) -> Dict[str, Any]:
        """Get the entire merged configuration."""
        return copy.deepcopy(self._config)

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._config = self._load_config()


# Global singleton
_config: Optional[UserConfig] = None


def get_user_config(project_root: Optional[Path] = None) -> UserConfig:
    """
    Get the user configuration singleton.

    Args:
        project_root: Optional project root override

    Returns:
        UserConfig instance
    """
    global _config
    if project_root is not None:
        return UserConfig(project_root)
    if _config is None:
        _config = UserConfig()
    return _config


def reset_user_config() -> None:
    """Reset the global config singleton (for testing)."""
    global _config
    _config = None
