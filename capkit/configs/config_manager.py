"""
Configuration Manager for capkit

Loads `capkit_config.yml` with PyYAML, validates its structure and exposes
dotted lookup and mutation behind a re-entrant lock.  Unlike a process-wide
singleton, instances are constructed explicitly and handed to whatever needs
them (registries, checkers, trace sinks).
"""

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "capkit_config.yml"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_DEFAULTS: Dict[str, Any] = {
    "version": "1.0",
    "logging": {"level": "INFO", "format": LOG_FORMAT},
    "registry": {"name": "default"},
    "checker": {"states": []},
    "trace": {"enabled": False, "path": "./trace/capkit.jsonl"},
}

ChangeCallback = Callable[[str, Any], None]


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class ConfigManager:
    """
    Configuration holder for capkit.

    Thread safe for concurrent access.  A missing file falls back to built-in
    defaults; a present but malformed file raises ``ValueError``.
    """
    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._lock = threading.RLock()
        self._config: Dict[str, Any] = {}
        self._change_callbacks: List[ChangeCallback] = []
        self.config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        self.reload(notify=False)

    def reload(self, notify: bool = True) -> None:
        with self._lock:
            logger.info(f"Loading configuration from {self.config_path}")
            config = copy.deepcopy(_DEFAULTS)
            if self.config_path.exists():
                _merge(config, self._load_file())
            else:
                logger.warning(f"Config file not found, using defaults: {self.config_path}")
            valid, errors = self._validate_config(config)
            if not valid:
                error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
                logger.error(error_msg)
                raise ValueError(error_msg)
            self._config = config
            if notify:
                self._notify_change("*", self._config)

    def _load_file(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse {self.config_path}: {e}")
            raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root in {self.config_path} must be a mapping")
        return data

    def _validate_config(self, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        errors: List[str] = []
        for section in ("logging", "registry", "checker"):
            if not isinstance(config.get(section), dict):
                errors.append(f"'{section}' must be a dict")
        level = config.get("logging", {}).get("level") if isinstance(config.get("logging"), dict) else None
        if level is not None and not isinstance(logging.getLevelName(str(level).upper()), int):
            errors.append(f"Unknown logging level: {level}")
        registry = config.get("registry")
        if isinstance(registry, dict) and not isinstance(registry.get("name", ""), str):
            errors.append("'registry.name' must be a string")
        checker = config.get("checker")
        if isinstance(checker, dict):
            states = checker.get("states")
            if states is not None and not isinstance(states, list):
                errors.append("'checker.states' must be a list")
        trace = config.get("trace")
        if trace is not None and not isinstance(trace, dict):
            errors.append("'trace' must be a dict")
        return len(errors) == 0, errors

    def _notify_change(self, path: str, value: Any) -> None:
        for callback in self._change_callbacks:
            try:
                callback(path, value)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def get(self, path: str, default: Any = None) -> Any:
        with self._lock:
            value: Any = self._config
            for key in path.split('.'):
                if isinstance(value, dict):
                    value = value.get(key)
                elif isinstance(value, list):
                    try:
                        value = value[int(key)]
                    except (ValueError, IndexError):
                        return default
                else:
                    return default
                if value is None:
                    return default
            return value

    def get_section(self, section: str, default: Any = None) -> Dict[str, Any]:
        """Return a config section as a dict, or ``default`` if missing or not a dict."""
        if default is None:
            default = {}
        with self._lock:
            val = self._config.get(section, default)
            if isinstance(val, dict):
                return val
            return default

    def set(self, path: str, value: Any) -> None:
        """Set configuration value by dot-separated path.

        Raises:
            ValueError: If the path is empty or crosses a value that is not a dict.
        """
        keys = path.split(".")
        if not all(keys):
            raise ValueError(f"Invalid config path: '{path}'")
        with self._lock:
            target = self._config
            for depth, key in enumerate(keys[:-1]):
                if key not in target:
                    target[key] = {}
                elif not isinstance(target[key], dict):
                    prefix = ".".join(keys[: depth + 1])
                    raise ValueError(f"Cannot set '{path}': '{prefix}' is not a section")
                target = target[key]
            target[keys[-1]] = value
            self._notify_change(path, value)

    def save(self) -> None:
        """Save configuration to disk atomically."""
        with self._lock:
            valid, errors = self._validate_config(self._config)
            if not valid:
                error_msg = "Cannot save invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors)
                logger.error(error_msg)
                raise ValueError(error_msg)

            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.config_path.with_suffix(".tmp")
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(
                        self._config,
                        f,
                        default_flow_style=False,
                        sort_keys=False,
                        allow_unicode=True,
                        indent=2
                    )
                temp_path.replace(self.config_path)
                logger.info(f"Configuration saved to {self.config_path}")
            except Exception as e:
                if temp_path.exists():
                    temp_path.unlink()
                logger.error(f"Failed to save configuration: {e}")
                raise

    def register_change_callback(self, callback: ChangeCallback) -> None:
        """Register callback for configuration changes."""
        self._change_callbacks.append(callback)

    def export_to_dict(self) -> Dict[str, Any]:
        """Export full configuration as dictionary."""
        with self._lock:
            return copy.deepcopy(self._config)


def configure_logging(config: ConfigManager) -> None:
    """Apply the `logging` section through ``logging.basicConfig``."""
    level_name = str(config.get("logging.level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=config.get("logging.format", LOG_FORMAT),
    )
    logging.getLogger("capkit").setLevel(level_name)
