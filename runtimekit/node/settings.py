"""
Runtime settings and the configuration channel.

Settings are loaded from the ``node_runtime`` section of a YAML settings file
and pushed into a runtime through :meth:`ConfigurationChannel.publish`. The
channel never blocks the publisher; queued values are applied only when an
operation drains them under the channel lock.

Example settings file (runtimekit.yaml):

    node_runtime:
      node: /opt/node/bin/node
      npm: /opt/node/lib/node_modules/npm/bin/npm-cli.js
      cache: /tmp/npm-cache
    proxy: http://localhost:10809
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from runtimekit.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

SETTINGS_KEY = "node_runtime"
DEFAULT_SETTINGS_FILE = "runtimekit.yaml"


@dataclass(frozen=True)
class RuntimeSettings:
    """
    User overrides for the managed Node.js runtime.

    Attributes:
        node: Path to the node binary
        npm: Path to the npm entry point
        cache: Path to the npm cache directory
    """

    node: Optional[Path] = None
    npm: Optional[Path] = None
    cache: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RuntimeSettings":
        """
        Build settings from a mapping.

        Raises:
            ConfigError: If the mapping has unknown keys or non-string values
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"'{SETTINGS_KEY}' must be a mapping")

        unknown = set(data) - {"node", "npm", "cache"}
        if unknown:
            raise ConfigError(
                f"Unknown {SETTINGS_KEY} settings: {', '.join(sorted(unknown))}"
            )

        values = {}
        for key in ("node", "npm", "cache"):
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ConfigError(f"{SETTINGS_KEY}.{key} must be a path string")
            values[key] = Path(value).expanduser()
        return cls(**values)


@dataclass(frozen=True)
class RuntimeConfig:
    """Parsed settings file: runtime overrides plus the HTTP proxy."""

    settings: RuntimeSettings = field(default_factory=RuntimeSettings)
    proxy: Optional[str] = None


def load_settings_file(config_path: Path) -> RuntimeConfig:
    """
    Parse a YAML settings file.

    A missing or empty file yields default settings.

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values
    """
    config_path = Path(config_path)
    if not config_path.exists():
        logger.debug(f"Settings file not found, using defaults: {config_path}")
        return RuntimeConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        return RuntimeConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must contain a mapping: {config_path}")

    proxy = data.get("proxy")
    if proxy is not None and not isinstance(proxy, str):
        raise ConfigError("proxy must be a URL string")

    return RuntimeConfig(
        settings=RuntimeSettings.from_dict(data.get(SETTINGS_KEY)), proxy=proxy
    )


class ConfigurationChannel:
    """
    Hand-off point between settings publishers and runtime operations.

    ``publish`` enqueues without taking ``lock``. ``drain`` must be called
    with ``lock`` held and replaces the current settings with each queued
    value in arrival order.
    """

    def __init__(self, initial: Optional[RuntimeSettings] = None):
        self.lock = threading.Lock()
        self._current = initial if initial is not None else RuntimeSettings()
        self._pending: "queue.SimpleQueue[RuntimeSettings]" = queue.SimpleQueue()

    @property
    def current(self) -> RuntimeSettings:
        return self._current

    def publish(self, settings: RuntimeSettings) -> None:
        self._pending.put(settings)

    def drain(self) -> RuntimeSettings:
        while True:
            try:
                self._current = self._pending.get_nowait()
            except queue.Empty:
                break
        return self._current


def bind_settings(runtime, config_path: Path) -> RuntimeConfig:
    """
    Load a settings file and push its overrides into ``runtime``.

    Returns:
        The parsed configuration
    """
    config = load_settings_file(config_path)
    runtime.configure(config.settings)
    return config
