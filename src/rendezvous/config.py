"""Configuration management for the rendezvous relay."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml


@dataclass
class StoreConfig:
    """Pairing store bounds."""

    capacity: int = 1000  # max live sessions
    ttl_seconds: float = 600.0


@dataclass
class Config:
    """Relay configuration."""

    port: int = 3000
    bind_address: str = "127.0.0.1"
    log_level: str = "INFO"
    log_file: str | None = None
    debug_endpoint: bool = True
    store: StoreConfig = field(default_factory=StoreConfig)


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "rendezvous" / "config.yaml"


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader that loads YAML from disk."""
    if not path.exists():
        return None
    try:
        content = path.read_text()
        if not content.strip():
            return None
        return yaml.safe_load(content)
    except yaml.YAMLError:
        return None


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
) -> Config:
    """Load configuration from file.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.

    Returns:
        Config object with values from file or defaults.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader

    data = reader(config_path)

    if not isinstance(data, dict):
        return Config()

    store_data = data.get("store") or {}
    store_config = StoreConfig(
        capacity=int(store_data.get("capacity", StoreConfig.capacity)),
        ttl_seconds=float(store_data.get("ttl_seconds", StoreConfig.ttl_seconds)),
    )

    return Config(
        port=int(data.get("port", Config.port)),
        bind_address=data.get("bind_address", Config.bind_address),
        log_level=data.get("log_level", Config.log_level),
        log_file=data.get("log_file", Config.log_file),
        debug_endpoint=bool(data.get("debug_endpoint", Config.debug_endpoint)),
        store=store_config,
    )
