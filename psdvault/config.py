"""psdvault configuration.

Defaults are overridden by an optional YAML file and then by environment.

Config file (``psdvault.yaml`` in the scanned root, or ``--config``)::

    ignore:               # extra literal names, added to the defaults
      - exports
    archive_extension: .7z
    archive_format: 7z    # value passed to 7-Zip's -t switch
    compression_level: 9
    seven_zip: /usr/bin/7za
    tool_timeout: 600
    wait_attempts: 5
    wait_interval: 1.0
    max_image_pixels: 1000000000  # 0 disables the preview size ceiling

Environment Variables:
    PSDVAULT_7Z_PATH: 7-Zip binary (default: "7za")
    PSDVAULT_WAIT_ATTEMPTS: Durability re-checks before giving up
    PSDVAULT_WAIT_INTERVAL: Seconds between durability re-checks
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from psdvault.models import ConfigError
from psdvault.paths import ARCHIVE_EXT, ASSET_EXT, PREVIEW_EXT

CONFIG_FILENAME = "psdvault.yaml"

DEFAULT_IGNORE = frozenset({
    ".git",
    ".gitignore",
    ".venv",
    "__pycache__",
    "node_modules",
    "npm-debug.log",
    "package.json",
    "pyproject.toml",
    "README.md",
    CONFIG_FILENAME,
})


@dataclass(frozen=True)
class VaultConfig:
    """Settings for one traversal."""
    asset_extension: str = ASSET_EXT
    archive_extension: str = ARCHIVE_EXT
    preview_extension: str = PREVIEW_EXT
    ignore: frozenset = field(default_factory=lambda: DEFAULT_IGNORE)
    seven_zip: str = "7za"
    archive_format: str = "7z"
    compression_level: int = 9
    tool_timeout: int = 600
    wait_attempts: int = 5
    wait_interval: float = 1.0
    max_image_pixels: int = 1_000_000_000

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_extension": self.asset_extension,
            "archive_extension": self.archive_extension,
            "preview_extension": self.preview_extension,
            "ignore": sorted(self.ignore),
            "seven_zip": self.seven_zip,
            "archive_format": self.archive_format,
            "compression_level": self.compression_level,
            "tool_timeout": self.tool_timeout,
            "wait_attempts": self.wait_attempts,
            "wait_interval": self.wait_interval,
            "max_image_pixels": self.max_image_pixels,
        }


# Scalar keys accepted from YAML, with the type each must coerce to
_SCALAR_KEYS = {
    "archive_extension": str,
    "archive_format": str,
    "compression_level": int,
    "seven_zip": str,
    "tool_timeout": int,
    "wait_attempts": int,
    "wait_interval": float,
    "max_image_pixels": int,
}


def _load_yaml(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def _coerce(key: str, value: Any, source: str) -> Any:
    kind = _SCALAR_KEYS[key]
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{source}: {key} must be {kind.__name__}, got {value!r}") from e


def _apply_file(config: VaultConfig, path: Path) -> VaultConfig:
    data = _load_yaml(path)
    unknown = set(data) - set(_SCALAR_KEYS) - {"ignore"}
    if unknown:
        raise ConfigError(f"{path}: unknown keys {sorted(unknown)}")

    updates: dict[str, Any] = {}
    for key in _SCALAR_KEYS:
        if key in data:
            updates[key] = _coerce(key, data[key], str(path))

    extra = data.get("ignore") or []
    if not isinstance(extra, list) or not all(isinstance(n, str) for n in extra):
        raise ConfigError(f"{path}: ignore must be a list of names")
    if extra:
        updates["ignore"] = config.ignore | frozenset(extra)

    archive_ext = updates.get("archive_extension")
    if archive_ext is not None:
        if not archive_ext.startswith("."):
            archive_ext = "." + archive_ext
        updates["archive_extension"] = archive_ext.lower()

    return replace(config, **updates)


def _apply_env(config: VaultConfig) -> VaultConfig:
    updates: dict[str, Any] = {}
    seven_zip = os.getenv("PSDVAULT_7Z_PATH")
    if seven_zip:
        updates["seven_zip"] = seven_zip
    attempts = os.getenv("PSDVAULT_WAIT_ATTEMPTS")
    if attempts:
        updates["wait_attempts"] = _coerce("wait_attempts", attempts, "PSDVAULT_WAIT_ATTEMPTS")
    interval = os.getenv("PSDVAULT_WAIT_INTERVAL")
    if interval:
        updates["wait_interval"] = _coerce("wait_interval", interval, "PSDVAULT_WAIT_INTERVAL")
    return replace(config, **updates) if updates else config


def load_config(root: Optional[Path] = None, path: Optional[Path] = None) -> VaultConfig:
    """Build the effective configuration for a traversal of ``root``.

    Args:
        root: Directory being scanned; ``root/psdvault.yaml`` is read if present
        path: Explicit config file; must exist when given

    Returns:
        VaultConfig with file and environment overrides applied

    Raises:
        ConfigError: If the file is missing, malformed, or has bad values
    """
    config = VaultConfig()

    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        config = _apply_file(config, path)
    elif root is not None and (Path(root) / CONFIG_FILENAME).is_file():
        config = _apply_file(config, Path(root) / CONFIG_FILENAME)

    config = _apply_env(config)

    if config.wait_attempts < 0:
        raise ConfigError("wait_attempts must not be negative")
    if config.wait_interval < 0:
        raise ConfigError("wait_interval must not be negative")
    if config.max_image_pixels < 0:
        raise ConfigError("max_image_pixels must not be negative")
    return config
