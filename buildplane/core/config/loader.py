"""
Configuration loader — reads build.yml into domain models.

This is the primary entry point for loading build configuration.
It reads YAML, validates against Pydantic schemas, and returns
typed domain objects.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from buildplane.core.errors import ConfigError
from buildplane.core.models.build import BuildConfig
from buildplane.core.models.platform import PlatformProfile

logger = logging.getLogger(__name__)

# Default config filename
BUILD_CONFIG_FILE = "build.yml"

__all__ = [
    "BUILD_CONFIG_FILE",
    "ConfigError",
    "build_root",
    "find_build_file",
    "load_build_config",
    "resolve_platform",
]


def find_build_file(start_dir: Path | None = None) -> Path | None:
    """Search for build.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to build.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_build_config(path: Path | None = None) -> BuildConfig:
    """Load and validate build configuration.

    Args:
        path: Explicit path to build.yml. If None, searches upward.

    Returns:
        Validated BuildConfig model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_build_file()

    if path is None:
        raise ConfigError(f"No {BUILD_CONFIG_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration: {e}") from e

    logger.info(
        "Loaded build of '%s' for %s with %d components",
        config.project.name,
        config.platform,
        len(config.components),
    )
    return config


def resolve_platform(config: BuildConfig) -> PlatformProfile:
    """Catalog profile for ``config.platform`` with overrides applied."""
    from buildplane.core.services.pipeline.platforms import apply_overrides, get_platform

    return apply_overrides(get_platform(config.platform), config.overrides)


def build_root(config_path: Path) -> Path:
    """Get the build root directory from a config file path."""
    return config_path.parent.resolve()
