"""Configuration loading for session trace aggregation.

This module handles loading settings from a YAML file and environment
variables.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: TraceSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import TraceSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "SESSION_TRACE_"

DEFAULT_CONFIG = """# session-trace configuration
# Environment variables prefixed with SESSION_TRACE_ override these values

log_level: "info"

# Truncate call outputs beyond this many characters (null disables)
max_output_length: 10000

# Maximum length of the short input summary shown for each step
input_summary_length: 40

# Render at most this many recent steps per agent (null = all)
# max_steps_per_agent: 200
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to session-trace.yaml in config directory

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "session-trace.yaml"
    """
    return get_config_dir() / "session-trace.yaml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file if it doesn't exist."""
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None) -> TraceSettings:
    """Load settings from YAML and environment.

    Precedence: defaults < YAML < environment variables
    (e.g., SESSION_TRACE_MAX_OUTPUT_LENGTH).

    Args:
        config_path: Optional config file path (default: session-trace.yaml in config dir)

    Returns:
        Validated settings
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        create_default_config(config_path)

    yaml_settings = {}
    try:
        with open(config_path, encoding="utf-8") as f:
            yaml_settings = yaml.safe_load(f) or {}
        logger.debug(f"Loaded config from {config_path}")
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.info("Using default settings and environment variables")

    if not isinstance(yaml_settings, dict):
        logger.warning(f"Ignoring config {config_path}: expected a mapping")
        yaml_settings = {}

    # Only pass YAML values that don't have corresponding env vars
    filtered_yaml = {
        key: value for key, value in yaml_settings.items() if f"{ENV_PREFIX}{str(key).upper()}" not in os.environ
    }

    settings = TraceSettings(**filtered_yaml)

    logger.debug(
        f"Trace configuration loaded: max_output_length={settings.max_output_length}, "
        f"max_steps_per_agent={settings.max_steps_per_agent}"
    )

    return settings
