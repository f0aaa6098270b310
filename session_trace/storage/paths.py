"""Where session-trace keeps its configuration.

Everything lives under ``$SESSION_TRACE_HOME`` (default ``.session_trace``
in the working directory). ``SESSION_TRACE_CONFIG_DIR`` relocates just the
config directory, e.g. to share one config between several homes.
"""

import os
from pathlib import Path

DEFAULT_HOME = ".session_trace"


def get_config_dir() -> Path:
    """Resolve the config directory, creating it on first use.

    Returns:
        ``$SESSION_TRACE_CONFIG_DIR`` if set, else ``$SESSION_TRACE_HOME/config``
    """
    override = os.environ.get("SESSION_TRACE_CONFIG_DIR")
    if override is not None:
        config_dir = Path(override).resolve()
    else:
        config_dir = Path(os.environ.get("SESSION_TRACE_HOME", DEFAULT_HOME)).resolve() / "config"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
