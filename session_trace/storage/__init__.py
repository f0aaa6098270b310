"""Storage helpers: path resolution and persisted history readers."""

from .history import load_session
from .history import read_events_jsonl
from .paths import get_config_dir

__all__ = [
    "get_config_dir",
    "load_session",
    "read_events_jsonl",
]
