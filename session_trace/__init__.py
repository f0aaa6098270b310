"""Session trace library.

Rebuilds a consistent hierarchical view of a multi-agent tool-use session
from its execution events, either live (one event at a time) or in batch
(from a persisted history). Both paths converge on the same final view.

Public Interface:
    Modules:
    - models: Inbound events and outbound view models
    - aggregation: Taxonomy, stateful components, batch and live drivers
    - config: Settings loading
    - storage: Persisted history readers
"""

from .aggregation import LiveAggregator
from .aggregation import SessionState
from .aggregation import reconstruct_events
from .aggregation import reconstruct_session
from .config import TraceSettings
from .models import ExecutionEvent
from .models import PersistedSession
from .models import ReconstructedView

__all__ = [
    "ExecutionEvent",
    "LiveAggregator",
    "PersistedSession",
    "ReconstructedView",
    "SessionState",
    "TraceSettings",
    "reconstruct_events",
    "reconstruct_session",
]
