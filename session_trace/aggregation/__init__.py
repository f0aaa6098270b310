"""Event aggregation: taxonomy, stateful components and the two drivers.

Public Interface:
    - reconstruct_session / reconstruct_events: batch entry points
    - LiveAggregator: incremental entry point
    - SessionState: the shared reducer both drivers run on
    - ToolCallTracker, AgentHierarchyBuilder, TodoScopeManager, ContextRegistry
"""

from .context import ContextRegistry
from .errors import DuplicateStartError
from .errors import MalformedEventError
from .errors import SelfParentingError
from .errors import TraceError
from .errors import UnresolvedReferenceError
from .hierarchy import AgentHierarchyBuilder
from .live import LiveAggregator
from .reconstructor import reconstruct_events
from .reconstructor import reconstruct_session
from .state import SessionState
from .taxonomy import EventCategory
from .taxonomy import classify_call
from .taxonomy import classify_event
from .todos import TodoScopeManager
from .tool_calls import ToolCallTracker

__all__ = [
    "AgentHierarchyBuilder",
    "ContextRegistry",
    "DuplicateStartError",
    "EventCategory",
    "LiveAggregator",
    "MalformedEventError",
    "SelfParentingError",
    "SessionState",
    "TodoScopeManager",
    "ToolCallTracker",
    "TraceError",
    "UnresolvedReferenceError",
    "classify_call",
    "classify_event",
    "reconstruct_events",
    "reconstruct_session",
]
