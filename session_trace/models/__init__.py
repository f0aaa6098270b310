"""Models for session_trace."""

from .events import CALL_KINDS
from .events import ContextCategory
from .events import ContextSnapshot
from .events import EventKind
from .events import ExecutionEvent
from .events import PersistedAgent
from .events import PersistedMessage
from .events import PersistedSession
from .events import TodoItem
from .events import TodoStatus
from .trace import AgentStep
from .trace import CallCategory
from .trace import CallStatus
from .trace import ContextState
from .trace import Diagnostic
from .trace import DiagnosticKind
from .trace import EntryKind
from .trace import LogEntry
from .trace import ReconstructedView
from .trace import ScopedTodos
from .trace import ToolCall
from .trace import ToolUsageSummary

__all__ = [
    "CALL_KINDS",
    "AgentStep",
    "CallCategory",
    "CallStatus",
    "ContextCategory",
    "ContextSnapshot",
    "ContextState",
    "Diagnostic",
    "DiagnosticKind",
    "EntryKind",
    "EventKind",
    "ExecutionEvent",
    "LogEntry",
    "PersistedAgent",
    "PersistedMessage",
    "PersistedSession",
    "ReconstructedView",
    "ScopedTodos",
    "TodoItem",
    "TodoStatus",
    "ToolCall",
    "ToolUsageSummary",
]
