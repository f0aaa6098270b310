"""Outbound models: the reconstructed session view.

These models are populated by the aggregation reducer and consumed by the
rendering layer. Views are read-only snapshots: later events never change a
view already handed out, and consecutive views share unchanged parts.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from .base import CamelCaseModel
from .events import ContextCategory
from .events import TodoItem


class CallCategory(str, Enum):
    """Semantic category of a tool invocation."""

    TOOL = "tool"
    AGENT = "agent"
    SKILL = "skill"
    COMMAND = "command"
    EXTERNAL_SERVICE = "external_service"


class CallStatus(str, Enum):
    """Call lifecycle status.

    State transitions:
    - RUNNING: call_start observed, no result yet
    - COMPLETED: result observed without error
    - FAILED: result or agent_end observed with an error
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class EntryKind(str, Enum):
    USER = "user"
    RESPONSE = "response"
    THINKING = "thinking"
    CONTEXT = "context"
    TOOL = "tool"


class DiagnosticKind(str, Enum):
    """Recoverable problems recorded while folding events."""

    UNRESOLVED_REFERENCE = "unresolved_reference"
    DUPLICATE_START = "duplicate_start"
    SELF_PARENTING = "self_parenting"
    ABANDONED_CALL = "abandoned_call"
    MALFORMED_EVENT = "malformed_event"


class AgentStep(CamelCaseModel):
    """A call nested under a sub-agent, as shown in the agent's step list."""

    call_id: str
    tool: str
    input: str | None = None
    timestamp: str = ""
    status: CallStatus = CallStatus.RUNNING
    output: str | None = None
    error: str | None = None
    steps: list["AgentStep"] = Field(default_factory=list)


class ToolCall(CamelCaseModel):
    """One invocation of a tool or delegated sub-agent."""

    call_id: str
    name: str
    category: CallCategory = CallCategory.TOOL
    family: str = "execution"
    input: Any = None
    input_summary: str | None = None
    output: str | None = None
    error: str | None = None
    status: CallStatus = CallStatus.RUNNING
    parent_call_id: str | None = None
    unresolved_parent: bool = False
    agent_type: str | None = None
    started_at: str = ""
    ended_at: str | None = None
    steps: list[AgentStep] = Field(default_factory=list)
    omitted_steps: int = 0
    todos: list[TodoItem] | None = None

    @property
    def is_agent(self) -> bool:
        return self.category == CallCategory.AGENT


class LogEntry(CamelCaseModel):
    """Top-level, user-facing line of the reconstructed timeline."""

    id: str
    kind: EntryKind
    content: str = ""
    timestamp: str = ""
    call: ToolCall | None = None
    context_category: ContextCategory | None = None
    context_name: str | None = None
    context_detail: Any = None


class ScopedTodos(CamelCaseModel):
    """Global todo list plus one private list per agent call."""

    global_: list[TodoItem] = Field(default_factory=list, alias="global")
    by_scope: dict[str, list[TodoItem]] = Field(default_factory=dict)


class ContextState(CamelCaseModel):
    """Distinct context resources loaded during the session, first-seen order."""

    external_services: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)


class ToolUsageSummary(CamelCaseModel):
    """Aggregate counts over the flat tool history, for summary panels."""

    total: int = 0
    tools: list[str] = Field(default_factory=list)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_family: dict[str, int] = Field(default_factory=dict)


class Diagnostic(CamelCaseModel):
    """A recoverable problem reported on the side channel."""

    kind: DiagnosticKind
    message: str
    event_id: str | None = None
    call_id: str | None = None


class ReconstructedView(CamelCaseModel):
    """Complete aggregate view of a session at one point in time."""

    entries: list[LogEntry] = Field(default_factory=list)
    todos: ScopedTodos = Field(default_factory=ScopedTodos)
    context: ContextState = Field(default_factory=ContextState)
    tool_history: list[ToolCall] = Field(default_factory=list)
    usage: ToolUsageSummary = Field(default_factory=ToolUsageSummary)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def find_call(self, call_id: str) -> ToolCall | None:
        """Look up a call in the flat tool history."""
        return next((call for call in self.tool_history if call.call_id == call_id), None)
