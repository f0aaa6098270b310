"""Inbound models: execution events and persisted session history.

Events are produced by an external orchestrator, either pushed live or read
back from a persisted session. Two wire shapes are accepted:

- the current shape (``kind`` / ``callId`` / ``parentCallId`` ...)
- the legacy persisted shape (``type`` / ``toolUseId`` / ``parentToolUseId`` ...)

Both are normalised into the same frozen ``ExecutionEvent``.
"""

import copy
from enum import Enum
from typing import Any

from pydantic import AliasChoices
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

from .base import CamelCaseModel


class EventKind(str, Enum):
    """Discriminator for execution events."""

    THINKING = "thinking"
    CALL_START = "call_start"
    CALL_RESULT = "call_result"
    CONTEXT = "context"
    AGENT_START = "agent_start"
    AGENT_END = "agent_end"
    TODO_UPDATE = "todo_update"


class ContextCategory(str, Enum):
    """Kinds of contextual resources that can be announced."""

    EXTERNAL_SERVICE = "external_service"
    RULE = "rule"
    SKILL = "skill"


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Event kinds that must reference a call identifier
CALL_KINDS = frozenset({EventKind.CALL_START, EventKind.CALL_RESULT, EventKind.AGENT_START, EventKind.AGENT_END})

_LEGACY_KINDS = {
    "tool_use": EventKind.CALL_START.value,
    "tool_result": EventKind.CALL_RESULT.value,
}

_LEGACY_KEYS = {
    "toolUseId": "callId",
    "toolInput": "input",
    "toolOutput": "output",
    "thinkingContent": "content",
    "contextType": "contextCategory",
    "agentError": "error",
}

_CATEGORY_ALIASES = {
    "mcp": ContextCategory.EXTERNAL_SERVICE.value,
    "external-service": ContextCategory.EXTERNAL_SERVICE.value,
}


def _normalize_legacy_event(data: dict[str, Any]) -> dict[str, Any]:
    """Map the legacy persisted event shape onto the current field names.

    Args:
        data: Raw event dict using ``type`` instead of ``kind``

    Returns:
        New dict using current field names (input is not mutated)
    """
    legacy_type = data.get("type")
    result = {key: value for key, value in data.items() if key != "type"}
    # Non-string types pass through and fail ordinary enum validation
    result["kind"] = _LEGACY_KINDS.get(legacy_type, legacy_type) if isinstance(legacy_type, str) else legacy_type

    for old_key, new_key in _LEGACY_KEYS.items():
        if old_key in result:
            value = result.pop(old_key)
            result.setdefault(new_key, value)

    # Legacy todo updates are scoped by the enclosing agent call
    parent = result.pop("parentToolUseId", None)
    if parent is not None:
        if result["kind"] == EventKind.TODO_UPDATE.value:
            result.setdefault("scopeId", parent)
        else:
            result.setdefault("parentCallId", parent)

    if result.get("agentStatus") == "failed":
        result["isError"] = True
    result.pop("agentStatus", None)

    return result


class TodoItem(CamelCaseModel):
    """Single item of a todo list."""

    content: str
    status: TodoStatus = TodoStatus.PENDING
    active_form: str | None = None


class ExecutionEvent(CamelCaseModel):
    """One atomic, timestamped fact emitted during an agent session.

    Immutable once parsed. Field requirements depend on ``kind``:

    - call_start: ``call_id`` and ``tool_name``
    - call_result, agent_start, agent_end: ``call_id``
    - context: ``context_category`` and ``context_name``
    - thinking: non-empty ``content``
    - todo_update: ``todos`` (an empty list is a valid replacement)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    kind: EventKind
    timestamp: str
    call_id: str | None = None
    parent_call_id: str | None = None
    tool_name: str | None = None
    input: Any = None
    output: str | None = None
    error: str | None = None
    is_error: bool = False
    content: str | None = None
    agent_type: str | None = None
    context_category: ContextCategory | None = None
    context_name: str | None = None
    context_detail: Any = None
    scope_id: str | None = None
    todos: list[TodoItem] | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_shape(cls, data: Any) -> Any:
        """Accept the legacy persisted shape (``type`` key) as well."""
        if isinstance(data, dict) and "kind" not in data and "type" in data:
            return _normalize_legacy_event(data)
        return data

    @field_validator("context_category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _CATEGORY_ALIASES.get(value, value)
        return value

    @field_validator("input", "context_detail")
    @classmethod
    def take_ownership(cls, value: Any) -> Any:
        # The event keeps a private copy of caller payloads
        return copy.deepcopy(value)

    @field_validator("output", mode="before")
    @classmethod
    def stringify_output(cls, value: Any) -> Any:
        # Tool results are sometimes persisted as structured content
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @model_validator(mode="after")
    def check_required_fields(self) -> "ExecutionEvent":
        """Reject events missing the fields their kind requires."""
        missing: list[str] = []

        if self.kind in CALL_KINDS and not self.call_id:
            missing.append("callId")
        if self.kind == EventKind.CALL_START and not self.tool_name:
            missing.append("toolName")
        if self.kind == EventKind.CONTEXT:
            if self.context_category is None:
                missing.append("contextCategory")
            if not self.context_name:
                missing.append("contextName")
        if self.kind == EventKind.THINKING and not self.content:
            missing.append("content")
        if self.kind == EventKind.TODO_UPDATE and self.todos is None:
            missing.append("todos")

        if missing:
            raise ValueError(f"{self.kind.value} event missing required fields: {', '.join(missing)}")
        return self

    @property
    def has_error(self) -> bool:
        """Whether this result or agent_end reports a failure."""
        return self.is_error or bool(self.error)


class ContextSnapshot(CamelCaseModel):
    """Point-in-time summary of loaded context carried by a persisted message."""

    external_services: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("externalServices", "external_services", "mcpServers"),
        serialization_alias="externalServices",
    )
    rules: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)


class PersistedMessage(CamelCaseModel):
    """One message of a persisted session.

    Events are kept as raw payloads so that a single malformed event is
    reported by the reducer instead of invalidating the whole message.
    """

    role: str = Field(description="Message role: user, assistant, or system")
    content: str = ""
    timestamp: str = ""
    events: list[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("events", "executionEvents", "execution_events"),
        serialization_alias="events",
    )
    context_snapshot: ContextSnapshot | None = None


class PersistedAgent(CamelCaseModel):
    """Sub-agent record stored alongside a persisted session."""

    id: str
    type: str | None = None
    task: str | None = None
    status: str = "pending"
    result: str | None = None
    error: str | None = None
    tool_use_id: str | None = None


class PersistedSession(CamelCaseModel):
    """Ordered message history of a session, as read back from storage."""

    id: str = ""
    name: str | None = None
    messages: list[PersistedMessage] = Field(default_factory=list)
    agents: list[PersistedAgent] = Field(default_factory=list)
