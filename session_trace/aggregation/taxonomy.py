"""Pure classification of events and tool names.

No state. Given an event kind and a tool identifier, decides which semantic
category the event belongs to and how a tool's input should be summarised
for display.
"""

from enum import Enum
from typing import Any

from ..models.events import EventKind
from ..models.trace import CallCategory

AGENT_TOOLS = frozenset({"Task"})
SKILL_TOOL = "Skill"
COMMAND_TOOLS = frozenset({"SlashCommand"})
TODO_TOOL = "TodoWrite"
EXTERNAL_SERVICE_PREFIX = "mcp__"
AGENT_PREFIX = "Agent:"

# Tool name -> display family
TOOL_FAMILIES: dict[str, str] = {
    "Read": "file-read",
    "Glob": "file-read",
    "Grep": "file-read",
    "Write": "file-write",
    "Edit": "file-write",
    "MultiEdit": "file-write",
    "NotebookEdit": "file-write",
    "Bash": "execution",
    "KillShell": "execution",
    "Task": "agent",
    "TaskOutput": "agent",
    "Skill": "skill",
    "SlashCommand": "skill",
    "TodoWrite": "planning",
    "EnterPlanMode": "planning",
    "ExitPlanMode": "planning",
    "AskUserQuestion": "interaction",
    "LSP": "navigation",
    "WebFetch": "navigation",
    "WebSearch": "navigation",
}
DEFAULT_FAMILY = "execution"

# Input fields tried in order when summarising a call for display
_SUMMARY_FIELDS = ("file_path", "path", "pattern", "command", "query", "prompt", "url", "description")


class EventCategory(str, Enum):
    """Semantic category of an event, independent of its wire kind."""

    TOOL = "tool"
    AGENT = "agent"
    SKILL = "skill"
    COMMAND = "command"
    EXTERNAL_SERVICE = "external_service"
    CONTEXT = "context"


def classify_call(tool_name: str, tool_input: Any = None) -> CallCategory:
    """Classify a tool invocation.

    The Skill tool runs both skills and slash-commands; commands are the
    ones whose ``skill`` input starts with ``/``.

    Args:
        tool_name: Name of the invoked tool
        tool_input: Raw tool input payload (opaque)

    Returns:
        Call category

    Example:
        >>> classify_call("Task")
        <CallCategory.AGENT: 'agent'>
        >>> classify_call("Skill", {"skill": "/docs"})
        <CallCategory.COMMAND: 'command'>
    """
    if tool_name in AGENT_TOOLS or tool_name.startswith(AGENT_PREFIX):
        return CallCategory.AGENT
    if tool_name.startswith(EXTERNAL_SERVICE_PREFIX):
        return CallCategory.EXTERNAL_SERVICE
    if tool_name in COMMAND_TOOLS:
        return CallCategory.COMMAND
    if tool_name == SKILL_TOOL:
        skill = tool_input.get("skill") if isinstance(tool_input, dict) else None
        if isinstance(skill, str) and skill.startswith("/"):
            return CallCategory.COMMAND
        return CallCategory.SKILL
    if "skill" in tool_name.lower():
        return CallCategory.SKILL
    return CallCategory.TOOL


def classify_event(
    kind: EventKind,
    tool_name: str | None = None,
    tool_input: Any = None,
) -> EventCategory | None:
    """Map an event to its semantic category.

    Args:
        kind: Declared event kind
        tool_name: Tool identifier for call-related events
        tool_input: Tool input for call-related events

    Returns:
        Semantic category, or None for kinds without one (thinking, todo_update)
    """
    if kind == EventKind.CONTEXT:
        return EventCategory.CONTEXT
    if kind in (EventKind.AGENT_START, EventKind.AGENT_END):
        return EventCategory.AGENT
    if kind in (EventKind.CALL_START, EventKind.CALL_RESULT):
        if not tool_name:
            return EventCategory.TOOL
        return EventCategory(classify_call(tool_name, tool_input).value)
    return None


def tool_family(tool_name: str) -> str:
    """Get the display family of a tool (file-read, execution, ...)."""
    if tool_name.startswith(EXTERNAL_SERVICE_PREFIX):
        return "external-service"
    if tool_name.startswith(AGENT_PREFIX):
        return "agent"
    base_name = tool_name.split("(")[0].strip()
    return TOOL_FAMILIES.get(base_name, DEFAULT_FAMILY)


def external_service_name(tool_name: str) -> str | None:
    """Extract the service name from an external-service tool name.

    Example:
        >>> external_service_name("mcp__github__create_issue")
        'github'
    """
    if not tool_name.startswith(EXTERNAL_SERVICE_PREFIX):
        return None
    parts = tool_name.split("__")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def summarize_input(tool_input: Any, max_length: int = 40) -> str | None:
    """Build a short display summary of a tool input.

    Uses the first string-valued field among the well-known ones. File
    paths are shortened to their last two segments.

    Args:
        tool_input: Raw tool input payload
        max_length: Maximum summary length

    Returns:
        Summary string, or None when nothing displayable is found
    """
    if not isinstance(tool_input, dict):
        return None

    for field in _SUMMARY_FIELDS:
        value = tool_input.get(field)
        if not isinstance(value, str) or not value:
            continue
        if field == "file_path":
            value = "/".join(value.split("/")[-2:])
        return value[:max_length]

    return None
