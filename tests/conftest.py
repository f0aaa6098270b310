"""
Shared pytest fixtures for the session_trace test suite.

Provides fixtures for:
- Isolated storage/config directories
- An event factory producing raw camelCase event payloads
- Sample persisted sessions
"""

import itertools
from pathlib import Path
from typing import Any

import pytest


class EventFactory:
    """Builds raw event payloads with sequential ids and timestamps."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    def _base(self, kind: str, **fields: Any) -> dict[str, Any]:
        n = next(self._ids)
        event = {"id": f"e{n}", "kind": kind, "timestamp": f"2025-01-01T00:00:{n:02d}+00:00"}
        event.update({key: value for key, value in fields.items() if value is not None})
        return event

    def start(self, call_id: str, tool: str, parent: str | None = None, input: Any = None) -> dict[str, Any]:
        return self._base("call_start", callId=call_id, toolName=tool, parentCallId=parent, input=input)

    def result(self, call_id: str, output: str | None = None, error: str | None = None) -> dict[str, Any]:
        return self._base("call_result", callId=call_id, output=output, error=error)

    def agent_start(self, call_id: str, agent_type: str | None = None) -> dict[str, Any]:
        return self._base("agent_start", callId=call_id, agentType=agent_type)

    def agent_end(self, call_id: str, output: str | None = None, error: str | None = None) -> dict[str, Any]:
        return self._base("agent_end", callId=call_id, output=output, error=error)

    def thinking(self, content: str) -> dict[str, Any]:
        return self._base("thinking", content=content)

    def context(self, category: str, name: str) -> dict[str, Any]:
        return self._base("context", contextCategory=category, contextName=name)

    def todos(self, items: list[dict[str, Any]], scope: str = "") -> dict[str, Any]:
        return self._base("todo_update", scopeId=scope, todos=items)


@pytest.fixture
def events() -> EventFactory:
    """Fresh event factory (ids restart at e1 for each test)."""
    return EventFactory()


@pytest.fixture
def mock_storage_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point SESSION_TRACE_HOME at a temporary directory."""
    home = tmp_path / "session_trace_home"
    monkeypatch.setenv("SESSION_TRACE_HOME", str(home))
    monkeypatch.delenv("SESSION_TRACE_CONFIG_DIR", raising=False)
    for name in ("LOG_LEVEL", "MAX_OUTPUT_LENGTH", "INPUT_SUMMARY_LENGTH", "MAX_STEPS_PER_AGENT"):
        monkeypatch.delenv(f"SESSION_TRACE_{name}", raising=False)
    return home.resolve()


@pytest.fixture
def sample_session_data() -> dict[str, Any]:
    """A two-turn session in the persisted (legacy) format."""
    return {
        "id": "sess-1",
        "name": "Refactor parser",
        "messages": [
            {
                "role": "user",
                "content": "Find the parser bugs",
                "timestamp": "2025-01-01T00:00:00+00:00",
            },
            {
                "role": "assistant",
                "content": "Found three issues.",
                "timestamp": "2025-01-01T00:01:00+00:00",
                "executionEvents": [
                    {
                        "id": "ev-1",
                        "type": "thinking",
                        "timestamp": "2025-01-01T00:00:01+00:00",
                        "thinkingContent": "Delegate the search",
                    },
                    {
                        "id": "ev-2",
                        "type": "tool_use",
                        "timestamp": "2025-01-01T00:00:02+00:00",
                        "toolName": "Task",
                        "toolUseId": "task-1",
                        "toolInput": {"subagent_type": "explorer", "prompt": "Look for parser bugs"},
                    },
                    {
                        "id": "ev-3",
                        "type": "tool_use",
                        "timestamp": "2025-01-01T00:00:03+00:00",
                        "toolName": "Grep",
                        "toolUseId": "grep-1",
                        "parentToolUseId": "task-1",
                        "toolInput": {"pattern": "def parse"},
                    },
                    {
                        "id": "ev-4",
                        "type": "tool_result",
                        "timestamp": "2025-01-01T00:00:04+00:00",
                        "toolUseId": "grep-1",
                        "toolOutput": "3 matches",
                    },
                    {
                        "id": "ev-5",
                        "type": "context",
                        "timestamp": "2025-01-01T00:00:05+00:00",
                        "contextType": "skill",
                        "contextName": "python-style",
                    },
                    {
                        "id": "ev-6",
                        "type": "tool_result",
                        "timestamp": "2025-01-01T00:00:06+00:00",
                        "toolUseId": "task-1",
                        "toolOutput": "three issues",
                    },
                ],
                "contextSnapshot": {"mcpServers": ["github"], "rules": ["no-print"], "skills": ["python-style"]},
            },
        ],
        "agents": [{"id": "agent-1", "type": "explorer", "status": "completed", "toolUseId": "task-1"}],
    }
