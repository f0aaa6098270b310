"""Unit tests for incremental view rendering."""

import pytest

from session_trace.aggregation.hierarchy import AgentHierarchyBuilder
from session_trace.aggregation.rendering import ViewCache
from session_trace.aggregation.todos import TodoScopeManager
from session_trace.aggregation.tool_calls import ToolCallTracker
from session_trace.models import CallStatus
from session_trace.models import EntryKind
from session_trace.models import ExecutionEvent
from session_trace.models import LogEntry
from session_trace.models import TodoItem


class _Session:
    """Tracker, hierarchy and cache wired together the way the reducer wires them."""

    def __init__(self, events, max_steps: int | None = None) -> None:
        self.events = events
        self.tracker = ToolCallTracker()
        self.hierarchy = AgentHierarchyBuilder(max_steps_per_agent=max_steps)
        self.todos = TodoScopeManager()
        self.cache = ViewCache(self.tracker, self.hierarchy, self.todos)

    def start(self, call_id: str, tool: str, parent: str | None = None) -> None:
        event = ExecutionEvent.model_validate(self.events.start(call_id, tool, parent=parent))
        call = self.tracker.register_start(event)
        placement = self.hierarchy.attach(call, self.tracker, event_id=event.id)
        self.cache.add_call(call)
        if placement.top_level:
            self.cache.add_entry(LogEntry(id=event.id, kind=EntryKind.TOOL), call_id=call_id)

    def result(self, call_id: str, output: str) -> None:
        event = ExecutionEvent.model_validate(self.events.result(call_id, output=output))
        self.cache.touch(self.tracker.resolve(event).call_id)

    def history(self):
        self.cache.refresh()
        return self.cache.history()


@pytest.mark.unit
class TestViewCache:
    """Test rendering and re-rendering of calls."""

    def test_nested_steps(self, events) -> None:
        session = _Session(events)
        session.start("A", "Task")
        session.start("B", "Task", parent="A")
        session.start("C", "Grep", parent="B")
        session.result("C", "3 matches")

        agent = session.history()[0]

        assert [step.call_id for step in agent.steps] == ["B"]
        nested = agent.steps[0].steps[0]
        assert nested.call_id == "C"
        assert nested.tool == "Grep"
        assert nested.status == CallStatus.COMPLETED
        assert nested.output == "3 matches"

    def test_only_touched_lineage_is_rendered_again(self, events) -> None:
        session = _Session(events)
        session.start("1", "Read")
        session.start("A", "Task")
        session.start("B", "Grep", parent="A")
        before = session.history()

        session.result("B", "done")
        after = session.history()

        assert after[0] is before[0]
        assert after[1] is not before[1]
        assert after[2] is not before[2]
        assert before[2].status == CallStatus.RUNNING
        assert after[2].status == CallStatus.COMPLETED

    def test_entries_follow_their_call(self, events) -> None:
        session = _Session(events)
        session.start("1", "Read")
        session.cache.refresh()
        first = session.cache.entries()[0]

        session.result("1", "ok")
        session.cache.refresh()
        second = session.cache.entries()[0]

        assert first.call.status == CallStatus.RUNNING
        assert second.call.status == CallStatus.COMPLETED
        assert second.call is session.cache.history()[0]

    def test_step_cap(self, events) -> None:
        session = _Session(events, max_steps=2)
        session.start("1", "Task")
        for n in range(5):
            session.start(f"s{n}", "Read", parent="1")

        agent = session.history()[0]

        assert [step.call_id for step in agent.steps] == ["s3", "s4"]
        assert agent.omitted_steps == 3

    def test_agent_todos_rendered_on_touch(self, events) -> None:
        session = _Session(events)
        session.start("A", "Task")
        session.history()

        session.todos.apply("A", [TodoItem(content="dig")])
        session.cache.touch("A")

        assert [item.content for item in session.history()[0].todos] == ["dig"]

    def test_usage_tracks_category_changes(self, events) -> None:
        session = _Session(events)
        session.start("1", "Read")
        session.start("2", "Custom")
        session.history()

        event = ExecutionEvent.model_validate(events.agent_start("2", agent_type="helper"))
        session.cache.touch(session.tracker.annotate_agent(event).call_id)
        session.cache.refresh()
        usage = session.cache.usage()

        assert usage.total == 2
        assert usage.tools == ["Read", "Custom"]
        assert usage.by_category == {"agent": 1, "tool": 1}

    def test_deep_chain_renders_without_recursion(self, events) -> None:
        session = _Session(events)
        session.start("0", "Task")
        for n in range(1, 1500):
            session.start(str(n), "Task", parent=str(n - 1))

        step = session.history()[0].steps[0]
        depth = 1
        while step.steps:
            step = step.steps[0]
            depth += 1

        assert depth == 1499
        assert step.call_id == "1499"
