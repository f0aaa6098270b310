"""Incremental rendering of session state into view objects.

Rendering a call means copying it out of the tracker and, for sub-agents,
attaching its step list and private todos. Only calls touched since the
previous view are rendered again, together with the agents above them, so
producing a view after each event costs O(depth) renders rather than a
pass over the whole session.

Rendered objects are never modified once built. A change produces new copies
along the affected lineage, so views handed out earlier keep their contents
and consecutive views share everything that did not change.
"""

import logging
from collections import Counter
from typing import cast

from ..models.trace import AgentStep
from ..models.trace import LogEntry
from ..models.trace import ToolCall
from ..models.trace import ToolUsageSummary
from .hierarchy import AgentHierarchyBuilder
from .todos import TodoScopeManager
from .tool_calls import ToolCallTracker

logger = logging.getLogger(__name__)


class ViewCache:
    """Rendered timeline, tool history and step lists of one session.

    Example:
        >>> cache = ViewCache(tracker, hierarchy, todos)
        >>> cache.add_call(call)
        >>> cache.refresh()
        >>> cache.history()[0].call_id == call.call_id
        True
    """

    def __init__(
        self: "ViewCache",
        tracker: ToolCallTracker,
        hierarchy: AgentHierarchyBuilder,
        todos: TodoScopeManager,
    ) -> None:
        self._tracker = tracker
        self._hierarchy = hierarchy
        self._todos = todos

        self._entries: list[LogEntry] = []
        self._entry_positions: dict[str, int] = {}
        # Slots are reserved at registration and filled by the next refresh
        self._history: list[ToolCall | None] = []
        self._history_positions: dict[str, int] = {}
        self._child_steps: dict[str, list[AgentStep | None]] = {}
        self._step_positions: dict[str, int] = {}

        self._tools: dict[str, None] = {}
        self._categories: Counter[str] = Counter()
        self._families: Counter[str] = Counter()

        self._dirty: set[str] = set()

    def add_call(self: "ViewCache", call: ToolCall) -> None:
        """Reserve history and step slots for a call that was just placed."""
        self._history_positions[call.call_id] = len(self._history)
        self._history.append(None)

        parent_id = self._hierarchy.parent(call.call_id)
        if parent_id is not None:
            siblings = self._child_steps.setdefault(parent_id, [])
            self._step_positions[call.call_id] = len(siblings)
            siblings.append(None)

        self._tools[call.name] = None
        self.touch(call.call_id)

    def add_entry(self: "ViewCache", entry: LogEntry, call_id: str | None = None) -> None:
        """Append a timeline entry; call entries are rendered from the call."""
        if call_id is not None:
            self._entry_positions[call_id] = len(self._entries)
            self.touch(call_id)
        self._entries.append(entry)

    def touch(self: "ViewCache", call_id: str) -> None:
        """Mark a call and every agent above it for re-rendering."""
        self._dirty.update(self._hierarchy.lineage(call_id))

    def refresh(self: "ViewCache") -> None:
        """Re-render every call touched since the last refresh."""
        if not self._dirty:
            return
        # Deepest first: an agent's steps embed the freshly rendered steps of its children
        for call_id in sorted(self._dirty, key=self._hierarchy.depth, reverse=True):
            self._render(call_id)
        logger.debug(f"Re-rendered {len(self._dirty)} calls")
        self._dirty.clear()

    def entries(self: "ViewCache") -> list[LogEntry]:
        return list(self._entries)

    def history(self: "ViewCache") -> list[ToolCall]:
        return cast(list[ToolCall], list(self._history))

    def usage(self: "ViewCache") -> ToolUsageSummary:
        """Counts over the rendered tool history."""
        return ToolUsageSummary(
            total=len(self._history),
            tools=list(self._tools),
            by_category={name: count for name, count in sorted(self._categories.items()) if count},
            by_family={name: count for name, count in sorted(self._families.items()) if count},
        )

    def _render(self: "ViewCache", call_id: str) -> None:
        call = self._tracker.get(call_id)
        if call is None:
            raise KeyError(call_id)

        rendered = call.model_copy(deep=True)
        if rendered.is_agent:
            children = cast(list[AgentStep], self._child_steps.get(call_id, []))
            rendered.steps, rendered.omitted_steps = self._hierarchy.visible_steps(children)
            rendered.todos = self._todos.scope(call_id)

        position = self._history_positions[call_id]
        previous = self._history[position]
        if previous is not None:
            self._categories[previous.category.value] -= 1
            self._families[previous.family] -= 1
        self._categories[rendered.category.value] += 1
        self._families[rendered.family] += 1
        self._history[position] = rendered

        entry_position = self._entry_positions.get(call_id)
        if entry_position is not None:
            self._entries[entry_position] = self._entries[entry_position].model_copy(update={"call": rendered})

        step_position = self._step_positions.get(call_id)
        parent_id = self._hierarchy.parent(call_id)
        if step_position is not None and parent_id is not None:
            self._child_steps[parent_id][step_position] = AgentStep(
                call_id=rendered.call_id,
                tool=rendered.name,
                input=rendered.input_summary,
                timestamp=rendered.started_at,
                status=rendered.status,
                output=rendered.output,
                error=rendered.error,
                steps=rendered.steps,
            )
