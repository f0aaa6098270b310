"""Placement of calls in the agent tree.

Every call either becomes a top-level timeline entry or a step nested under
the sub-agent call that spawned it. Nesting depth is unbounded; every walk
over the tree is iterative.
"""

import logging
from typing import NamedTuple
from typing import TypeVar

from ..models.trace import ToolCall
from .errors import SelfParentingError
from .errors import TraceError
from .errors import UnresolvedReferenceError
from .tool_calls import ToolCallTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Placement(NamedTuple):
    """Where a call ended up, plus any recoverable problem found on the way."""

    top_level: bool
    problem: TraceError | None = None


class AgentHierarchyBuilder:
    """Parent/child relations between calls of one session."""

    def __init__(self: "AgentHierarchyBuilder", max_steps_per_agent: int | None = None) -> None:
        self._children: dict[str, list[str]] = {}
        self._parents: dict[str, str] = {}
        self._depths: dict[str, int] = {}
        self.max_steps_per_agent = max_steps_per_agent

    def attach(self: "AgentHierarchyBuilder", call: ToolCall, tracker: ToolCallTracker, event_id: str | None = None) -> Placement:
        """Place a newly registered call.

        Orphaned calls (unknown parent, or a parent that is not a sub-agent)
        are surfaced top-level with ``unresolved_parent`` set rather than
        dropped. Self-parenting calls are treated as top-level.

        Args:
            call: Call just registered in the tracker
            tracker: Tracker holding all calls of the session
            event_id: Originating event, for diagnostics

        Returns:
            Placement of the call
        """
        parent_id = call.parent_call_id
        if not parent_id:
            return Placement(top_level=True)

        if parent_id == call.call_id:
            call.parent_call_id = None
            return Placement(
                top_level=True,
                problem=SelfParentingError(
                    f"Call {call.call_id} declares itself as parent; treated as top-level",
                    event_id=event_id,
                    call_id=call.call_id,
                ),
            )

        parent = tracker.get(parent_id)
        if parent is None or not parent.is_agent:
            call.unresolved_parent = True
            reason = "unknown" if parent is None else "non-agent"
            return Placement(
                top_level=True,
                problem=UnresolvedReferenceError(
                    f"Call {call.call_id} has {reason} parent {parent_id}; surfaced as top-level",
                    event_id=event_id,
                    call_id=call.call_id,
                ),
            )

        self._children.setdefault(parent_id, []).append(call.call_id)
        self._parents[call.call_id] = parent_id
        self._depths[call.call_id] = self.depth(parent_id) + 1
        logger.debug(f"Nested call {call.call_id} under agent {parent_id}")
        return Placement(top_level=False)

    def children(self: "AgentHierarchyBuilder", call_id: str) -> list[str]:
        """Direct child call ids of an agent, in emission order."""
        return list(self._children.get(call_id, []))

    def parent(self: "AgentHierarchyBuilder", call_id: str) -> str | None:
        """Agent the call is nested under, or None for top-level calls."""
        return self._parents.get(call_id)

    def depth(self: "AgentHierarchyBuilder", call_id: str) -> int:
        """Nesting depth (0 for top-level calls)."""
        return self._depths.get(call_id, 0)

    def lineage(self: "AgentHierarchyBuilder", call_id: str) -> list[str]:
        """The call followed by its ancestors, innermost first."""
        chain = [call_id]
        parent_id = self._parents.get(call_id)
        while parent_id is not None:
            chain.append(parent_id)
            parent_id = self._parents.get(parent_id)
        return chain

    def visible_steps(self: "AgentHierarchyBuilder", steps: list[T]) -> tuple[list[T], int]:
        """Apply the step cap to one agent's ordered steps.

        Returns:
            Tuple of (most recent steps, number of older steps omitted)
        """
        if self.max_steps_per_agent is None or len(steps) <= self.max_steps_per_agent:
            return list(steps), 0
        omitted = len(steps) - self.max_steps_per_agent
        return steps[omitted:], omitted
