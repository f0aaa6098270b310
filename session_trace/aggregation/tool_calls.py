"""Tracking of tool invocations and their asynchronous results.

Calls are keyed by call identifier in a single arena owned by the session.
A call is created by call_start, mutated only by its matching call_result
(or agent_end for sub-agents), and never removed.
"""

import logging

from ..models.events import EventKind
from ..models.events import ExecutionEvent
from ..models.trace import CallCategory
from ..models.trace import CallStatus
from ..models.trace import ToolCall
from .errors import DuplicateStartError
from .errors import UnresolvedReferenceError
from .taxonomy import classify_call
from .taxonomy import summarize_input
from .taxonomy import tool_family

logger = logging.getLogger(__name__)

TRUNCATION_SUFFIX = "... (truncated)"


def truncate(text: str, max_length: int | None) -> str:
    """Truncate text with indicator if too long.

    Args:
        text: Text to truncate
        max_length: Maximum length before truncation (None disables)

    Returns:
        Original or truncated text with "... (truncated)" suffix
    """
    if max_length is None or len(text) <= max_length:
        return text
    return text[:max_length] + TRUNCATION_SUFFIX


class ToolCallTracker:
    """Registry of every call seen in one session.

    Example:
        >>> tracker = ToolCallTracker()
        >>> call = tracker.register_start(start_event)
        >>> call.status
        <CallStatus.RUNNING: 'running'>
    """

    def __init__(
        self: "ToolCallTracker",
        max_output_length: int | None = None,
        input_summary_length: int = 40,
    ) -> None:
        """Initialize with empty state.

        Args:
            max_output_length: Truncate attached outputs beyond this length
            input_summary_length: Maximum length of input summaries
        """
        self._calls: dict[str, ToolCall] = {}
        self.max_output_length = max_output_length
        self.input_summary_length = input_summary_length

    def __contains__(self: "ToolCallTracker", call_id: object) -> bool:
        return call_id in self._calls

    def __len__(self: "ToolCallTracker") -> int:
        return len(self._calls)

    def get(self: "ToolCallTracker", call_id: str | None) -> ToolCall | None:
        if call_id is None:
            return None
        return self._calls.get(call_id)

    def calls(self: "ToolCallTracker") -> list[ToolCall]:
        """All registered calls in registration (chronological) order."""
        return list(self._calls.values())

    def pending_calls(self: "ToolCallTracker") -> list[ToolCall]:
        """Calls that have not received a result yet."""
        return [call for call in self._calls.values() if call.status == CallStatus.RUNNING]

    def register_start(self: "ToolCallTracker", event: ExecutionEvent) -> ToolCall:
        """Create a running call from a call_start event.

        Args:
            event: call_start event (call_id and tool_name are validated)

        Returns:
            The newly registered call

        Raises:
            DuplicateStartError: If the call identifier is already registered
        """
        call_id = event.call_id or ""
        if call_id in self._calls:
            raise DuplicateStartError(
                f"Duplicate call_start for {call_id}; keeping the earlier call",
                event_id=event.id,
                call_id=call_id,
            )

        tool_name = event.tool_name or ""
        call = ToolCall(
            call_id=call_id,
            name=tool_name,
            category=classify_call(tool_name, event.input),
            family=tool_family(tool_name),
            input=event.input,
            input_summary=summarize_input(event.input, self.input_summary_length),
            parent_call_id=event.parent_call_id,
            agent_type=event.agent_type or self._subagent_type(event),
            started_at=event.timestamp,
        )
        self._calls[call_id] = call
        logger.debug(f"Registered call {call_id} ({tool_name}, {call.category.value})")
        return call

    def resolve(self: "ToolCallTracker", event: ExecutionEvent) -> ToolCall:
        """Apply a call_result or agent_end event to its call.

        A running call becomes completed, or failed when the event carries an
        error. An already resolved call keeps its status; only a missing
        output or error is filled in.

        Args:
            event: call_result or agent_end event

        Returns:
            The updated call

        Raises:
            UnresolvedReferenceError: If no call_start was seen for the identifier
        """
        call = self._require(event)

        if call.status == CallStatus.RUNNING:
            call.status = CallStatus.FAILED if event.has_error else CallStatus.COMPLETED
            call.ended_at = event.timestamp
        else:
            logger.debug(f"Call {call.call_id} already {call.status.value}; merging late {event.kind.value}")

        if event.output is not None and call.output is None:
            call.output = truncate(event.output, self.max_output_length)
        if event.error and call.error is None:
            call.error = truncate(event.error, self.max_output_length)

        return call

    def annotate_agent(self: "ToolCallTracker", event: ExecutionEvent) -> ToolCall:
        """Apply an agent_start event: mark the call as a sub-agent.

        Raises:
            UnresolvedReferenceError: If no call_start was seen for the identifier
        """
        call = self._require(event)
        call.category = CallCategory.AGENT
        if event.agent_type:
            call.agent_type = event.agent_type
        return call

    def _require(self: "ToolCallTracker", event: ExecutionEvent) -> ToolCall:
        call = self.get(event.call_id)
        if call is None:
            raise UnresolvedReferenceError(
                f"{event.kind.value} references unknown call {event.call_id}",
                event_id=event.id,
                call_id=event.call_id,
            )
        return call

    @staticmethod
    def _subagent_type(event: ExecutionEvent) -> str | None:
        if event.kind != EventKind.CALL_START or not isinstance(event.input, dict):
            return None
        value = event.input.get("subagent_type")
        return value if isinstance(value, str) else None
