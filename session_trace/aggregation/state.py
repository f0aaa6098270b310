"""Per-session aggregate state and the event reducer shared by both drivers.

``SessionState.apply_event`` is the single dispatch used by the batch
reconstructor and the live aggregator. Its behaviour depends only on the
event content and prior state, never on arrival timing, so folding the same
events one at a time or all at once yields the same view.

Errors never abort the fold: every ``TraceError`` raised while applying an
event is logged and recorded as a diagnostic, and the event is dropped.
"""

import logging
from typing import Any

from pydantic import ValidationError

from ..config.settings import TraceSettings
from ..models.events import ContextCategory
from ..models.events import ContextSnapshot
from ..models.events import EventKind
from ..models.events import ExecutionEvent
from ..models.events import PersistedAgent
from ..models.events import PersistedMessage
from ..models.events import TodoItem
from ..models.trace import CallCategory
from ..models.trace import CallStatus
from ..models.trace import ContextState
from ..models.trace import Diagnostic
from ..models.trace import DiagnosticKind
from ..models.trace import EntryKind
from ..models.trace import LogEntry
from ..models.trace import ReconstructedView
from ..models.trace import ScopedTodos
from ..models.trace import ToolCall
from .context import ContextRegistry
from .errors import MalformedEventError
from .errors import TraceError
from .errors import UnresolvedReferenceError
from .hierarchy import AgentHierarchyBuilder
from .rendering import ViewCache
from .taxonomy import TODO_TOOL
from .taxonomy import external_service_name
from .todos import TodoScopeManager
from .tool_calls import ToolCallTracker
from .tool_calls import truncate

logger = logging.getLogger(__name__)


def parse_event(raw: ExecutionEvent | dict[str, Any]) -> ExecutionEvent:
    """Validate a raw event payload.

    Raises:
        MalformedEventError: If the payload is not a valid event
    """
    if isinstance(raw, ExecutionEvent):
        return raw

    event_id = raw.get("id") if isinstance(raw, dict) else None
    try:
        return ExecutionEvent.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(error["msg"] for error in e.errors())
        raise MalformedEventError(
            f"Malformed event: {problems}",
            event_id=event_id if isinstance(event_id, str) else None,
        ) from e


class SessionState:
    """Exclusively owned aggregate state of one session.

    Holds the four stateful components (calls, hierarchy, todos, context),
    the ordered timeline and the diagnostics side channel. Not safe for
    concurrent mutation; one writer per session.
    """

    def __init__(self: "SessionState", settings: TraceSettings | None = None) -> None:
        self.settings = settings or TraceSettings()
        self.calls = ToolCallTracker(
            max_output_length=self.settings.max_output_length,
            input_summary_length=self.settings.input_summary_length,
        )
        self.hierarchy = AgentHierarchyBuilder(max_steps_per_agent=self.settings.max_steps_per_agent)
        self.todos = TodoScopeManager()
        self.context = ContextRegistry()
        self._rendered = ViewCache(self.calls, self.hierarchy, self.todos)
        self._todo_snapshot: tuple[int, ScopedTodos] | None = None
        self._context_snapshot: tuple[int, ContextState] | None = None
        self._diagnostics: list[Diagnostic] = []
        self._message_count = 0

    @property
    def diagnostics(self: "SessionState") -> list[Diagnostic]:
        return list(self._diagnostics)

    def apply_event(self: "SessionState", raw: ExecutionEvent | dict[str, Any]) -> None:
        """Fold one event into the state. Never raises for bad events."""
        try:
            event = parse_event(raw)
            self._dispatch(event)
        except TraceError as e:
            self._record(e)

    def finish_message(
        self: "SessionState",
        role: str,
        content: str,
        timestamp: str = "",
        context_snapshot: ContextSnapshot | None = None,
    ) -> None:
        """Close the current message: trailing text entry, then context snapshot.

        Args:
            role: Message role (user, assistant, system)
            content: Plain message text (may be empty)
            timestamp: Message timestamp
            context_snapshot: Optional point-in-time context summary
        """
        ordinal = self._message_count
        self._message_count += 1

        if content:
            is_user = role == "user"
            self._add_entry(
                LogEntry(
                    id=f"{role}-{ordinal}",
                    kind=EntryKind.USER if is_user else EntryKind.RESPONSE,
                    content=f"> {content}" if is_user else content,
                    timestamp=timestamp,
                )
            )

        if context_snapshot is not None:
            added = self.context.merge_snapshot(context_snapshot)
            if added:
                logger.debug(f"Merged {added} new context names from snapshot of message {ordinal}")

    def apply_message(self: "SessionState", message: PersistedMessage) -> None:
        """Fold a whole persisted message: its events first, trailing text last."""
        for raw in message.events:
            self.apply_event(raw)
        self.finish_message(message.role, message.content, message.timestamp, message.context_snapshot)

    def reconcile_agents(self: "SessionState", records: list[PersistedAgent]) -> None:
        """Complete still-running agent calls from persisted agent records.

        Records are matched by ``tool_use_id``, falling back to ``id``.
        Calls already resolved by events are left untouched.
        """
        for record in records:
            call = self.calls.get(record.tool_use_id) or self.calls.get(record.id)
            if call is None or not call.is_agent:
                logger.debug(f"No agent call matches persisted agent {record.id}")
                continue

            if record.type and not call.agent_type:
                call.agent_type = record.type
                self._rendered.touch(call.call_id)
            if call.status != CallStatus.RUNNING:
                continue

            if record.status == "completed":
                call.status = CallStatus.COMPLETED
            elif record.status == "failed":
                call.status = CallStatus.FAILED
            else:
                continue

            if record.result and call.output is None:
                call.output = truncate(record.result, self.settings.max_output_length)
            if record.error and call.error is None:
                call.error = record.error
            self._rendered.touch(call.call_id)

    def pending_calls(self: "SessionState") -> list[ToolCall]:
        return [call.model_copy(deep=True) for call in self.calls.pending_calls()]

    def view(self: "SessionState", final: bool = False) -> ReconstructedView:
        """Build a snapshot of the aggregate.

        Only calls changed since the previous view are rendered again;
        consecutive views share the rest. Views are read-only: later events
        never change a view already returned, but callers must not mutate
        one either.

        Args:
            final: The stream has ended; report still-running calls as abandoned

        Returns:
            View of the session as of the last applied event
        """
        self._rendered.refresh()

        diagnostics = list(self._diagnostics)
        if final:
            diagnostics.extend(
                Diagnostic(
                    kind=DiagnosticKind.ABANDONED_CALL,
                    message=f"Call {call.call_id} ({call.name}) did not finish before the stream ended",
                    call_id=call.call_id,
                )
                for call in self.calls.pending_calls()
            )

        if self._todo_snapshot is None or self._todo_snapshot[0] != self.todos.version:
            self._todo_snapshot = (self.todos.version, self.todos.snapshot())
        if self._context_snapshot is None or self._context_snapshot[0] != self.context.version:
            self._context_snapshot = (self.context.version, self.context.snapshot())

        # Every part is already a validated model
        return ReconstructedView.model_construct(
            entries=self._rendered.entries(),
            todos=self._todo_snapshot[1],
            context=self._context_snapshot[1],
            tool_history=self._rendered.history(),
            usage=self._rendered.usage(),
            diagnostics=diagnostics,
        )

    def _dispatch(self: "SessionState", event: ExecutionEvent) -> None:
        logger.debug(f"Applying {event.kind.value} event {event.id}")

        if event.kind == EventKind.THINKING:
            self._add_entry(
                LogEntry(id=event.id, kind=EntryKind.THINKING, content=event.content or "", timestamp=event.timestamp)
            )

        elif event.kind == EventKind.CALL_START:
            self._start_call(event)

        elif event.kind in (EventKind.CALL_RESULT, EventKind.AGENT_END):
            self._rendered.touch(self.calls.resolve(event).call_id)

        elif event.kind == EventKind.AGENT_START:
            self._rendered.touch(self.calls.annotate_agent(event).call_id)

        elif event.kind == EventKind.TODO_UPDATE:
            scope_id = event.scope_id or None
            if scope_id is not None and scope_id not in self.calls:
                raise UnresolvedReferenceError(
                    f"todo_update scoped to unknown call {scope_id}",
                    event_id=event.id,
                    call_id=scope_id,
                )
            self.todos.apply(scope_id, event.todos or [])
            if scope_id is not None:
                self._rendered.touch(scope_id)

        elif event.kind == EventKind.CONTEXT:
            category = event.context_category
            name = event.context_name or ""
            if category is not None and self.context.announce(category, name):
                self._add_entry(
                    LogEntry(
                        id=event.id,
                        kind=EntryKind.CONTEXT,
                        content=f"context:{category.value}:{name}",
                        timestamp=event.timestamp,
                        context_category=category,
                        context_name=name,
                        context_detail=event.context_detail,
                    )
                )

    def _start_call(self: "SessionState", event: ExecutionEvent) -> None:
        call = self.calls.register_start(event)
        placement = self.hierarchy.attach(call, self.calls, event_id=event.id)
        self._rendered.add_call(call)

        if placement.top_level:
            self._add_entry(
                LogEntry(id=event.id, kind=EntryKind.TOOL, content=f"Using {call.name}", timestamp=event.timestamp),
                call_id=call.call_id,
            )
        if placement.problem is not None:
            self._record(placement.problem)

        if call.category == CallCategory.EXTERNAL_SERVICE:
            service = external_service_name(call.name)
            if service:
                # The call itself is the timeline entry
                self.context.announce(ContextCategory.EXTERNAL_SERVICE, service)

        if call.name == TODO_TOOL and not call.unresolved_parent:
            self._apply_todo_write(event, call)

    def _apply_todo_write(self: "SessionState", event: ExecutionEvent, call: ToolCall) -> None:
        raw_todos = event.input.get("todos") if isinstance(event.input, dict) else None
        if not isinstance(raw_todos, list):
            return
        try:
            todos = [TodoItem.model_validate(item) for item in raw_todos]
        except ValidationError as e:
            raise MalformedEventError(
                f"{TODO_TOOL} call {call.call_id} has invalid todos: {e.error_count()} errors",
                event_id=event.id,
                call_id=call.call_id,
            ) from e
        self.todos.apply(call.parent_call_id, todos)

    def _add_entry(self: "SessionState", entry: LogEntry, call_id: str | None = None) -> None:
        self._rendered.add_entry(entry, call_id)

    def _record(self: "SessionState", error: TraceError) -> None:
        logger.warning(f"{error.kind.value}: {error.message}")
        self._diagnostics.append(error.to_diagnostic())

