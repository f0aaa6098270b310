"""Incremental aggregation of a live session.

The transport (push channel, iterator, replay loop) calls ``feed`` for each
event as it arrives and renders the returned view, or ``apply`` when it only
needs a view now and then. Views are rendered incrementally: each event
re-renders only the calls along its lineage, not the whole session. No
background work, timers or external resources are held: abandoning a session
is simply not feeding it any more.
"""

import logging
from typing import Any

from ..config.settings import TraceSettings
from ..models.events import ContextSnapshot
from ..models.events import ExecutionEvent
from ..models.events import PersistedAgent
from ..models.events import PersistedMessage
from ..models.trace import Diagnostic
from ..models.trace import ReconstructedView
from ..models.trace import ToolCall
from .state import SessionState

logger = logging.getLogger(__name__)


class LiveAggregator:
    """Long-lived aggregate of one session, updated one event at a time.

    Uses the same reducer as the batch reconstructor, so for any event list
    ``E``, feeding ``E`` and calling ``finish()`` equals
    ``reconstruct_events(E)``.

    Example:
        >>> live = LiveAggregator()
        >>> view = live.feed({"id": "e1", "kind": "call_start", "timestamp": "...", "callId": "1", "toolName": "Read"})
        >>> view.tool_history[0].status
        <CallStatus.RUNNING: 'running'>
    """

    def __init__(self: "LiveAggregator", session_id: str | None = None, settings: TraceSettings | None = None) -> None:
        self.session_id = session_id
        self._state = SessionState(settings)
        self._events_seen = 0

    @property
    def events_seen(self: "LiveAggregator") -> int:
        return self._events_seen

    @property
    def diagnostics(self: "LiveAggregator") -> list[Diagnostic]:
        return self._state.diagnostics

    def apply(self: "LiveAggregator", event: ExecutionEvent | dict[str, Any]) -> None:
        """Apply one event without building a view.

        For consumers that only render occasionally; call ``snapshot()`` when
        a view is needed.
        """
        self._events_seen += 1
        self._state.apply_event(event)

    def feed(self: "LiveAggregator", event: ExecutionEvent | dict[str, Any]) -> ReconstructedView:
        """Apply one event and return the updated intermediate view."""
        self.apply(event)
        return self._state.view()

    def finish_message(
        self: "LiveAggregator",
        role: str,
        content: str,
        timestamp: str = "",
        context_snapshot: ContextSnapshot | None = None,
    ) -> ReconstructedView:
        """Close the current message after its events have been fed."""
        self._state.finish_message(role, content, timestamp, context_snapshot)
        return self._state.view()

    def feed_message(self: "LiveAggregator", message: PersistedMessage) -> ReconstructedView:
        """Feed all events of a message, then its trailing text and snapshot."""
        for event in message.events:
            self.apply(event)
        return self.finish_message(message.role, message.content, message.timestamp, message.context_snapshot)

    def sync_agents(self: "LiveAggregator", records: list[PersistedAgent]) -> ReconstructedView:
        """Reconcile agent calls with externally tracked agent records."""
        self._state.reconcile_agents(records)
        return self._state.view()

    def pending_calls(self: "LiveAggregator") -> list[ToolCall]:
        return self._state.pending_calls()

    def snapshot(self: "LiveAggregator") -> ReconstructedView:
        """Current intermediate view."""
        return self._state.view()

    def finish(self: "LiveAggregator") -> ReconstructedView:
        """Final view for a stream that has ended.

        Calls still running are left ``running`` and reported as abandoned.
        The aggregator stays usable; feeding more events later is allowed.
        """
        view = self._state.view(final=True)
        logger.info(
            f"Live session {self.session_id or '<unnamed>'} finished after {self._events_seen} events "
            f"({len(view.diagnostics)} diagnostics)"
        )
        return view
