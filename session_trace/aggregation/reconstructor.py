"""Batch reconstruction of a persisted session.

Replays an entire message history through the shared session reducer in one
synchronous pass and returns the final view. Produces the same structure a
``LiveAggregator`` fed with the same history would finish with.
"""

import logging
from collections.abc import Iterable
from typing import Any

from ..config.settings import TraceSettings
from ..models.events import ExecutionEvent
from ..models.events import PersistedSession
from ..models.trace import ReconstructedView
from .state import SessionState

logger = logging.getLogger(__name__)


def reconstruct_session(session: PersistedSession, settings: TraceSettings | None = None) -> ReconstructedView:
    """Rebuild the aggregate view of a persisted session.

    Each message contributes its events first, then its trailing text,
    then its context snapshot. Persisted agent records are reconciled after
    all messages so they only complete agents no event resolved.

    Args:
        session: Persisted session history
        settings: Optional aggregation settings

    Returns:
        Final view, with still-running calls reported as abandoned
    """
    state = SessionState(settings)

    for message in session.messages:
        state.apply_message(message)

    state.reconcile_agents(session.agents)

    view = state.view(final=True)
    _log_summary(session.id or "<unnamed>", view)
    return view


def reconstruct_events(
    events: Iterable[ExecutionEvent | dict[str, Any]],
    settings: TraceSettings | None = None,
) -> ReconstructedView:
    """Rebuild the aggregate view of a bare event list.

    Args:
        events: Ordered events (validated models or raw payloads)
        settings: Optional aggregation settings

    Returns:
        Final view, with still-running calls reported as abandoned
    """
    state = SessionState(settings)
    for event in events:
        state.apply_event(event)

    view = state.view(final=True)
    _log_summary("<events>", view)
    return view


def _log_summary(label: str, view: ReconstructedView) -> None:
    logger.info(
        f"Reconstructed {label}: {len(view.entries)} entries, {view.usage.total} calls, "
        f"{len(view.diagnostics)} diagnostics"
    )
