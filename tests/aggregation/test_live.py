"""Tests for the live aggregator and its convergence with batch reconstruction."""

import time

import pytest

from session_trace.aggregation import LiveAggregator
from session_trace.aggregation import reconstruct_events
from session_trace.aggregation import reconstruct_session
from session_trace.models import CallStatus
from session_trace.models import PersistedSession


def _mixed_history(events) -> list[dict]:
    """A history exercising every event kind and most error paths."""
    return [
        events.thinking("plan the work"),
        events.todos([{"content": "investigate", "status": "in_progress"}]),
        events.context("rule", "no-print"),
        events.start("A", "Task", input={"subagent_type": "explorer", "prompt": "dig"}),
        events.agent_start("A", agent_type="explorer"),
        events.start("B", "Task", parent="A"),
        events.start("C", "Grep", parent="B", input={"pattern": "TODO"}),
        events.todos([{"content": "sub task", "status": "pending"}], scope="B"),
        events.result("C", output="2 matches"),
        events.start("D", "mcp__github__search", input={"query": "parser"}),
        events.context("rule", "no-print"),
        events.result("ghost", output="orphan"),
        events.start("A", "Read"),
        events.start("E", "Bash", parent="E", input={"command": "make"}),
        {"id": "bad", "kind": "context", "timestamp": "t"},
        events.agent_end("B"),
        events.result("D", error="rate limited"),
        events.todos([{"content": "investigate", "status": "completed"}]),
        events.start("F", "Read", parent="missing"),
    ]


@pytest.mark.unit
class TestLiveAggregator:
    """Test incremental feeding."""

    def test_feed_returns_updated_view(self, events) -> None:
        live = LiveAggregator(session_id="s1")

        first = live.feed(events.start("1", "Read"))
        second = live.feed(events.result("1", output="ok"))

        assert first.tool_history[0].status == CallStatus.RUNNING
        assert second.tool_history[0].status == CallStatus.COMPLETED
        assert live.events_seen == 2

    def test_earlier_views_are_not_mutated(self, events) -> None:
        live = LiveAggregator()

        first = live.feed(events.start("1", "Task"))
        live.feed(events.start("2", "Read", parent="1"))

        assert first.entries[0].call.steps == []

    def test_pending_calls_and_finish(self, events) -> None:
        live = LiveAggregator()
        live.feed(events.start("9", "Bash"))

        assert [call.call_id for call in live.pending_calls()] == ["9"]
        assert live.snapshot().diagnostics == []
        assert len(live.finish().diagnostics) == 1

    def test_bad_event_is_reported_not_raised(self) -> None:
        live = LiveAggregator()

        view = live.feed({"id": "x", "kind": "call_result", "timestamp": "t", "callId": "nope"})

        assert len(view.diagnostics) == 1
        assert len(live.diagnostics) == 1

    def test_unhashable_legacy_type_is_reported_not_raised(self) -> None:
        live = LiveAggregator()

        view = live.feed({"id": "x", "type": {"kind": "tool_use"}, "timestamp": "t"})

        assert [d.event_id for d in view.diagnostics] == ["x"]

    def test_apply_updates_state_without_a_view(self, events) -> None:
        live = LiveAggregator()

        assert live.apply(events.start("1", "Read")) is None
        live.apply(events.result("1", output="ok"))

        assert live.events_seen == 2
        assert live.snapshot().tool_history[0].status == CallStatus.COMPLETED

    def test_feed_reuses_unchanged_calls(self, events) -> None:
        live = LiveAggregator()
        for n in range(50):
            live.feed(events.start(str(n), "Read"))

        before = live.snapshot()
        after = live.feed(events.result("49", output="ok"))

        assert all(a is b for a, b in zip(after.tool_history[:49], before.tool_history[:49]))
        assert after.tool_history[49].status == CallStatus.COMPLETED


@pytest.mark.unit
class TestConvergence:
    """Feeding events one at a time ends in the same view as batch replay."""

    def test_simple_history(self, events) -> None:
        history = [events.start("1", "Read"), events.result("1", output="ok")]

        live = LiveAggregator()
        for event in history:
            live.feed(event)

        assert live.finish() == reconstruct_events(history)

    def test_mixed_history_with_errors(self, events) -> None:
        history = _mixed_history(events)

        live = LiveAggregator()
        for event in history:
            live.feed(event)

        batch = reconstruct_events(history)
        assert live.finish() == batch
        assert live.finish().to_json_dict() == batch.to_json_dict()

    def test_every_prefix_converges(self, events) -> None:
        history = _mixed_history(events)

        live = LiveAggregator()
        for n, event in enumerate(history, 1):
            live.feed(event)
            assert live.finish() == reconstruct_events(history[:n])

    def test_persisted_session(self, sample_session_data) -> None:
        session = PersistedSession.model_validate(sample_session_data)

        live = LiveAggregator(session_id=session.id)
        for message in session.messages:
            live.feed_message(message)
        live.sync_agents(session.agents)

        assert live.finish() == reconstruct_session(session)

    def test_message_events_fed_individually(self, sample_session_data) -> None:
        session = PersistedSession.model_validate(sample_session_data)

        live = LiveAggregator()
        for message in session.messages:
            for event in message.events:
                live.feed(event)
            live.finish_message(message.role, message.content, message.timestamp, message.context_snapshot)
        live.sync_agents(session.agents)

        assert live.finish() == reconstruct_session(session)


@pytest.mark.integration
class TestLiveCost:
    """Feeding a long session keeps pace with batch replay."""

    def test_long_session_feed_is_not_quadratic(self, events) -> None:
        history = []
        for n in range(2000):
            history.append(events.start(f"c{n}", "Read", input={"file_path": f"/src/m{n}.py"}))
            history.append(events.result(f"c{n}", output="ok"))

        started = time.perf_counter()
        batch = reconstruct_events(history)
        batch_elapsed = time.perf_counter() - started

        live = LiveAggregator()
        started = time.perf_counter()
        for event in history:
            live.feed(event)
        live_elapsed = time.perf_counter() - started

        assert live.finish() == batch
        # Rebuilding every view from scratch takes minutes here
        assert live_elapsed < 20 * batch_elapsed + 5.0
