"""Reading persisted session history from disk.

Two on-disk shapes are supported:

- a session JSON document (``{"id": ..., "messages": [...], "agents": [...]}``)
- an events.jsonl file, one execution event per line

Event payloads are returned unvalidated; validation happens in the session
reducer so a malformed event is reported as a diagnostic instead of failing
the whole file.
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..models.events import PersistedSession

logger = logging.getLogger(__name__)


def load_session(session_file: Path) -> PersistedSession:
    """Load a persisted session document.

    Args:
        session_file: Path to session JSON file

    Returns:
        Parsed session (events inside messages still raw)

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        pydantic.ValidationError: If the document is not a session
    """
    with open(session_file, encoding="utf-8") as f:
        data = json.load(f)
    session = PersistedSession.model_validate(data)
    logger.debug(f"Loaded session {session.id or session_file.name} with {len(session.messages)} messages")
    return session


def read_events_jsonl(events_file: Path) -> list[dict[str, Any]]:
    """Read raw events from an events.jsonl file.

    Blank lines are ignored; lines that are not a JSON object are skipped
    with a warning.

    Args:
        events_file: Path to events.jsonl file

    Returns:
        Raw event payloads in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    events: list[dict[str, Any]] = []

    with open(events_file, encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue

            try:
                event = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping malformed line {line_num} in {events_file}: {e}")
                continue

            if not isinstance(event, dict):
                logger.warning(f"Skipping non-object line {line_num} in {events_file}")
                continue

            events.append(event)

    return events
