"""Error taxonomy for event aggregation.

Components raise these exceptions when an event cannot be applied as-is.
The session reducer catches every ``TraceError``, records it as a
``Diagnostic`` and continues with the next event; none of them ever escape
the public entry points.
"""

from ..models.trace import Diagnostic
from ..models.trace import DiagnosticKind


class TraceError(Exception):
    """Base class for recoverable aggregation errors."""

    kind: DiagnosticKind

    def __init__(self, message: str, event_id: str | None = None, call_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.event_id = event_id
        self.call_id = call_id

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(kind=self.kind, message=self.message, event_id=self.event_id, call_id=self.call_id)


class UnresolvedReferenceError(TraceError):
    """Raised when an event references a call that was never started."""

    kind = DiagnosticKind.UNRESOLVED_REFERENCE


class DuplicateStartError(TraceError):
    """Raised when a call_start reuses an existing call identifier."""

    kind = DiagnosticKind.DUPLICATE_START


class SelfParentingError(TraceError):
    """Raised when a call declares itself as its own parent."""

    kind = DiagnosticKind.SELF_PARENTING


class MalformedEventError(TraceError):
    """Raised when an event lacks the fields its kind requires."""

    kind = DiagnosticKind.MALFORMED_EVENT


__all__ = [
    "DiagnosticKind",
    "DuplicateStartError",
    "MalformedEventError",
    "SelfParentingError",
    "TraceError",
    "UnresolvedReferenceError",
]
