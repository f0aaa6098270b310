"""Scoped todo lists.

The producer always sends the complete current list for a scope, so every
update is a whole-list replacement: last write for a scope wins.
"""

from ..models.events import TodoItem
from ..models.trace import ScopedTodos


class TodoScopeManager:
    """One global todo list plus a private list per agent call."""

    def __init__(self: "TodoScopeManager") -> None:
        self._global: list[TodoItem] = []
        self._by_scope: dict[str, list[TodoItem]] = {}
        # Bumped on every apply
        self.version = 0

    def apply(self: "TodoScopeManager", scope_id: str | None, todos: list[TodoItem]) -> None:
        """Replace the list of one scope.

        Args:
            scope_id: Call identifier owning the list (empty or None = global)
            todos: Full replacement list
        """
        items = [item.model_copy(deep=True) for item in todos]
        if scope_id:
            self._by_scope[scope_id] = items
        else:
            self._global = items
        self.version += 1

    def scope(self: "TodoScopeManager", scope_id: str) -> list[TodoItem] | None:
        """Copy of the private list of one scope, or None if it never received one."""
        items = self._by_scope.get(scope_id)
        if items is None:
            return None
        return [item.model_copy(deep=True) for item in items]

    def snapshot(self: "TodoScopeManager") -> ScopedTodos:
        """Immutable view for rendering."""
        return ScopedTodos(
            global_=[item.model_copy(deep=True) for item in self._global],
            by_scope={
                scope_id: [item.model_copy(deep=True) for item in items]
                for scope_id, items in self._by_scope.items()
            },
        )
