"""Deduplicated registry of context resources loaded into a session."""

import logging

from ..models.events import ContextCategory
from ..models.events import ContextSnapshot
from ..models.trace import ContextState

logger = logging.getLogger(__name__)


class ContextRegistry:
    """Distinct external services, rules and skills, in first-seen order.

    Membership is idempotent: announcing the same name twice is a no-op.

    Example:
        >>> registry = ContextRegistry()
        >>> registry.announce(ContextCategory.SKILL, "bun-best-practices")
        True
        >>> registry.announce(ContextCategory.SKILL, "bun-best-practices")
        False
    """

    def __init__(self: "ContextRegistry") -> None:
        # dicts double as insertion-ordered sets
        self._names: dict[ContextCategory, dict[str, None]] = {category: {} for category in ContextCategory}
        # Bumped whenever a new name is registered
        self.version = 0

    def announce(self: "ContextRegistry", category: ContextCategory, name: str) -> bool:
        """Register a resource.

        Returns:
            True if the name was not known yet for this category
        """
        names = self._names[category]
        if name in names:
            return False
        names[name] = None
        self.version += 1
        logger.debug(f"Registered {category.value} context: {name}")
        return True

    def contains(self: "ContextRegistry", category: ContextCategory, name: str) -> bool:
        return name in self._names[category]

    def merge_snapshot(self: "ContextRegistry", snapshot: ContextSnapshot) -> int:
        """Union a point-in-time summary into the registry.

        Returns:
            Number of names that were new
        """
        added = 0
        for category, names in (
            (ContextCategory.EXTERNAL_SERVICE, snapshot.external_services),
            (ContextCategory.RULE, snapshot.rules),
            (ContextCategory.SKILL, snapshot.skills),
        ):
            for name in names:
                if name and self.announce(category, name):
                    added += 1
        return added

    def snapshot(self: "ContextRegistry") -> ContextState:
        return ContextState(
            external_services=list(self._names[ContextCategory.EXTERNAL_SERVICE]),
            rules=list(self._names[ContextCategory.RULE]),
            skills=list(self._names[ContextCategory.SKILL]),
        )
