"""
Category detection for terms entered without a ``[category]`` prefix.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Sequence

from ..core.exceptions import CategoryResolutionError
from ..utils.logging import get_logger
from .terms import Expression, Operation, QueryTerm, UNKNOWN_CATEGORY

if TYPE_CHECKING:
    from ..storage.base import EntryStore


logger = get_logger(__name__)

# Tried in this order; the first category with a match wins
DEFAULT_CANDIDATES = ("type", "acc", "compound", "genus", "species")


class CategoryResolver:
    """
    Guesses the category of a bare search term.

    Each candidate category is checked with ``store.category_exists`` in
    priority order. Results are memoized per resolver, so a resolver should
    live no longer than the request it serves.

    Example:
        >>> resolver = CategoryResolver(store)
        >>> resolver.resolve_category("ripp")
        'type'
    """

    def __init__(
        self,
        store: "EntryStore",
        candidates: Sequence[str] = DEFAULT_CANDIDATES,
        strict: bool = True,
    ):
        """
        Args:
            store: Store answering ``category_exists``
            candidates: Categories to try, highest priority first
            strict: Raise when no candidate matches; otherwise keep
                ``unknown``, which then matches nothing
        """
        self.store = store
        self.candidates = tuple(candidates)
        self.strict = strict
        self._cache: Dict[str, str] = {}

    def resolve_category(self, term: str) -> str:
        """
        Find the category a term belongs to.

        Raises:
            CategoryResolutionError: If no candidate matches and strict
        """
        if term in self._cache:
            return self._cache[term]

        for category in self.candidates:
            if self.store.category_exists(category, term) > 0:
                logger.debug(f"Resolved '{term}' to category '{category}'")
                self._cache[term] = category
                return category

        if self.strict:
            raise CategoryResolutionError(term, self.candidates)

        logger.debug(f"No category matches '{term}', leaving it unknown")
        self._cache[term] = UNKNOWN_CATEGORY
        return UNKNOWN_CATEGORY

    def resolve(self, expression: Expression) -> Expression:
        """Expression with its category resolved; known categories pass through."""
        if not expression.is_unknown:
            return expression
        return expression.with_category(self.resolve_category(expression.term))

    def resolve_tree(self, term: QueryTerm) -> QueryTerm:
        """New tree with every unknown-category expression resolved."""
        if isinstance(term, Operation):
            return Operation(
                operation=term.operation,
                left=self.resolve_tree(term.left),
                right=self.resolve_tree(term.right),
            )
        return self.resolve(term)
