"""
Query evaluation against an entry store.

Leaves resolve to entry ID lists through ``store.lookup``; operations
combine the lists of their children:

- AND: intersection
- OR: union (sorted ascending)
- EXCEPT: left minus right
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence

from ..core.exceptions import InvalidOperationError
from ..utils.sets import intersect, union, difference
from .terms import Expression, Operation, OperationType, QueryTerm
from .resolver import CategoryResolver, DEFAULT_CANDIDATES

if TYPE_CHECKING:
    from ..storage.base import EntryStore


COMBINATORS: Dict[OperationType, Callable[[Iterable[int], Iterable[int]], List[int]]] = {
    OperationType.AND: intersect,
    OperationType.OR: union,
    OperationType.EXCEPT: difference,
}


class QueryEvaluator:
    """
    Evaluates query term trees to entry IDs.

    Categories of bare terms are resolved lazily, when the leaf is reached,
    so a parsed tree can be evaluated against any store.

    Example:
        >>> evaluator = QueryEvaluator(store)
        >>> evaluator.evaluate(parse("[type]ripp OR [type]nrps"))
        [535, 1070]
    """

    def __init__(
        self,
        store: "EntryStore",
        resolver: Optional[CategoryResolver] = None,
        candidates: Sequence[str] = DEFAULT_CANDIDATES,
        strict: bool = True,
    ):
        """
        Args:
            store: Store resolving scoped terms to entry IDs
            resolver: Category resolver (built from ``store`` if None)
            candidates: Candidate categories for a default resolver
            strict: Strictness of a default resolver
        """
        self.store = store
        self.resolver = resolver or CategoryResolver(
            store, candidates=candidates, strict=strict
        )

    def evaluate(self, term: QueryTerm) -> List[int]:
        """
        Evaluate a query term.

        Raises:
            CategoryResolutionError: If a bare term matches no category
            InvalidOperationError: If the tree holds an unknown operator or node
            StorageError: If the store fails
        """
        if isinstance(term, Expression):
            return self._evaluate_expression(term)
        if isinstance(term, Operation):
            return self._evaluate_operation(term)
        raise InvalidOperationError(
            f"Invalid query term: {type(term).__name__}"
        )

    def _evaluate_expression(self, expression: Expression) -> List[int]:
        expression = self.resolver.resolve(expression)
        return list(self.store.lookup(expression.category, expression.term))

    def _evaluate_operation(self, operation: Operation) -> List[int]:
        combine = COMBINATORS.get(operation.operation)
        if combine is None:
            raise InvalidOperationError(f"Invalid operation: {operation.operation!r}")

        left = self.evaluate(operation.left)
        right = self.evaluate(operation.right)
        return combine(left, right)


def evaluate(
    term: QueryTerm,
    store: "EntryStore",
    resolver: Optional[CategoryResolver] = None,
    strict: bool = True,
) -> List[int]:
    """
    Evaluate a query term against a store.

    Args:
        term: Root of the query term tree
        store: Entry store
        resolver: Optional category resolver to share across calls
        strict: Fail on unresolvable bare terms (default resolver only)

    Returns:
        Matching entry IDs
    """
    return QueryEvaluator(store, resolver=resolver, strict=strict).evaluate(term)
