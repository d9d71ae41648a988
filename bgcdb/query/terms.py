"""
Query term model for bgcdb searches.

A query term is either
- an Expression: a search term scoped to a category, or
- an Operation: two sub-terms combined with AND, OR or EXCEPT.

Both are immutable. Every node serializes with a ``term_type`` discriminator
so that ``term_from_dict`` can pick the node type before decoding the rest.

Example:
    >>> term = Operation(
    ...     OperationType.AND,
    ...     Expression("type", "ripp"),
    ...     Expression("unknown", "streptomyces"),
    ... )
    >>> term.query_text()
    '( [type]ripp AND streptomyces )'
    >>> term_from_dict(term.to_dict()) == term
    True
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, Union

from ..core.exceptions import InvalidOperationError, MalformedQueryError


UNKNOWN_CATEGORY = "unknown"

# Deepest tree (and parenthesis nesting) accepted from untrusted input
MAX_NESTING_DEPTH = 200


class OperationType(str, Enum):
    """Set operators combining two query terms."""
    AND = "and"         # intersection
    OR = "or"           # union
    EXCEPT = "except"   # difference

    @classmethod
    def from_string(cls, value: Any) -> "OperationType":
        """Look up an operator by name, ignoring case."""
        try:
            return cls(str(getattr(value, "value", value)).lower())
        except ValueError:
            raise MalformedQueryError(f"Invalid operation '{value}'") from None


class QueryType(str, Enum):
    """What kind of record a query searches for."""
    CLUSTER = "cluster"
    CDS = "cds"
    DOMAIN = "domain"


class ReturnType(str, Enum):
    """Output format requested for query results."""
    JSON = "json"
    CSV = "csv"
    NUCLEOTIDE_FASTA = "fasta"
    AMINO_ACID_FASTA = "fastaa"


def _enum_from_string(enum_cls, value: Any, label: str):
    try:
        return enum_cls(str(getattr(value, "value", value)).lower())
    except ValueError:
        raise MalformedQueryError(f"Invalid {label} '{value}'") from None


@dataclass(frozen=True)
class Expression:
    """
    Leaf term: a search term scoped to a category.

    A category of ``"unknown"`` means the category is guessed from the term
    when the query is evaluated.
    """

    category: str
    term: str

    term_type: ClassVar[str] = "expr"

    @property
    def is_unknown(self) -> bool:
        return self.category == UNKNOWN_CATEGORY

    def with_category(self, category: str) -> "Expression":
        """Copy of this expression scoped to another category."""
        return replace(self, category=category)

    def query_text(self) -> str:
        if self.is_unknown:
            return self.term
        return f"[{self.category}]{self.term}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "term_type": self.term_type,
            "category": self.category,
            "term": self.term,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expression":
        try:
            category = data["category"]
            term = data["term"]
        except KeyError as e:
            raise MalformedQueryError(f"Expression is missing field {e}") from None
        if not isinstance(category, str) or not isinstance(term, str):
            raise MalformedQueryError("Expression category and term must be strings")
        if not term:
            raise MalformedQueryError("Expression term cannot be empty")
        return cls(category=category, term=term)

    def __str__(self) -> str:
        return self.query_text()


@dataclass(frozen=True)
class Operation:
    """Binary node combining two terms with a set operator."""

    operation: OperationType
    left: "QueryTerm"
    right: "QueryTerm"

    term_type: ClassVar[str] = "op"

    @property
    def keyword(self) -> str:
        """Upper-case operator name, ``INVALID`` for an unknown operator."""
        if isinstance(self.operation, OperationType):
            return self.operation.name
        try:
            return OperationType(self.operation).name
        except ValueError:
            return "INVALID"

    def query_text(self) -> str:
        return f"( {self.left.query_text()} {self.keyword} {self.right.query_text()} )"

    def to_dict(self) -> Dict[str, Any]:
        if self.keyword == "INVALID":
            raise InvalidOperationError(f"Invalid operation: {self.operation!r}")
        return {
            "term_type": self.term_type,
            "operation": self.keyword.lower(),
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        max_depth: int = MAX_NESTING_DEPTH,
        _depth: int = 0,
    ) -> "Operation":
        if _depth >= max_depth:
            raise MalformedQueryError(
                f"Query nested too deeply (max {max_depth} levels)"
            )
        try:
            operation = data["operation"]
            left = data["left"]
            right = data["right"]
        except KeyError as e:
            raise MalformedQueryError(f"Operation is missing field {e}") from None
        return cls(
            operation=OperationType.from_string(operation),
            left=term_from_dict(left, max_depth, _depth + 1),
            right=term_from_dict(right, max_depth, _depth + 1),
        )

    def __str__(self) -> str:
        return self.query_text()


QueryTerm = Union[Expression, Operation]


def term_from_dict(
    data: Dict[str, Any],
    max_depth: int = MAX_NESTING_DEPTH,
    _depth: int = 0,
) -> QueryTerm:
    """
    Create a query term from its dictionary representation.

    Trees with operations nested deeper than ``max_depth`` are rejected.
    """
    if not isinstance(data, dict):
        raise MalformedQueryError(
            f"Query term must be an object, got {type(data).__name__}"
        )

    term_type = str(data.get("term_type", "")).lower()

    if term_type == Expression.term_type:
        return Expression.from_dict(data)
    elif term_type == Operation.term_type:
        return Operation.from_dict(data, max_depth, _depth)
    else:
        raise MalformedQueryError(f"Invalid term_type '{data.get('term_type')}'")


def iter_expressions(term: QueryTerm) -> Iterator[Expression]:
    """Yield the leaf expressions of a tree, left to right."""
    stack = [term]
    while stack:
        node = stack.pop()
        if isinstance(node, Operation):
            stack.append(node.right)
            stack.append(node.left)
        else:
            yield node


@dataclass
class Query:
    """
    Top-level query envelope.

    ``query_type`` and ``return_type`` are carried through serialization;
    evaluation only looks at ``terms``.
    """

    terms: QueryTerm
    query_type: QueryType = QueryType.CLUSTER
    return_type: ReturnType = ReturnType.JSON

    @classmethod
    def from_string(cls, query_string: str, **kwargs) -> "Query":
        """Parse a query string into a cluster search returning JSON."""
        from .parser import parse_query
        return parse_query(query_string, **kwargs)

    def query_text(self) -> str:
        return self.terms.query_text()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search": self.query_type.value,
            "return_type": self.return_type.value,
            "terms": self.terms.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], max_depth: int = MAX_NESTING_DEPTH) -> "Query":
        if not isinstance(data, dict):
            raise MalformedQueryError(
                f"Query must be an object, got {type(data).__name__}"
            )
        if "terms" not in data:
            raise MalformedQueryError("Query is missing field 'terms'")
        return cls(
            terms=term_from_dict(data["terms"], max_depth),
            query_type=_enum_from_string(
                QueryType, data.get("search", QueryType.CLUSTER.value), "query type"
            ),
            return_type=_enum_from_string(
                ReturnType, data.get("return_type", ReturnType.JSON.value), "return type"
            ),
        )
