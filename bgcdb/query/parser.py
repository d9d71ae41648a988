"""
Parser for the boolean query language.

Syntax:
- whitespace separated search terms
- ``[category]term`` scopes a term to a category, a bare term has category
  ``unknown``
- ``AND``, ``OR`` and ``EXCEPT`` (any case) combine terms
- two terms with no keyword between them are combined with ``AND``
- parentheses group terms

Grammar::

    Term       := Expression ( Keyword? Expression )*
    Expression := '(' Term ')' | Atom

Chains are folded left to right with no operator precedence, so
``a OR b c`` means ``( ( a OR b ) AND c )``.

Example:
    >>> parser = QueryParser()
    >>> parser.parse("ripp AND (streptomyces OR lactococcus)").query_text()
    '( ripp AND ( streptomyces OR lactococcus ) )'
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple, Union

from ..core.exceptions import MalformedQueryError
from .tokenizer import END, OPEN_GROUP, CLOSE_GROUP, tokenize
from .terms import (
    Expression,
    Operation,
    OperationType,
    Query,
    QueryTerm,
    QueryType,
    ReturnType,
    UNKNOWN_CATEGORY,
    MAX_NESTING_DEPTH,
)


KEYWORDS: Dict[str, OperationType] = {op.value: op for op in OperationType}


class TokenStream:
    """Cursor over a token list; reads past the end return ``END``."""

    def __init__(self, tokens: Sequence[str]):
        self._tokens = list(tokens)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._pos

    def peek(self) -> str:
        if self._pos >= len(self._tokens):
            return END
        return self._tokens[self._pos]

    def consume(self) -> str:
        token = self.peek()
        self._pos += 1
        return token

    def consume_expected(self, expected: str) -> bool:
        if self.peek() == expected:
            self._pos += 1
            return True
        return False


def parse_atom(raw: str) -> Expression:
    """
    Turn a single token into an Expression.

    ``[category]term`` is split at the first ``]``. A token with an
    unterminated bracket is taken as a plain term. Empty brackets keep an
    empty category, which no store knows.
    """
    category = UNKNOWN_CATEGORY
    term = raw

    if raw.startswith("["):
        end = raw.find("]")
        if end > -1:
            category = raw[1:end]
            term = raw[end + 1:]

    if not term:
        raise MalformedQueryError(f"Missing search term after category [{category}]")

    return Expression(category=category, term=term)


class QueryParser:
    """
    Recursive descent parser producing query term trees.

    Example:
        >>> parser = QueryParser()
        >>> parser.parse("nrps 1234") == parser.parse("nrps AND 1234")
        True
    """

    def __init__(self, max_depth: int = MAX_NESTING_DEPTH):
        """
        Args:
            max_depth: Deepest parenthesis nesting and tree depth accepted
        """
        self.max_depth = max_depth

    def parse(self, query: Union[str, Sequence[str]]) -> QueryTerm:
        """
        Parse a query string or token list into a query term.

        Raises:
            MalformedQueryError: If the query is not well formed
        """
        tokens = tokenize(query) if isinstance(query, str) else query
        stream = TokenStream(tokens)

        term, _ = self._term(stream, 0)

        leftover = stream.peek()
        if leftover != END:
            raise MalformedQueryError(f"Invalid token {leftover}, no matching '('")

        return term

    def _term(self, stream: TokenStream, level: int) -> Tuple[QueryTerm, int]:
        """Parse a chain of expressions; returns the term and its tree depth."""
        if stream.remaining < 2:
            raise MalformedQueryError("Unexpected end of expression")

        left, depth = self._expression(stream, level)

        while True:
            token = stream.peek()
            if token in (END, CLOSE_GROUP):
                return left, depth

            operation = KEYWORDS.get(token.lower())
            if operation is not None:
                stream.consume()
            else:
                # Two expressions without keyword will be ANDed
                operation = OperationType.AND

            right, right_depth = self._expression(stream, level)
            left = Operation(operation=operation, left=left, right=right)
            depth = max(depth, right_depth) + 1
            self._check_depth(depth)

    def _expression(self, stream: TokenStream, level: int) -> Tuple[QueryTerm, int]:
        if stream.consume_expected(OPEN_GROUP):
            self._check_depth(level + 1)
            term, depth = self._term(stream, level + 1)
            if not stream.consume_expected(CLOSE_GROUP):
                raise MalformedQueryError(
                    f"Invalid token {stream.peek()}, expected '{CLOSE_GROUP}'"
                )
            return term, depth

        raw = stream.consume()
        if raw.lower() in KEYWORDS:
            raise MalformedQueryError(f"Invalid use of keyword {raw}")
        if raw == END:
            raise MalformedQueryError("Malformed input")
        if raw == CLOSE_GROUP:
            raise MalformedQueryError(f"Invalid token {raw}, no matching '('")

        return parse_atom(raw), 0

    def _check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise MalformedQueryError(
                f"Query nested too deeply (max {self.max_depth} levels)"
            )


def parse(
    query: Union[str, Sequence[str]],
    max_depth: int = MAX_NESTING_DEPTH,
) -> QueryTerm:
    """
    Parse a query string or token list into a query term.

    Args:
        query: Raw query string, or tokens from ``tokenize``
        max_depth: Deepest nesting accepted

    Returns:
        Root of the query term tree
    """
    return QueryParser(max_depth=max_depth).parse(query)


def parse_query(
    query_string: str,
    query_type: QueryType = QueryType.CLUSTER,
    return_type: ReturnType = ReturnType.JSON,
    max_depth: int = MAX_NESTING_DEPTH,
) -> Query:
    """
    Parse a query string into a Query envelope.

    Example:
        >>> query = parse_query("[type]nrps")
        >>> query.to_dict()["terms"]
        {'term_type': 'expr', 'category': 'type', 'term': 'nrps'}
    """
    return Query(
        terms=parse(query_string, max_depth=max_depth),
        query_type=query_type,
        return_type=return_type,
    )
