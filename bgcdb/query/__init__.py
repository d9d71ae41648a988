"""
Query processing module for bgcdb.

This module provides:
- Tokenizing and parsing of boolean query strings
- The query term model and its (de)serialization
- Category detection for bare search terms
- Query evaluation against an entry store

Example:
    >>> from bgcdb.query import parse_query, QueryEvaluator
    >>>
    >>> query = parse_query("ripp AND (streptomyces OR lactococcus)")
    >>> entry_ids = QueryEvaluator(store).evaluate(query.terms)
"""

from .tokenizer import tokenize, END

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
    term_from_dict,
    iter_expressions,
)

from .parser import (
    QueryParser,
    parse,
    parse_atom,
    parse_query,
)

from .resolver import (
    CategoryResolver,
    DEFAULT_CANDIDATES,
)

from .evaluator import (
    QueryEvaluator,
    evaluate,
)

__all__ = [
    # Tokenizer
    "tokenize",
    "END",
    # Terms
    "Expression",
    "Operation",
    "OperationType",
    "Query",
    "QueryTerm",
    "QueryType",
    "ReturnType",
    "UNKNOWN_CATEGORY",
    "MAX_NESTING_DEPTH",
    "term_from_dict",
    "iter_expressions",
    # Parser
    "QueryParser",
    "parse",
    "parse_atom",
    "parse_query",
    # Resolver
    "CategoryResolver",
    "DEFAULT_CANDIDATES",
    # Evaluator
    "QueryEvaluator",
    "evaluate",
]
