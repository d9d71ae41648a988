"""
bgcdb - Query engine for a biosynthetic gene cluster repository.

Example:
    >>> from bgcdb import MemoryEntryStore, QueryEvaluator, parse_query
    >>>
    >>> store = MemoryEntryStore.from_file("catalog.yaml")
    >>>
    >>> # Bare terms get their category guessed: type, acc, compound, genus, species
    >>> query = parse_query("ripp AND (streptomyces OR lactococcus)")
    >>> entry_ids = QueryEvaluator(store).evaluate(query.terms)
    >>> entries = store.get(entry_ids)
"""

from .core import (
    # Models
    RepositoryEntry,
    ProductTag,
    AvailableTerm,
    BgcType,
    EntryRecord,
    # Exceptions
    BgcDBError,
    QueryError,
    MalformedQueryError,
    InvalidCategoryError,
    CategoryResolutionError,
    InvalidOperationError,
    StorageError,
)

from .query import (
    Expression,
    Operation,
    OperationType,
    Query,
    QueryTerm,
    QueryParser,
    CategoryResolver,
    QueryEvaluator,
    tokenize,
    parse,
    parse_query,
    evaluate,
    term_from_dict,
)

from .storage import (
    EntryStore,
    MemoryEntryStore,
    SQLEntryStore,
    create_store,
)

__version__ = "0.1.0"
__author__ = "bgcdb Team"

__all__ = [
    # Models
    "RepositoryEntry",
    "ProductTag",
    "AvailableTerm",
    "BgcType",
    "EntryRecord",
    # Exceptions
    "BgcDBError",
    "QueryError",
    "MalformedQueryError",
    "InvalidCategoryError",
    "CategoryResolutionError",
    "InvalidOperationError",
    "StorageError",
    # Query
    "Expression",
    "Operation",
    "OperationType",
    "Query",
    "QueryTerm",
    "QueryParser",
    "CategoryResolver",
    "QueryEvaluator",
    "tokenize",
    "parse",
    "parse_query",
    "evaluate",
    "term_from_dict",
    # Storage
    "EntryStore",
    "MemoryEntryStore",
    "SQLEntryStore",
    "create_store",
]
