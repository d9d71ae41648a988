"""
Custom exceptions for bgcdb.
"""


class BgcDBError(Exception):
    """Base exception for bgcdb."""
    pass


class QueryError(BgcDBError):
    """Error related to query parsing, resolution or evaluation."""
    pass


class MalformedQueryError(QueryError):
    """Query string or serialized query term is not well formed."""
    pass


class InvalidCategoryError(QueryError):
    """Search category is not known."""
    pass


class CategoryResolutionError(InvalidCategoryError):
    """No candidate category matched a term with unknown category."""

    def __init__(self, term: str, candidates=None):
        self.term = term
        self.candidates = list(candidates or [])
        super().__init__(f"Invalid search category: no category matches '{term}'")


class InvalidOperationError(QueryError):
    """Operation node carries an operator the evaluator cannot apply."""
    pass


class StorageError(BgcDBError):
    """Error related to entry store operations."""
    pass
