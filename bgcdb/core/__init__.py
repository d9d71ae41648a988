"""
Core components for bgcdb.
"""

from .models import (
    RepositoryEntry,
    ProductTag,
    AvailableTerm,
    BgcType,
    EntryRecord,
    TAXONOMY_RANKS,
    StatCounts,
    StatCluster,
    TaxonStats,
    LabelsAndCounts,
    ResultStats,
    CatalogStats,
)
from .exceptions import (
    BgcDBError,
    QueryError,
    MalformedQueryError,
    InvalidCategoryError,
    CategoryResolutionError,
    InvalidOperationError,
    StorageError,
)

__all__ = [
    # Models
    "RepositoryEntry",
    "ProductTag",
    "AvailableTerm",
    "BgcType",
    "EntryRecord",
    "TAXONOMY_RANKS",
    "StatCounts",
    "StatCluster",
    "TaxonStats",
    "LabelsAndCounts",
    "ResultStats",
    "CatalogStats",
    # Exceptions
    "BgcDBError",
    "QueryError",
    "MalformedQueryError",
    "InvalidCategoryError",
    "CategoryResolutionError",
    "InvalidOperationError",
    "StorageError",
]
