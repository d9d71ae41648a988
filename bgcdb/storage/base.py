"""
Base entry store interface for bgcdb.

An entry store answers the questions the query engine asks about the
catalog: which entries match a term in a category, whether a term exists
in a category at all, and what the matched entries look like.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List
import threading

from ..core.models import (
    AvailableTerm,
    CatalogStats,
    RepositoryEntry,
    ResultStats,
    StatCluster,
    StatCounts,
    TaxonStats,
)


@dataclass
class StoreStats:
    """Entry store statistics."""
    backend: str
    entry_count: int
    lookups: int
    existence_checks: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "entry_count": self.entry_count,
            "lookups": self.lookups,
            "existence_checks": self.existence_checks,
        }


class EntryStore(ABC):
    """
    Abstract base class for entry stores.

    Matching is case-insensitive. Terms may contain the SQL ``LIKE``
    wildcards ``%`` and ``_``.

    Implementations must be thread-safe.
    """

    backend = "base"

    def __init__(self):
        self._lock = threading.RLock()
        self._lookups = 0
        self._existence_checks = 0

    @property
    @abstractmethod
    def categories(self) -> List[str]:
        """Categories ``lookup`` can search."""
        pass

    @abstractmethod
    def lookup(self, category: str, term: str) -> List[int]:
        """
        Find the entries matching a term within a category.

        Args:
            category: Search category, e.g. ``type`` or ``genus``
            term: Search term

        Returns:
            Distinct entry IDs; empty for a category the store does not know
        """
        pass

    @abstractmethod
    def category_exists(self, category: str, term: str) -> int:
        """
        Count how often a term occurs within a category.

        Returns:
            Number of matches, 0 if none or the category is unknown
        """
        pass

    @abstractmethod
    def get(self, ids: Iterable[int]) -> List[RepositoryEntry]:
        """
        Materialize entries, ordered by accession.

        Unknown IDs are skipped.
        """
        pass

    @abstractmethod
    def available(self, category: str, term: str) -> List[AvailableTerm]:
        """
        Autocomplete a partial term within a category.

        Raises:
            InvalidCategoryError: If the category is not known
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of entries in the store."""
        pass

    @abstractmethod
    def repository(self) -> List[RepositoryEntry]:
        """All entries, ordered by accession."""
        pass

    # =========================================================================
    # STATISTICS
    # =========================================================================

    @abstractmethod
    def counts(self) -> StatCounts:
        """
        Count all, minimal, complete and incomplete entries.

        Completeness is compared ignoring case.
        """
        pass

    @abstractmethod
    def cluster_stats(self) -> List[StatCluster]:
        """
        Count the entries directly assigned each biosynthetic class.

        Parent classes do not include the entries of their subtypes. Ordered
        by count, largest first, then by term.
        """
        pass

    @abstractmethod
    def genus_stats(self) -> List[TaxonStats]:
        """Count the entries per genus, largest first, then by genus."""
        pass

    @abstractmethod
    def result_stats(self, ids: Iterable[int]) -> ResultStats:
        """
        Break a set of entries down by class display name and by phylum.

        An entry counts once for each class it is directly assigned. Entries
        without a phylum and unknown IDs are skipped.
        """
        pass

    def catalog_stats(self) -> CatalogStats:
        """Counts, class and genus statistics of the whole catalog."""
        return CatalogStats(
            counts=self.counts(),
            clusters=self.cluster_stats(),
            taxon_stats=self.genus_stats(),
        )

    def close(self) -> None:
        """Release resources held by the store."""
        pass

    def stats(self) -> StoreStats:
        with self._lock:
            return StoreStats(
                backend=self.backend,
                entry_count=self.count(),
                lookups=self._lookups,
                existence_checks=self._existence_checks,
            )

    def __enter__(self) -> "EntryStore":
        return self

    def __exit__(self, *args) -> None:
        self.close()
