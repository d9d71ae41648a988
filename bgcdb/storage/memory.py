"""
In-memory entry store.

Keeps entry records in process memory. Use for:
- Development and testing
- Small catalogs loaded from a JSON or YAML file
"""

from __future__ import annotations

import re
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import yaml

from ..core.exceptions import InvalidCategoryError, StorageError
from ..core.models import (
    AvailableTerm,
    BgcType,
    EntryRecord,
    LabelsAndCounts,
    ProductTag,
    RepositoryEntry,
    ResultStats,
    StatCluster,
    StatCounts,
    TaxonStats,
    TAXONOMY_RANKS,
)
from ..utils.logging import get_logger
from .base import EntryStore


logger = get_logger(__name__)

# Pulls the searchable values of one category out of a record
FieldExtractor = Callable[[EntryRecord], Iterable[str]]

# Autocompleted by prefix; all other categories by substring
PREFIX_CATEGORIES = frozenset({"type", "compound", "completeness"})


class LikePattern:
    """
    Case-insensitive SQL ``LIKE`` pattern.

    ``%`` matches any run of characters, ``_`` any single character. Matching
    is a single greedy pass that backs up to the last ``%`` on a mismatch, so
    it runs in ``O(len(pattern) * len(value))`` for any pattern.

    Example:
        >>> LikePattern("strepto%").fullmatch("Streptomyces")
        True
    """

    __slots__ = ("pattern", "_chars")

    def __init__(self, pattern: str):
        self.pattern = pattern
        # Runs of % match the same as a single %
        self._chars = re.sub("%+", "%", pattern.lower())

    def fullmatch(self, value: str) -> bool:
        """Whether the whole of ``value`` matches the pattern."""
        chars = self._chars
        value = value.lower()

        i = j = 0
        star = -1
        mark = 0
        while i < len(value):
            if j < len(chars) and chars[j] == "%":
                star = j
                mark = i
                j += 1
            elif j < len(chars) and (chars[j] == "_" or chars[j] == value[i]):
                i += 1
                j += 1
            elif star != -1:
                # Let the last % swallow one more character and retry
                j = star + 1
                mark += 1
                i = mark
            else:
                return False

        while j < len(chars) and chars[j] == "%":
            j += 1
        return j == len(chars)

    def __repr__(self) -> str:
        return f"LikePattern({self.pattern!r})"


def like_pattern(term: str) -> LikePattern:
    """
    Compile a SQL ``LIKE`` pattern for case-insensitive matching.

    Example:
        >>> like_pattern("strepto%").fullmatch("Streptomyces")
        True
    """
    return LikePattern(term)


def _rank(rank: str) -> FieldExtractor:
    def extract(record: EntryRecord) -> List[str]:
        value = record.taxonomy.get(rank)
        return [value] if value else []
    return extract


def _completeness(record: EntryRecord) -> List[str]:
    return [record.completeness] if record.completeness else []


def default_extractors() -> Dict[str, FieldExtractor]:
    """
    Field extractors for every category except ``type``.

    ``type`` needs the store's type hierarchy, so the store supplies it
    unless the caller passes its own.
    """
    extractors: Dict[str, FieldExtractor] = {
        "acc": lambda record: [record.accession],
        "compound": lambda record: record.compounds,
        "completeness": _completeness,
    }
    for rank in TAXONOMY_RANKS:
        extractors[rank] = _rank(rank)
    return extractors


class MemoryEntryStore(EntryStore):
    """
    Entry store over in-memory records.

    Every category is searched through a field extractor. A ``type`` search
    also finds entries of all subtypes of the matched type.

    Example:
        >>> store = MemoryEntryStore(
        ...     entries=[EntryRecord(1, "BGC0000001", types=["lanthipeptide"])],
        ...     bgc_types=[BgcType("ripp"), BgcType("lanthipeptide", parent="ripp")],
        ... )
        >>> store.lookup("type", "ripp")
        [1]
    """

    backend = "memory"

    def __init__(
        self,
        entries: Iterable[EntryRecord] = (),
        bgc_types: Iterable[BgcType] = (),
        extractors: Optional[Mapping[str, FieldExtractor]] = None,
    ):
        """
        Args:
            entries: Records to load
            bgc_types: Type hierarchy and display data for type terms
            extractors: Category name to field extractor; defaults to
                ``default_extractors()`` plus the hierarchy-aware ``type``
        """
        super().__init__()

        self._entries: Dict[int, EntryRecord] = {}
        self._types: Dict[str, BgcType] = {}

        self._extractors: Dict[str, FieldExtractor] = dict(
            default_extractors() if extractors is None else extractors
        )
        self._extractors.setdefault("type", self._type_terms)

        for bgc_type in bgc_types:
            self.add_type(bgc_type)
        for entry in entries:
            self.add(entry)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs) -> "MemoryEntryStore":
        """Create a store from ``{"bgc_types": [...], "entries": [...]}``."""
        return cls(
            entries=[EntryRecord.from_dict(e) for e in data.get("entries", [])],
            bgc_types=[BgcType.from_dict(t) for t in data.get("bgc_types", [])],
            **kwargs,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> "MemoryEntryStore":
        """Load a catalog from a YAML (or JSON) file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Cannot load catalog from {path}: {e}") from e

        store = cls.from_dict(data, **kwargs)
        logger.info(f"Loaded {store.count()} entries from {path}")
        return store

    # =========================================================================
    # LOADING
    # =========================================================================

    def add(self, entry: EntryRecord) -> None:
        """Add or replace an entry."""
        with self._lock:
            self._entries[entry.entry_id] = entry

    def add_type(self, bgc_type: BgcType) -> None:
        """Add or replace a type in the hierarchy."""
        with self._lock:
            self._types[bgc_type.term.lower()] = bgc_type

    # =========================================================================
    # ENTRY STORE
    # =========================================================================

    @property
    def categories(self) -> List[str]:
        return sorted(self._extractors)

    def lookup(self, category: str, term: str) -> List[int]:
        extract = self._extractors.get(category)
        if extract is None:
            logger.debug(f"No extractor for category '{category}'")
            return []

        pattern = like_pattern(term)
        with self._lock:
            self._lookups += 1
            return [
                entry_id
                for entry_id, record in sorted(self._entries.items())
                if any(pattern.fullmatch(value) for value in extract(record))
            ]

    def category_exists(self, category: str, term: str) -> int:
        pattern = like_pattern(term)
        with self._lock:
            self._existence_checks += 1
            if category == "type":
                return sum(1 for value in self._known_types() if pattern.fullmatch(value))

            extract = self._extractors.get(category)
            if extract is None:
                return 0
            return sum(
                1
                for record in self._entries.values()
                for value in extract(record)
                if pattern.fullmatch(value)
            )

    def get(self, ids: Iterable[int]) -> List[RepositoryEntry]:
        with self._lock:
            records = [self._entries[i] for i in set(ids) if i in self._entries]
            records.sort(key=lambda record: record.accession)
            return [self._to_repository_entry(record) for record in records]

    def available(self, category: str, term: str) -> List[AvailableTerm]:
        extract = self._extractors.get(category)
        if extract is None:
            raise InvalidCategoryError(f"Invalid category '{category}'")

        if category in PREFIX_CATEGORIES:
            pattern = like_pattern(f"{term}%")
        else:
            pattern = like_pattern(f"%{term}%")

        with self._lock:
            if category == "type":
                return self._available_types(pattern)

            values = {
                value
                for record in self._entries.values()
                for value in extract(record)
                if pattern.fullmatch(value)
            }
        return [AvailableTerm(val=value, desc=value) for value in sorted(values)]

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def repository(self) -> List[RepositoryEntry]:
        with self._lock:
            return self.get(self._entries)

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def counts(self) -> StatCounts:
        with self._lock:
            records = list(self._entries.values())

        completeness = Counter((record.completeness or "").lower() for record in records)
        return StatCounts(
            total=len(records),
            minimal=sum(1 for record in records if record.minimal),
            complete=completeness["complete"],
            incomplete=completeness["incomplete"],
        )

    def cluster_stats(self) -> List[StatCluster]:
        counts: Counter = Counter()
        terms: Dict[str, str] = {}

        with self._lock:
            for record in self._entries.values():
                assigned = {term.lower(): term for term in record.types}
                counts.update(assigned.keys())
                for key, term in assigned.items():
                    terms.setdefault(key, term)

            clusters = []
            for key, count in counts.items():
                bgc_type = self._types.get(key) or BgcType(terms[key])
                clusters.append(StatCluster(
                    type=bgc_type.term,
                    description=bgc_type.description,
                    count=count,
                    css_class=bgc_type.css_class or bgc_type.term,
                ))

        clusters.sort(key=lambda cluster: (-cluster.count, cluster.type))
        return clusters

    def genus_stats(self) -> List[TaxonStats]:
        with self._lock:
            counts = Counter(
                record.taxonomy["genus"]
                for record in self._entries.values()
                if record.taxonomy.get("genus")
            )
        return [
            TaxonStats(genus=genus, count=count)
            for genus, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        ]

    def result_stats(self, ids: Iterable[int]) -> ResultStats:
        by_type: Counter = Counter()
        by_phylum: Counter = Counter()

        with self._lock:
            for entry_id in set(ids):
                record = self._entries.get(entry_id)
                if record is None:
                    continue
                entry = self._to_repository_entry(record)
                by_type.update({tag.name for tag in entry.classes})
                phylum = record.taxonomy.get("phylum")
                if phylum:
                    by_phylum[phylum] += 1

        return ResultStats(
            clusters_by_type=LabelsAndCounts.from_counts(by_type),
            clusters_by_phylum=LabelsAndCounts.from_counts(by_phylum),
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _type_terms(self, record: EntryRecord) -> Iterator[str]:
        """Type terms of a record together with all their ancestors."""
        seen = set()
        for term in record.types:
            while term is not None and term.lower() not in seen:
                seen.add(term.lower())
                yield term
                bgc_type = self._types.get(term.lower())
                term = bgc_type.parent if bgc_type else None

    def _known_types(self) -> List[str]:
        terms = {bgc_type.term for bgc_type in self._types.values()}
        for record in self._entries.values():
            terms.update(record.types)
        return sorted(terms)

    def _available_types(self, pattern: LikePattern) -> List[AvailableTerm]:
        available = []
        for value in self._known_types():
            bgc_type = self._types.get(value.lower())
            description = bgc_type.description if bgc_type else ""
            if pattern.fullmatch(value) or (description and pattern.fullmatch(description)):
                available.append(AvailableTerm(val=value, desc=description))
        return available

    def _to_repository_entry(self, record: EntryRecord) -> RepositoryEntry:
        classes = []
        for term in record.types:
            bgc_type = self._types.get(term.lower())
            if bgc_type is None:
                classes.append(ProductTag(name=term, css_class=term))
            else:
                classes.append(ProductTag(
                    name=bgc_type.name or bgc_type.term,
                    css_class=bgc_type.css_class or bgc_type.term,
                ))

        return RepositoryEntry(
            accession=record.accession,
            minimal=record.minimal,
            complete=record.completeness or "Unknown",
            products=list(record.compounds),
            classes=classes,
            organism=record.organism,
        )

    def __repr__(self) -> str:
        return f"MemoryEntryStore(entries={len(self._entries)}, types={len(self._types)})"
