"""
SQL entry store.

Runs one parameterized statement per category over a DB-API connection.
The default statements target the SQLite schema in ``SCHEMA``:

- entries: one row per catalog entry
- taxa: taxonomy of the producing organism
- compounds: compound names per entry
- bgc_types: biosynthetic class hierarchy (``parent_id``)
- rel_entries_types: entry to class links

Matching uses ``LIKE``, which SQLite evaluates case-insensitively.
"""

from __future__ import annotations

import sqlite3
from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

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


SCHEMA = """
CREATE TABLE IF NOT EXISTS taxa (
    tax_id INTEGER PRIMARY KEY,
    superkingdom TEXT,
    phylum TEXT,
    class TEXT,
    taxonomic_order TEXT,
    family TEXT,
    genus TEXT,
    species TEXT,
    name TEXT
);
CREATE TABLE IF NOT EXISTS entries (
    entry_id INTEGER PRIMARY KEY,
    acc TEXT NOT NULL UNIQUE,
    tax_id INTEGER REFERENCES taxa (tax_id),
    minimal INTEGER NOT NULL DEFAULT 0,
    completeness TEXT
);
CREATE TABLE IF NOT EXISTS bgc_types (
    bgc_type_id INTEGER PRIMARY KEY,
    term TEXT NOT NULL UNIQUE,
    name TEXT,
    description TEXT,
    safe_class TEXT,
    parent_id INTEGER REFERENCES bgc_types (bgc_type_id)
);
CREATE TABLE IF NOT EXISTS rel_entries_types (
    entry_id INTEGER NOT NULL REFERENCES entries (entry_id),
    bgc_type_id INTEGER NOT NULL REFERENCES bgc_types (bgc_type_id),
    PRIMARY KEY (entry_id, bgc_type_id)
);
CREATE TABLE IF NOT EXISTS compounds (
    entry_id INTEGER NOT NULL REFERENCES entries (entry_id),
    name TEXT NOT NULL
);
"""

# ``order`` is reserved in SQL
TAXONOMY_COLUMNS = MappingProxyType({
    rank: ("taxonomic_order" if rank == "order" else rank)
    for rank in TAXONOMY_RANKS
})


def _taxonomy_statements(template: str) -> Dict[str, str]:
    return {
        rank: template.format(column=column)
        for rank, column in TAXONOMY_COLUMNS.items()
    }


DEFAULT_LOOKUP_STATEMENTS: Mapping[str, str] = MappingProxyType({
    "type": """
        WITH RECURSIVE all_subtypes (bgc_type_id) AS (
            SELECT bgc_type_id FROM bgc_types WHERE term LIKE ?
            UNION
            SELECT r.bgc_type_id FROM bgc_types r
            INNER JOIN all_subtypes s ON s.bgc_type_id = r.parent_id
        )
        SELECT DISTINCT entry_id FROM rel_entries_types
        WHERE bgc_type_id IN (SELECT bgc_type_id FROM all_subtypes)
        ORDER BY entry_id""",
    "compound": "SELECT DISTINCT entry_id FROM compounds WHERE name LIKE ? ORDER BY entry_id",
    "acc": "SELECT entry_id FROM entries WHERE acc LIKE ? ORDER BY entry_id",
    "completeness": "SELECT entry_id FROM entries WHERE completeness LIKE ? ORDER BY entry_id",
    **_taxonomy_statements(
        "SELECT entry_id FROM entries LEFT JOIN taxa USING (tax_id) "
        "WHERE {column} LIKE ? ORDER BY entry_id"
    ),
})

DEFAULT_EXISTS_STATEMENTS: Mapping[str, str] = MappingProxyType({
    "type": "SELECT COUNT(bgc_type_id) FROM bgc_types WHERE term LIKE ?",
    "acc": "SELECT COUNT(entry_id) FROM entries WHERE acc LIKE ?",
    "compound": "SELECT COUNT(entry_id) FROM compounds WHERE name LIKE ?",
    "genus": "SELECT COUNT(tax_id) FROM taxa WHERE genus LIKE ?",
    "species": "SELECT COUNT(tax_id) FROM taxa WHERE species LIKE ?",
})

DEFAULT_AVAILABLE_STATEMENTS: Mapping[str, str] = MappingProxyType({
    "type": (
        "SELECT DISTINCT term, description FROM bgc_types "
        "WHERE term LIKE ?1 || '%' OR description LIKE ?1 || '%' ORDER BY term"
    ),
    "compound": (
        "SELECT DISTINCT name, name FROM compounds "
        "WHERE name LIKE ? || '%' ORDER BY name"
    ),
    "acc": (
        "SELECT DISTINCT acc, acc FROM entries "
        "WHERE acc LIKE '%' || ? || '%' ORDER BY acc"
    ),
    "completeness": (
        "SELECT DISTINCT completeness, completeness FROM entries "
        "WHERE completeness LIKE ? || '%' ORDER BY completeness"
    ),
    **_taxonomy_statements(
        "SELECT DISTINCT {column}, {column} FROM taxa "
        "WHERE {column} LIKE '%' || ? || '%' ORDER BY {column}"
    ),
})

COUNTS_STATEMENT = """
    SELECT COUNT(entry_id),
           COALESCE(SUM(minimal != 0), 0),
           COALESCE(SUM(lower(completeness) = 'complete'), 0),
           COALESCE(SUM(lower(completeness) = 'incomplete'), 0)
    FROM entries"""

CLUSTER_STATS_STATEMENT = """
    SELECT b.term, COALESCE(b.description, ''), COUNT(r.entry_id) AS entry_count,
           COALESCE(b.safe_class, b.term)
    FROM rel_entries_types r JOIN bgc_types b USING (bgc_type_id)
    GROUP BY b.bgc_type_id
    ORDER BY entry_count DESC, b.term"""

GENUS_STATS_STATEMENT = """
    SELECT t.genus, COUNT(e.entry_id) AS entry_count
    FROM entries e JOIN taxa t USING (tax_id)
    WHERE t.genus IS NOT NULL AND t.genus != ''
    GROUP BY t.genus
    ORDER BY entry_count DESC, t.genus"""

# Stay below SQLite's host parameter limit
GET_BATCH_SIZE = 500


def get_connection(db_path: Union[str, Path]) -> sqlite3.Connection:
    """
    Open an SQLite database for use by an ``SQLEntryStore``.

    The connection may be shared across threads; the store serializes
    access to it.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


class SQLEntryStore(EntryStore):
    """
    Entry store backed by SQL statements.

    Statements take the search term as their single parameter and return
    entry IDs (lookup), one count (exists) or ``(value, description)`` rows
    (available). A category missing from a statement map is unknown for
    that operation.

    Example:
        >>> store = SQLEntryStore.connect(":memory:")
        >>> store.load(entries, bgc_types)
        >>> store.lookup("genus", "streptomyces")
        [1, 23]
    """

    backend = "sqlite"

    def __init__(
        self,
        connection: Any,
        lookup_statements: Optional[Mapping[str, str]] = None,
        exists_statements: Optional[Mapping[str, str]] = None,
        available_statements: Optional[Mapping[str, str]] = None,
        placeholder: str = "?",
        error_class: Type[Exception] = sqlite3.Error,
    ):
        """
        Args:
            connection: Open DB-API connection
            lookup_statements: Category to ID lookup statement
            exists_statements: Category to match count statement
            available_statements: Category to autocomplete statement
            placeholder: Parameter marker of the driver, used by ``get``
            error_class: Driver error wrapped into ``StorageError``
        """
        super().__init__()
        self._connection = connection
        self._lookup = dict(
            DEFAULT_LOOKUP_STATEMENTS if lookup_statements is None else lookup_statements
        )
        self._exists = dict(
            DEFAULT_EXISTS_STATEMENTS if exists_statements is None else exists_statements
        )
        self._available = dict(
            DEFAULT_AVAILABLE_STATEMENTS if available_statements is None else available_statements
        )
        self._placeholder = placeholder
        self._error_class = error_class

    @classmethod
    def connect(cls, db_path: Union[str, Path], **kwargs) -> "SQLEntryStore":
        """Open an SQLite database, creating the schema if needed."""
        store = cls(get_connection(db_path), **kwargs)
        store.create_schema()
        logger.info(f"Opened SQLite entry store at {db_path}")
        return store

    # =========================================================================
    # ENTRY STORE
    # =========================================================================

    @property
    def categories(self) -> List[str]:
        return sorted(self._lookup)

    def lookup(self, category: str, term: str) -> List[int]:
        statement = self._lookup.get(category)
        if statement is None:
            logger.debug(f"No lookup statement for category '{category}'")
            return []

        rows = self._fetchall(statement, (term,))
        with self._lock:
            self._lookups += 1

        seen = set()
        entry_ids = []
        for row in rows:
            entry_id = int(row[0])
            if entry_id not in seen:
                seen.add(entry_id)
                entry_ids.append(entry_id)
        return entry_ids

    def category_exists(self, category: str, term: str) -> int:
        statement = self._exists.get(category)
        if statement is None:
            return 0

        rows = self._fetchall(statement, (term,))
        with self._lock:
            self._existence_checks += 1
        return int(rows[0][0]) if rows else 0

    def get(self, ids: Iterable[int]) -> List[RepositoryEntry]:
        unique_ids = sorted({int(i) for i in ids})
        entries = []
        for start in range(0, len(unique_ids), GET_BATCH_SIZE):
            entries.extend(self._get_batch(unique_ids[start:start + GET_BATCH_SIZE]))
        entries.sort(key=lambda entry: entry.accession)
        return entries

    def available(self, category: str, term: str) -> List[AvailableTerm]:
        statement = self._available.get(category)
        if statement is None:
            raise InvalidCategoryError(f"Invalid category '{category}'")

        rows = self._fetchall(statement, (term,))
        return [AvailableTerm(val=row[0], desc=row[1] or "") for row in rows]

    def count(self) -> int:
        rows = self._fetchall("SELECT COUNT(entry_id) FROM entries", ())
        return int(rows[0][0])

    def repository(self) -> List[RepositoryEntry]:
        rows = self._fetchall("SELECT entry_id FROM entries", ())
        return self.get(row[0] for row in rows)

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def counts(self) -> StatCounts:
        total, minimal, complete, incomplete = self._fetchall(COUNTS_STATEMENT, ())[0]
        return StatCounts(
            total=int(total),
            minimal=int(minimal),
            complete=int(complete),
            incomplete=int(incomplete),
        )

    def cluster_stats(self) -> List[StatCluster]:
        return [
            StatCluster(type=term, description=description, count=int(count), css_class=css_class)
            for term, description, count, css_class in self._fetchall(CLUSTER_STATS_STATEMENT, ())
        ]

    def genus_stats(self) -> List[TaxonStats]:
        return [
            TaxonStats(genus=genus, count=int(count))
            for genus, count in self._fetchall(GENUS_STATS_STATEMENT, ())
        ]

    def result_stats(self, ids: Iterable[int]) -> ResultStats:
        unique_ids = sorted({int(i) for i in ids})
        by_type: Counter = Counter()
        by_phylum: Counter = Counter()

        for start in range(0, len(unique_ids), GET_BATCH_SIZE):
            batch = unique_ids[start:start + GET_BATCH_SIZE]
            markers = ", ".join([self._placeholder] * len(batch))

            for name, count in self._fetchall(
                "SELECT COALESCE(b.name, b.term), COUNT(DISTINCT r.entry_id) "
                "FROM rel_entries_types r JOIN bgc_types b USING (bgc_type_id) "
                f"WHERE r.entry_id IN ({markers}) GROUP BY COALESCE(b.name, b.term)",
                batch,
            ):
                by_type[name] += int(count)

            for phylum, count in self._fetchall(
                "SELECT t.phylum, COUNT(e.entry_id) FROM entries e JOIN taxa t USING (tax_id) "
                f"WHERE e.entry_id IN ({markers}) AND t.phylum IS NOT NULL AND t.phylum != '' "
                "GROUP BY t.phylum",
                batch,
            ):
                by_phylum[phylum] += int(count)

        return ResultStats(
            clusters_by_type=LabelsAndCounts.from_counts(by_type),
            clusters_by_phylum=LabelsAndCounts.from_counts(by_phylum),
        )

    def close(self) -> None:
        with self._lock:
            self._connection.close()

    # =========================================================================
    # SCHEMA AND LOADING
    # =========================================================================

    def create_schema(self) -> None:
        """Create the default SQLite tables if they do not exist."""
        with self._lock:
            try:
                self._connection.executescript(SCHEMA)
            except self._error_class as e:
                raise StorageError(f"Cannot create schema: {e}") from e

    def load(self, entries: Iterable[EntryRecord], bgc_types: Iterable[BgcType] = ()) -> int:
        """
        Insert records into the default schema.

        Types are inserted first so entries can link to them; a type named
        by an entry but not listed in ``bgc_types`` is created bare.

        Returns:
            Number of entries inserted
        """
        entries = list(entries)
        bgc_types = list(bgc_types)

        with self._lock:
            try:
                cursor = self._connection.cursor()
                type_ids = self._insert_types(cursor, bgc_types, entries)
                taxa_ids: Dict[Tuple, int] = {}

                for entry in entries:
                    taxon = tuple(entry.taxonomy.get(rank) for rank in TAXONOMY_RANKS)
                    key = taxon + (entry.organism,)
                    if key not in taxa_ids:
                        cursor.execute(
                            "INSERT INTO taxa (superkingdom, phylum, class, taxonomic_order, "
                            "family, genus, species, name) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                            key,
                        )
                        taxa_ids[key] = cursor.lastrowid

                    cursor.execute(
                        "INSERT INTO entries (entry_id, acc, tax_id, minimal, completeness) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (entry.entry_id, entry.accession, taxa_ids[key],
                         int(entry.minimal), entry.completeness),
                    )
                    cursor.executemany(
                        "INSERT INTO compounds (entry_id, name) VALUES (?, ?)",
                        [(entry.entry_id, name) for name in entry.compounds],
                    )
                    cursor.executemany(
                        "INSERT OR IGNORE INTO rel_entries_types (entry_id, bgc_type_id) VALUES (?, ?)",
                        [(entry.entry_id, type_ids[term.lower()]) for term in entry.types],
                    )

                self._connection.commit()
            except self._error_class as e:
                self._connection.rollback()
                raise StorageError(f"Cannot load entries: {e}") from e
            except StorageError:
                self._connection.rollback()
                raise

        logger.info(f"Loaded {len(entries)} entries and {len(type_ids)} types")
        return len(entries)

    def _insert_types(
        self,
        cursor: Any,
        bgc_types: Sequence[BgcType],
        entries: Sequence[EntryRecord],
    ) -> Dict[str, int]:
        known = {bgc_type.term.lower(): bgc_type for bgc_type in bgc_types}
        for entry in entries:
            for term in entry.types:
                known.setdefault(term.lower(), BgcType(term=term))

        type_ids = {}
        for key, bgc_type in known.items():
            cursor.execute(
                "INSERT INTO bgc_types (term, name, description, safe_class) VALUES (?, ?, ?, ?)",
                (bgc_type.term, bgc_type.name or bgc_type.term,
                 bgc_type.description, bgc_type.css_class or bgc_type.term),
            )
            type_ids[key] = cursor.lastrowid

        for key, bgc_type in known.items():
            if bgc_type.parent is not None:
                parent_id = type_ids.get(bgc_type.parent.lower())
                if parent_id is None:
                    raise StorageError(
                        f"Type '{bgc_type.term}' has unknown parent '{bgc_type.parent}'"
                    )
                cursor.execute(
                    "UPDATE bgc_types SET parent_id = ? WHERE bgc_type_id = ?",
                    (parent_id, type_ids[key]),
                )
        return type_ids

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _fetchall(self, statement: str, params: Sequence[Any]) -> List[Sequence[Any]]:
        with self._lock:
            try:
                cursor = self._connection.cursor()
                try:
                    cursor.execute(statement, params)
                    return cursor.fetchall()
                finally:
                    cursor.close()
            except self._error_class as e:
                raise StorageError(f"Query failed: {e}") from e

    def _get_batch(self, ids: List[int]) -> List[RepositoryEntry]:
        if not ids:
            return []
        markers = ", ".join([self._placeholder] * len(ids))

        rows = self._fetchall(
            "SELECT e.entry_id, e.acc, e.minimal, e.completeness, t.name "
            "FROM entries e LEFT JOIN taxa t USING (tax_id) "
            f"WHERE e.entry_id IN ({markers})",
            ids,
        )
        compounds: Dict[int, List[str]] = {}
        for entry_id, name in self._fetchall(
            f"SELECT entry_id, name FROM compounds WHERE entry_id IN ({markers}) ORDER BY rowid",
            ids,
        ):
            compounds.setdefault(entry_id, []).append(name)

        classes: Dict[int, List[ProductTag]] = {}
        for entry_id, name, css_class in self._fetchall(
            "SELECT r.entry_id, b.name, b.safe_class FROM rel_entries_types r "
            "JOIN bgc_types b USING (bgc_type_id) "
            f"WHERE r.entry_id IN ({markers}) ORDER BY b.bgc_type_id",
            ids,
        ):
            classes.setdefault(entry_id, []).append(ProductTag(name=name, css_class=css_class))

        return [
            RepositoryEntry(
                accession=acc,
                minimal=bool(minimal),
                complete=completeness or "Unknown",
                products=compounds.get(entry_id, []),
                classes=classes.get(entry_id, []),
                organism=organism or "",
            )
            for entry_id, acc, minimal, completeness, organism in rows
        ]

    def __repr__(self) -> str:
        return f"SQLEntryStore(categories={self.categories})"
