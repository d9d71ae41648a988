"""
Unit tests for entry stores.
"""

import sqlite3
import time

import pytest
import yaml

from bgcdb.core.exceptions import InvalidCategoryError, StorageError
from bgcdb.core.models import (
    AvailableTerm,
    BgcType,
    EntryRecord,
    LabelsAndCounts,
    ProductTag,
    StatCluster,
    StatCounts,
    TaxonStats,
)
from bgcdb.storage import (
    MemoryEntryStore,
    SQLEntryStore,
    create_store,
    get_connection,
    like_pattern,
)


class TestLookup:
    """Test category lookups on both backends."""

    @pytest.mark.parametrize("category, term, expected", [
        ("type", "lanthipeptide", [23, 535]),
        ("type", "ripp", [23, 535, 1200]),
        ("type", "nrps", [1, 42, 1070]),
        ("type", "NRPS", [1, 42, 1070]),
        ("type", "pks", [1070]),
        ("genus", "streptomyces", [1, 535, 1070]),
        ("genus", "strepto%", [1, 535, 1070]),
        ("species", "coli", [1200]),
        ("phylum", "Actinobacteria", [1, 42, 535, 1070]),
        ("superkingdom", "bacteria", [1, 23, 42, 535, 1070, 1200]),
        ("compound", "nisin A", [23]),
        ("compound", "nisin%", [23]),
        ("acc", "BGC0000042", [42]),
        ("acc", "BGC000007_", []),
        ("completeness", "complete", [23, 535, 1200]),
        ("order", "Streptomycetales", []),
        ("genus", "Bacillus", []),
    ])
    def test_lookup(self, any_store, category, term, expected):
        assert any_store.lookup(category, term) == expected

    def test_unknown_category(self, any_store):
        assert any_store.lookup("planet", "mars") == []

    def test_empty_category(self, any_store):
        assert any_store.lookup("", "nrps") == []
        assert any_store.category_exists("", "nrps") == 0


class TestCategoryExists:
    """Test existence checks on both backends."""

    @pytest.mark.parametrize("category, term, expected", [
        ("type", "ripp", 1),
        ("type", "lanthipeptide", 1),
        ("acc", "BGC0000001", 1),
        ("compound", "vancomycin", 1),
        ("genus", "Streptomyces", 3),
        ("species", "coli", 1),
        ("type", "streptomyces", 0),
        ("acc", "ripp", 0),
    ])
    def test_counts(self, any_store, category, term, expected):
        assert any_store.category_exists(category, term) == expected

    def test_unknown_category(self, any_store):
        assert any_store.category_exists("planet", "mars") == 0


class TestGet:
    """Test entry materialization on both backends."""

    def test_ordered_by_accession(self, any_store):
        entries = any_store.get([1070, 1, 23])
        assert [e.accession for e in entries] == ["BGC0000001", "BGC0000023", "BGC0001070"]

    def test_skips_unknown_and_duplicates(self, any_store):
        entries = any_store.get([999, 42, 42])
        assert [e.accession for e in entries] == ["BGC0000042"]

    def test_fields(self, any_store):
        entry = any_store.get([1070])[0]

        assert entry.minimal is True
        assert entry.complete == "incomplete"
        assert entry.products == ["daptomycin"]
        assert entry.classes == [ProductTag("NRP", "nrps"), ProductTag("Polyketide", "pks")]
        assert entry.organism == "Streptomyces roseosporus"

    def test_unknown_completeness(self, any_store):
        assert any_store.get([42])[0].complete == "Unknown"

    def test_to_dict(self, any_store):
        data = any_store.get([23])[0].to_dict()

        assert data == {
            "accession": "BGC0000023",
            "minimal": False,
            "complete": "complete",
            "products": ["nisin A"],
            "classes": [{"name": "Lanthipeptide", "css_class": "ripp"}],
            "organism": "Lactococcus lactis",
        }

    def test_empty(self, any_store):
        assert any_store.get([]) == []


class TestAvailable:
    """Test autocompletion on both backends."""

    def test_type_by_term(self, any_store):
        assert any_store.available("type", "lan") == [
            AvailableTerm("lanthipeptide", "Lanthipeptide"),
        ]

    def test_type_by_description(self, any_store):
        assert any_store.available("type", "nonribosomal") == [
            AvailableTerm("nrps", "Nonribosomal peptide"),
        ]

    def test_genus_substring(self, any_store):
        assert any_store.available("genus", "myces") == [
            AvailableTerm("Streptomyces", "Streptomyces"),
        ]

    def test_compound_prefix(self, any_store):
        assert any_store.available("compound", "nisin") == [AvailableTerm("nisin A", "nisin A")]
        assert any_store.available("compound", "isin") == []

    def test_unknown_category(self, any_store):
        with pytest.raises(InvalidCategoryError, match="planet"):
            any_store.available("planet", "mars")


class TestCount:
    """Test entry counting."""

    def test_count(self, any_store):
        assert any_store.count() == 6

    def test_stats(self, any_store):
        any_store.lookup("type", "ripp")
        any_store.category_exists("type", "ripp")

        stats = any_store.stats()

        assert stats.entry_count == 6
        assert stats.backend in ("memory", "sqlite")
        assert stats.lookups == 1
        assert stats.existence_checks == 1


class TestLikePattern:
    """Test LIKE pattern translation."""

    def test_literal(self):
        assert like_pattern("nisin").fullmatch("NISIN")
        assert not like_pattern("nisin").fullmatch("nisin A")

    def test_wildcards(self):
        assert like_pattern("nis%").fullmatch("nisin A")
        assert like_pattern("n_sin").fullmatch("nisin")
        assert not like_pattern("n_sin").fullmatch("nsin")

    def test_special_characters_literal(self):
        assert like_pattern("A3(2)").fullmatch("a3(2)")
        assert not like_pattern("a.c").fullmatch("abc")

    def test_repeated_and_trailing_wildcards(self):
        assert like_pattern("%%nisin%%").fullmatch("nisin")
        assert like_pattern("nisin%").fullmatch("nisin")
        assert like_pattern("%").fullmatch("")
        assert not like_pattern("_").fullmatch("")

    def test_wildcard_backs_up(self):
        """Test a later mismatch lets an earlier % take more characters."""
        assert like_pattern("%ab%c").fullmatch("xaabyc")
        assert like_pattern("s%s").fullmatch("streptomyces")
        assert not like_pattern("s%s_").fullmatch("streptomyces")

    def test_many_wildcards_stay_fast(self):
        genera = [f"{'a' * 29}{c}" for c in "cdefgh"]
        store = MemoryEntryStore(entries=[
            EntryRecord(i, f"BGC{i:07d}", taxonomy={"genus": genus})
            for i, genus in enumerate(genera, start=1)
        ])

        started = time.perf_counter()
        assert store.lookup("genus", "%a" * 20 + "%b") == []
        assert store.category_exists("genus", "%a" * 20 + "%b") == 0
        assert time.perf_counter() - started < 1.0


class TestCatalogStats:
    """Test catalog statistics on both backends."""

    def test_repository(self, any_store):
        entries = any_store.repository()

        assert [e.accession for e in entries] == [
            "BGC0000001", "BGC0000023", "BGC0000042",
            "BGC0000535", "BGC0001070", "BGC0001200",
        ]
        assert entries == any_store.get([1, 23, 42, 535, 1070, 1200])

    def test_counts(self, any_store):
        assert any_store.counts() == StatCounts(total=6, minimal=1, complete=3, incomplete=2)

    def test_cluster_stats(self, any_store):
        assert any_store.cluster_stats() == [
            StatCluster("lanthipeptide", "Lanthipeptide", 2, "ripp"),
            StatCluster("nrps", "Nonribosomal peptide", 2, "nrps"),
            StatCluster("glycopeptide", "Glycopeptide", 1, "nrps"),
            StatCluster("lassopeptide", "Lasso peptide", 1, "ripp"),
            StatCluster("pks", "Polyketide", 1, "pks"),
        ]

    def test_genus_stats(self, any_store):
        assert any_store.genus_stats() == [
            TaxonStats("Streptomyces", 3),
            TaxonStats("Amycolatopsis", 1),
            TaxonStats("Escherichia", 1),
            TaxonStats("Lactococcus", 1),
        ]

    def test_result_stats(self, any_store):
        stats = any_store.result_stats([23, 535, 1070, 1070, 9999])

        assert stats.clusters_by_type == LabelsAndCounts(
            labels=["Lanthipeptide", "NRP", "Polyketide"], data=[2, 1, 1],
        )
        assert stats.clusters_by_phylum == LabelsAndCounts(
            labels=["Actinobacteria", "Firmicutes"], data=[2, 1],
        )

    def test_result_stats_empty(self, any_store):
        assert any_store.result_stats([]).to_dict() == {
            "clusters_by_type": {"labels": [], "data": []},
            "clusters_by_phylum": {"labels": [], "data": []},
        }

    def test_catalog_stats(self, any_store):
        stats = any_store.catalog_stats().to_dict()

        assert stats["counts"]["total"] == 6
        assert stats["clusters"][0]["type"] == "lanthipeptide"
        assert stats["taxon_stats"][0] == {"genus": "Streptomyces", "count": 3}

    def test_empty_store(self):
        with SQLEntryStore.connect(":memory:") as store:
            assert store.counts() == StatCounts()
            assert store.cluster_stats() == []
            assert store.genus_stats() == []
            assert store.repository() == []
        assert MemoryEntryStore().counts() == StatCounts()


class TestMemoryEntryStore:
    """Test memory store specifics."""

    def test_empty(self):
        store = MemoryEntryStore()

        assert store.count() == 0
        assert store.lookup("type", "ripp") == []
        assert store.category_exists("type", "ripp") == 0

    def test_deep_hierarchy(self):
        store = MemoryEntryStore(
            entries=[EntryRecord(7, "BGC0000007", types=["class2"])],
            bgc_types=[
                BgcType("lanthipeptide", parent="ripp"),
                BgcType("class2", parent="lanthipeptide"),
                BgcType("ripp"),
            ],
        )

        assert store.lookup("type", "ripp") == [7]
        assert store.lookup("type", "lanthipeptide") == [7]
        assert store.lookup("type", "class2") == [7]

    def test_type_without_hierarchy(self):
        """Test entry types missing from the hierarchy are still searchable."""
        store = MemoryEntryStore(entries=[EntryRecord(1, "BGC0000001", types=["terpene"])])

        assert store.lookup("type", "terpene") == [1]
        assert store.category_exists("type", "terpene") == 1
        assert store.get([1])[0].classes == [ProductTag("terpene", "terpene")]

    def test_custom_extractors(self, entry_records):
        store = MemoryEntryStore(
            entries=entry_records,
            extractors={"organism": lambda record: [record.organism]},
        )

        assert store.lookup("organism", "Lactococcus lactis") == [23]
        assert store.lookup("genus", "Lactococcus") == []
        assert "type" in store.categories

    def test_add(self, memory_store):
        memory_store.add(EntryRecord(2000, "BGC0002000", types=["pks"]))

        assert memory_store.count() == 7
        assert memory_store.lookup("type", "pks") == [1070, 2000]

    def test_from_dict(self):
        store = MemoryEntryStore.from_dict({
            "bgc_types": [{"term": "ripp"}, {"term": "lanthipeptide", "parent": "ripp"}],
            "entries": [
                {"entry_id": 5, "accession": "BGC0000005", "types": ["lanthipeptide"],
                 "taxonomy": {"genus": "Streptomyces"}},
            ],
        })

        assert store.lookup("type", "ripp") == [5]
        assert store.lookup("genus", "streptomyces") == [5]

    def test_from_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(yaml.safe_dump({
            "entries": [{"entry_id": 1, "accession": "BGC0000001", "compounds": ["nisin"]}],
        }))

        store = MemoryEntryStore.from_file(path)

        assert store.lookup("compound", "nisin") == [1]

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(StorageError):
            MemoryEntryStore.from_file(tmp_path / "missing.yaml")


class TestSQLEntryStore:
    """Test SQL store specifics."""

    def test_custom_statements(self, tmp_path, entry_records, bgc_types):
        connection = get_connection(tmp_path / "mibig.db")
        base = SQLEntryStore(connection)
        base.create_schema()
        base.load(entry_records, bgc_types)

        store = SQLEntryStore(
            connection,
            lookup_statements={
                "organism": "SELECT entry_id FROM entries JOIN taxa USING (tax_id) "
                            "WHERE name LIKE ? ORDER BY entry_id",
            },
        )

        assert store.lookup("organism", "Lactococcus lactis") == [23]
        assert store.lookup("genus", "Lactococcus") == []
        assert store.categories == ["organism"]
        connection.close()

    def test_backend_error_wrapped(self):
        store = SQLEntryStore(
            get_connection(":memory:"),
            lookup_statements={"broken": "SELECT entry_id FROM no_such_table WHERE x LIKE ?"},
        )

        with pytest.raises(StorageError) as exc_info:
            store.lookup("broken", "x")
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)

    def test_closed_connection(self):
        store = SQLEntryStore.connect(":memory:")
        store.close()

        with pytest.raises(StorageError):
            store.count()

    def test_persistence(self, tmp_path, entry_records, bgc_types):
        path = tmp_path / "mibig.db"
        with SQLEntryStore.connect(path) as store:
            store.load(entry_records, bgc_types)

        with SQLEntryStore.connect(path) as store:
            assert store.count() == 6
            assert store.lookup("type", "ripp") == [23, 535, 1200]

    def test_unknown_parent_rolled_back(self):
        store = SQLEntryStore.connect(":memory:")

        with pytest.raises(StorageError, match="unknown parent"):
            store.load(
                [EntryRecord(1, "BGC0000001", types=["lanthipeptide"])],
                [BgcType("lanthipeptide", parent="ripp")],
            )

        assert store.count() == 0
        store.close()


class TestCreateStore:
    """Test the store factory."""

    def test_memory(self):
        store = create_store("memory")
        assert isinstance(store, MemoryEntryStore)
        assert store.count() == 0

    def test_memory_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text('{"entries": [{"entry_id": 3, "accession": "BGC0000003"}]}')

        store = create_store("MEMORY", str(path))

        assert store.lookup("acc", "BGC0000003") == [3]

    def test_sqlite(self, tmp_path):
        store = create_store("sqlite", str(tmp_path / "mibig.db"))

        assert isinstance(store, SQLEntryStore)
        assert store.count() == 0
        store.close()

    def test_sqlite_requires_path(self):
        with pytest.raises(ValueError, match="path required"):
            create_store("sqlite")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown store backend"):
            create_store("postgres")
