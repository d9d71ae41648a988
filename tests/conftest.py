"""
Pytest fixtures for bgcdb tests.
"""

import pytest
from typing import Dict, Iterable, List, Tuple

from bgcdb.core.models import (
    AvailableTerm,
    BgcType,
    EntryRecord,
    RepositoryEntry,
    ResultStats,
    StatCluster,
    StatCounts,
    TaxonStats,
)
from bgcdb.storage import EntryStore, MemoryEntryStore, SQLEntryStore


class StubStore(EntryStore):
    """Store answering from fixed tables, recording every existence check."""

    backend = "stub"

    def __init__(
        self,
        lookups: Dict[Tuple[str, str], List[int]] = None,
        counts: Dict[Tuple[str, str], int] = None,
    ):
        super().__init__()
        self.lookups = lookups or {}
        self.matches = counts or {}
        self.checked: List[Tuple[str, str]] = []

    @property
    def categories(self) -> List[str]:
        return sorted({category for category, _ in self.lookups})

    def lookup(self, category: str, term: str) -> List[int]:
        return list(self.lookups.get((category, term), []))

    def category_exists(self, category: str, term: str) -> int:
        self.checked.append((category, term))
        return self.matches.get((category, term), 0)

    def get(self, ids: Iterable[int]) -> List[RepositoryEntry]:
        return [RepositoryEntry(accession=f"BGC{i:07d}") for i in sorted(set(ids))]

    def available(self, category: str, term: str) -> List[AvailableTerm]:
        return []

    def count(self) -> int:
        return len({i for ids in self.lookups.values() for i in ids})

    def repository(self) -> List[RepositoryEntry]:
        return self.get(i for ids in self.lookups.values() for i in ids)

    def counts(self) -> StatCounts:
        return StatCounts(total=self.count())

    def cluster_stats(self) -> List[StatCluster]:
        return []

    def genus_stats(self) -> List[TaxonStats]:
        return []

    def result_stats(self, ids: Iterable[int]) -> ResultStats:
        return ResultStats()


@pytest.fixture
def stub_store_cls():
    """The StubStore class, for tests building their own tables."""
    return StubStore


@pytest.fixture
def stub_store() -> StubStore:
    """Store where type ripp is entry 535 and type nrps is entry 1070."""
    return StubStore(
        lookups={
            ("type", "ripp"): [535],
            ("type", "nrps"): [1070],
        },
        counts={
            ("type", "ripp"): 1,
            ("type", "nrps"): 1,
        },
    )


@pytest.fixture
def bgc_types() -> List[BgcType]:
    """Small biosynthetic class hierarchy."""
    return [
        BgcType(
            "ripp",
            name="RiPP",
            description="Ribosomally synthesized and post-translationally modified peptide",
            css_class="ripp",
        ),
        BgcType("lanthipeptide", name="Lanthipeptide", description="Lanthipeptide",
                css_class="ripp", parent="ripp"),
        BgcType("lassopeptide", name="Lasso peptide", description="Lasso peptide",
                css_class="ripp", parent="ripp"),
        BgcType("nrps", name="NRP", description="Nonribosomal peptide", css_class="nrps"),
        BgcType("glycopeptide", name="Glycopeptide", description="Glycopeptide",
                css_class="nrps", parent="nrps"),
        BgcType("pks", name="Polyketide", description="Polyketide", css_class="pks"),
    ]


def _taxonomy(phylum: str, genus: str, species: str) -> Dict[str, str]:
    return {
        "superkingdom": "Bacteria",
        "phylum": phylum,
        "genus": genus,
        "species": species,
    }


@pytest.fixture
def entry_records() -> List[EntryRecord]:
    """Six catalog entries spread over the type hierarchy."""
    return [
        EntryRecord(
            1, "BGC0000001",
            types=["nrps"],
            compounds=["testomycin A"],
            taxonomy=_taxonomy("Actinobacteria", "Streptomyces", "coelicolor"),
            organism="Streptomyces coelicolor A3(2)",
            completeness="incomplete",
        ),
        EntryRecord(
            23, "BGC0000023",
            types=["lanthipeptide"],
            compounds=["nisin A"],
            taxonomy=_taxonomy("Firmicutes", "Lactococcus", "lactis"),
            organism="Lactococcus lactis",
            completeness="complete",
        ),
        EntryRecord(
            42, "BGC0000042",
            types=["glycopeptide"],
            compounds=["vancomycin"],
            taxonomy=_taxonomy("Actinobacteria", "Amycolatopsis", "orientalis"),
            organism="Amycolatopsis orientalis",
        ),
        EntryRecord(
            535, "BGC0000535",
            types=["lanthipeptide"],
            compounds=["cinnamycin"],
            taxonomy=_taxonomy("Actinobacteria", "Streptomyces", "cinnamoneus"),
            organism="Streptomyces cinnamoneus",
            completeness="complete",
        ),
        EntryRecord(
            1070, "BGC0001070",
            types=["nrps", "pks"],
            compounds=["daptomycin"],
            taxonomy=_taxonomy("Actinobacteria", "Streptomyces", "roseosporus"),
            organism="Streptomyces roseosporus",
            minimal=True,
            completeness="incomplete",
        ),
        EntryRecord(
            1200, "BGC0001200",
            types=["lassopeptide"],
            compounds=["microcin J25"],
            taxonomy=_taxonomy("Proteobacteria", "Escherichia", "coli"),
            organism="Escherichia coli",
            completeness="complete",
        ),
    ]


@pytest.fixture
def memory_store(entry_records, bgc_types) -> MemoryEntryStore:
    """Memory store holding the sample catalog."""
    return MemoryEntryStore(entries=entry_records, bgc_types=bgc_types)


@pytest.fixture
def sqlite_store(entry_records, bgc_types):
    """In-memory SQLite store holding the sample catalog."""
    store = SQLEntryStore.connect(":memory:")
    store.load(entry_records, bgc_types)
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, memory_store, sqlite_store) -> EntryStore:
    """Both store backends, holding the same catalog."""
    if request.param == "memory":
        return memory_store
    return sqlite_store
