"""
Catalog record types returned by entry stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class ProductTag:
    """Biosynthetic class of a cluster, with the CSS class used to render it."""
    name: str
    css_class: str


@dataclass
class RepositoryEntry:
    """
    Summary of one catalog entry.

    This is what a search materializes its entry IDs into.
    """

    accession: str
    minimal: bool = False
    complete: str = "Unknown"
    products: List[str] = field(default_factory=list)
    classes: List[ProductTag] = field(default_factory=list)
    organism: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AvailableTerm:
    """An autocomplete suggestion for a category."""
    val: str
    desc: str

    def to_dict(self) -> Dict[str, Any]:
        return {"val": self.val, "desc": self.desc}


@dataclass
class BgcType:
    """
    A biosynthetic class in the type hierarchy.

    ``parent`` names the term of the enclosing class, so a search for the
    parent also finds entries of this class.
    """

    term: str
    name: str = ""
    description: str = ""
    css_class: str = ""
    parent: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BgcType":
        return cls(
            term=data["term"],
            name=data.get("name", data["term"]),
            description=data.get("description", ""),
            css_class=data.get("css_class", data["term"]),
            parent=data.get("parent"),
        )


TAXONOMY_RANKS = (
    "superkingdom",
    "phylum",
    "class",
    "order",
    "family",
    "genus",
    "species",
)


@dataclass
class EntryRecord:
    """
    Searchable fields of one catalog entry, as loaded into a store.

    Args:
        entry_id: Integer primary identifier
        accession: Repository accession, e.g. ``BGC0000001``
        types: Terms of the entry's biosynthetic classes
        compounds: Names of the compounds the cluster produces
        taxonomy: Rank name to taxon, see ``TAXONOMY_RANKS``
        organism: Display name of the producing organism
    """

    entry_id: int
    accession: str
    types: List[str] = field(default_factory=list)
    compounds: List[str] = field(default_factory=list)
    taxonomy: Dict[str, str] = field(default_factory=dict)
    organism: str = ""
    minimal: bool = False
    completeness: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntryRecord":
        return cls(
            entry_id=int(data["entry_id"]),
            accession=data["accession"],
            types=list(data.get("types", [])),
            compounds=list(data.get("compounds", [])),
            taxonomy=dict(data.get("taxonomy", {})),
            organism=data.get("organism", ""),
            minimal=bool(data.get("minimal", False)),
            completeness=data.get("completeness"),
        )


# =============================================================================
# STATISTICS
# =============================================================================

@dataclass
class StatCounts:
    """Entry totals of the whole catalog."""
    total: int = 0
    minimal: int = 0
    complete: int = 0
    incomplete: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StatCluster:
    """Number of entries directly assigned one biosynthetic class."""
    type: str
    description: str
    count: int
    css_class: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TaxonStats:
    """Number of entries from one genus."""
    genus: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LabelsAndCounts:
    """Parallel label and count lists, ready to be charted."""
    labels: List[str] = field(default_factory=list)
    data: List[int] = field(default_factory=list)

    @classmethod
    def from_counts(cls, counts: Mapping[str, int]) -> "LabelsAndCounts":
        """Order by count, largest first, then by label."""
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return cls(
            labels=[label for label, _ in ordered],
            data=[count for _, count in ordered],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ResultStats:
    """Breakdown of a set of search results."""
    clusters_by_type: LabelsAndCounts = field(default_factory=LabelsAndCounts)
    clusters_by_phylum: LabelsAndCounts = field(default_factory=LabelsAndCounts)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CatalogStats:
    """Overview of the whole catalog."""
    counts: StatCounts
    clusters: List[StatCluster]
    taxon_stats: List[TaxonStats]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
