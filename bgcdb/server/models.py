"""
Pydantic models for API request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# =============================================================================
# COMMON MODELS
# =============================================================================

class QueryErrorResponse(BaseModel):
    """Error response for rejected queries."""
    message: str
    error: bool = True


class VersionResponse(BaseModel):
    """API version information."""
    api: str
    build_time: str = ""
    git_version: str = ""


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    uptime_seconds: float
    backend: str
    entry_count: int
    lookups: int = 0
    existence_checks: int = 0


# =============================================================================
# ENTRY MODELS
# =============================================================================

class ProductTagModel(BaseModel):
    """Biosynthetic class of a cluster."""
    name: str
    css_class: str


class RepositoryEntryModel(BaseModel):
    """Summary of one repository entry."""
    accession: str
    minimal: bool = False
    complete: str = "Unknown"
    products: List[str] = Field(default_factory=list)
    classes: List[ProductTagModel] = Field(default_factory=list)
    organism: str = ""


class AvailableTermModel(BaseModel):
    """Autocomplete suggestion."""
    val: str
    desc: str


# =============================================================================
# STATISTICS MODELS
# =============================================================================

class StatCountsModel(BaseModel):
    """Entry totals of the catalog."""
    total: int
    minimal: int
    complete: int
    incomplete: int


class StatClusterModel(BaseModel):
    """Entries per biosynthetic class."""
    type: str
    description: str
    count: int
    css_class: str


class TaxonStatsModel(BaseModel):
    """Entries per genus."""
    genus: str
    count: int


class CatalogStatsResponse(BaseModel):
    """Catalog overview."""
    counts: StatCountsModel
    clusters: List[StatClusterModel]
    taxon_stats: List[TaxonStatsModel]


class LabelsAndCountsModel(BaseModel):
    """Chart series: labels with their counts, largest first."""
    labels: List[str] = Field(default_factory=list)
    data: List[int] = Field(default_factory=list)


class ResultStatsModel(BaseModel):
    """Breakdown of all matched clusters."""
    clusters_by_type: LabelsAndCountsModel
    clusters_by_phylum: LabelsAndCountsModel


# =============================================================================
# SEARCH MODELS
# =============================================================================

class SearchRequest(BaseModel):
    """
    Search request.

    Either ``query`` (a serialized query) or ``search_string`` must be set;
    ``query`` wins when both are.
    """
    query: Optional[Dict[str, Any]] = None
    search_string: Optional[str] = None

    # 0 returns all clusters
    paginate: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)

    # Echo the query with resolved categories
    verbose: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"search_string": "ripp AND (streptomyces OR lactococcus)"},
                {
                    "query": {
                        "search": "cluster",
                        "return_type": "json",
                        "terms": {"term_type": "expr", "category": "type", "term": "nrps"},
                    },
                    "paginate": 25,
                    "offset": 0,
                },
            ]
        }
    }


class SearchResponse(BaseModel):
    """Search results."""
    total: int
    clusters: List[RepositoryEntryModel]
    offset: int
    paginate: int
    stats: Optional[ResultStatsModel] = None
    query: Optional[Dict[str, Any]] = None
