"""
Catalog overview endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from typing import List

from ..models import CatalogStatsResponse, RepositoryEntryModel
from ..dependencies import get_store
from ...storage import EntryStore

router = APIRouter()


@router.get(
    "/stats",
    response_model=CatalogStatsResponse,
    summary="Catalog statistics",
    description="Entry totals, entries per biosynthetic class and entries per genus.",
)
def stats(store: EntryStore = Depends(get_store)):
    """Catalog statistics."""
    return store.catalog_stats().to_dict()


@router.get(
    "/repository",
    response_model=List[RepositoryEntryModel],
    summary="List repository",
    description="Summaries of all entries, ordered by accession.",
)
def repository(store: EntryStore = Depends(get_store)):
    """List all entries."""
    return [entry.to_dict() for entry in store.repository()]
