"""
Search endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from ..models import (
    SearchRequest,
    SearchResponse,
    RepositoryEntryModel,
    ResultStatsModel,
    AvailableTermModel,
    QueryErrorResponse,
)
from ..dependencies import get_store, get_parser, get_resolver, get_evaluator
from ...core.exceptions import MalformedQueryError
from ...query.evaluator import QueryEvaluator
from ...query.parser import QueryParser
from ...query.resolver import CategoryResolver
from ...query.terms import Query
from ...storage import EntryStore
from ...utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)

QUERY_ERRORS = {400: {"model": QueryErrorResponse, "description": "Invalid query"}}


@router.post(
    "/search",
    response_model=SearchResponse,
    responses=QUERY_ERRORS,
    summary="Search clusters",
    description="Evaluate a query string or serialized query and return the matching clusters.",
)
def search(
    request: SearchRequest,
    parser: QueryParser = Depends(get_parser),
    evaluator: QueryEvaluator = Depends(get_evaluator),
    store: EntryStore = Depends(get_store),
):
    """Search the repository."""
    if request.query is not None:
        query = Query.from_dict(request.query, max_depth=parser.max_depth)
    elif request.search_string:
        query = Query(terms=parser.parse(request.search_string))
    else:
        raise MalformedQueryError("Invalid query")

    entry_ids = evaluator.evaluate(query.terms)
    logger.debug(f"{query.query_text()} matched {len(entry_ids)} entries")

    clusters = store.get(entry_ids)
    if request.paginate:
        clusters = clusters[request.offset:request.offset + request.paginate]

    resolved = None
    if request.verbose:
        resolved = Query(
            terms=evaluator.resolver.resolve_tree(query.terms),
            query_type=query.query_type,
            return_type=query.return_type,
        ).to_dict()

    return SearchResponse(
        total=len(entry_ids),
        clusters=[RepositoryEntryModel.model_validate(c.to_dict()) for c in clusters],
        offset=request.offset,
        paginate=request.paginate,
        stats=ResultStatsModel.model_validate(store.result_stats(entry_ids).to_dict()),
        query=resolved,
    )


@router.get(
    "/convert",
    response_model=Dict[str, Any],
    responses=QUERY_ERRORS,
    summary="Convert query string",
    description="Parse a query string and resolve the categories of its bare terms.",
)
def convert(
    search_string: str,
    parser: QueryParser = Depends(get_parser),
    resolver: CategoryResolver = Depends(get_resolver),
):
    """Convert a query string to its serialized form."""
    terms = resolver.resolve_tree(parser.parse(search_string))
    return Query(terms=terms).to_dict()


@router.get(
    "/available/{category}/{term}",
    response_model=List[AvailableTermModel],
    responses=QUERY_ERRORS,
    summary="Autocomplete term",
    description="List the known values of a category that match a partial term.",
)
def available(
    category: str,
    term: str,
    store: EntryStore = Depends(get_store),
):
    """Autocomplete a search term."""
    return [t.to_dict() for t in store.available(category, term)]
