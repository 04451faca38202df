"""
Search endpoints for the public API.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_planner
from api.schemas.common import ErrorResponse
from api.schemas.search import SearchResponse
from cinesearch.models import SearchRequest
from cinesearch.planner import QueryPlanner

router = APIRouter()


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def search_movies(
    query: Optional[str] = Query(None, description="Movie title keyword(s)"),
    year: Optional[str] = Query(None, description="Primary release year (YYYY)"),
    genre: Optional[str] = Query(None, description="TMDB genre ID"),
    cast: Optional[str] = Query(None, description="Actor name"),
    director: Optional[str] = Query(None, description="Director name"),
    page: str = Query("1", description="Results page (1-500)"),
    planner: QueryPlanner = Depends(get_planner),
):
    """
    Search movies by title, year, genre, cast and/or director.

    At least one criterion is required. Cast and director names are resolved
    to TMDB people; a name with no match yields an empty page, not an error.
    """
    result = await planner.plan(
        SearchRequest(
            title_query=query,
            year=year,
            genre_id=genre,
            cast_name=cast,
            director_name=director,
            page=page,
        )
    )
    return result.to_dict()
