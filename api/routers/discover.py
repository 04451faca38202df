"""
Discovery endpoints for the public API.
"""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_tmdb_client
from api.schemas.common import ErrorResponse, TimeWindow
from cinesearch.client import TMDBClient

router = APIRouter()


@router.get(
    "/trending",
    responses={502: {"model": ErrorResponse}},
)
async def get_trending(
    time_window: TimeWindow = Query(TimeWindow.week, description="Trending window"),
    client: TMDBClient = Depends(get_tmdb_client),
):
    """
    Get trending movies, as ranked by TMDB.
    """
    return await client.get_trending(time_window.value)
