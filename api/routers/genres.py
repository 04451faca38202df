"""
Genre endpoints for the public API.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_tmdb_client
from api.schemas.common import ErrorResponse
from api.schemas.genre import GenreListResponse
from cinesearch.client import TMDBClient

router = APIRouter()


@router.get(
    "/genres",
    responses={200: {"model": GenreListResponse}, 502: {"model": ErrorResponse}},
)
async def list_genres(
    client: TMDBClient = Depends(get_tmdb_client),
):
    """
    Get the full TMDB movie genre list.

    The provider document is passed through unchanged.
    """
    return await client.get_genres(language="en")
