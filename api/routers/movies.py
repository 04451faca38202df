"""
Movie endpoints for the public API.
"""

import re

from fastapi import APIRouter, Depends

from api.dependencies import get_tmdb_client
from api.exceptions import NotFoundError
from api.schemas.common import ErrorResponse
from cinesearch.client import TMDBClient
from cinesearch.errors import InvalidMovieId, UpstreamNotFound

router = APIRouter()

_MOVIE_ID_PATTERN = re.compile(r"^\d+$")


def parse_movie_id(raw: str) -> int:
    """Positive integer movie ID, or InvalidMovieId."""
    if not _MOVIE_ID_PATTERN.match(raw) or int(raw) <= 0:
        raise InvalidMovieId()
    return int(raw)


@router.get(
    "/movie/{movie_id}",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def get_movie(
    movie_id: str,
    client: TMDBClient = Depends(get_tmdb_client),
):
    """
    Get complete details for a specific movie.

    Credits, videos, images, recommendations and reviews are merged into
    the movie document.
    """
    movie_id_int = parse_movie_id(movie_id)
    try:
        return await client.get_movie_details(movie_id_int)
    except UpstreamNotFound:
        raise NotFoundError("Movie", movie_id_int)
