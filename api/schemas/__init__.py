"""Pydantic schemas for API responses."""

from api.schemas.common import ErrorResponse, HealthResponse, TimeWindow
from api.schemas.genre import Genre, GenreListResponse
from api.schemas.search import SearchResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "TimeWindow",
    "Genre",
    "GenreListResponse",
    "SearchResponse",
]
