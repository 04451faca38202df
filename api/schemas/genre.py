"""
Genre-related Pydantic schemas.
"""

from typing import List

from pydantic import BaseModel


class Genre(BaseModel):
    """TMDB genre."""

    id: int
    name: str


class GenreListResponse(BaseModel):
    """Response for genres list endpoint."""

    genres: List[Genre]
