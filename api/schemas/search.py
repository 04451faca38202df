"""
Search-related Pydantic schemas.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class SearchResponse(BaseModel):
    """Response for the movie search endpoint. Movie entries are TMDB summaries as-is."""

    results: List[Dict[str, Any]]
    total_results: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    page: int = Field(..., ge=1, description="Requested page")
