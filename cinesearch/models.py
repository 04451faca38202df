"""
Data models for CineSearch.

Provides dataclasses for type-safe data handling between the
planner, the name resolver and the upstream client.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class SearchRequest:
    """
    Multi-field movie search as received from a client.

    Values may arrive as raw query-string text; the planner normalizes
    them into typed values before deciding on a strategy.
    """

    title_query: Optional[str] = None
    year: Optional[Union[int, str]] = None
    genre_id: Optional[Union[int, str]] = None
    cast_name: Optional[str] = None
    director_name: Optional[str] = None
    page: Union[int, str] = 1

    def has_criteria(self) -> bool:
        """Whether at least one search field is present."""
        return any(
            value is not None
            for value in (
                self.title_query,
                self.year,
                self.genre_id,
                self.cast_name,
                self.director_name,
            )
        )


@dataclass
class PersonRef:
    """Person resolved from a free-text name."""

    name: str
    id: int

    @classmethod
    def from_tmdb(cls, data: dict) -> "PersonRef":
        """Create PersonRef from a TMDB person search result."""
        return cls(name=data.get("name", "Unknown"), id=int(data["id"]))


@dataclass
class SearchResult:
    """Search response envelope. Movie summaries are passed through untouched."""

    results: List[Dict[str, Any]] = field(default_factory=list)
    total_results: int = 0
    total_pages: int = 0
    page: int = 1

    @classmethod
    def empty(cls, page: int) -> "SearchResult":
        return cls(results=[], total_results=0, total_pages=0, page=page)

    @classmethod
    def from_tmdb(cls, data: dict, page: int) -> "SearchResult":
        """Shape an upstream paginated document, echoing the requested page."""
        return cls(
            results=list(data.get("results") or []),
            total_results=int(data.get("total_results") or 0),
            total_pages=int(data.get("total_pages") or 0),
            page=page,
        )

    def is_empty(self) -> bool:
        return not self.results

    def to_dict(self) -> dict:
        """Convert to the wire format exposed by the HTTP API."""
        return {
            "results": self.results,
            "total_results": self.total_results,
            "total_pages": self.total_pages,
            "page": self.page,
        }


@dataclass
class CacheEntry:
    """Cached upstream document. Immutable once stored."""

    key: str
    value: Any
    expires_at: float
