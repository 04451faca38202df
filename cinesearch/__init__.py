"""
CineSearch - Movie search broker for TMDB.

This package provides:
- Validation and normalization of multi-field movie searches
- Person name resolution for cast and director filters
- Title-search vs. discover strategy selection with fallback
- A time-bounded cache of upstream responses
- Per-client rate limiting with progressive slow-down
"""

from .config import Config
from .models import SearchRequest, SearchResult, PersonRef, CacheEntry
from .cache import ResponseCache, make_cache_key
from .client import TMDBClient
from .resolver import NameResolver
from .planner import QueryPlanner, SearchPlan, Strategy, build_plan, validate_request
from .abuse import AbuseControl, RateDecision
from .context import AppContext

__version__ = "1.0.0"
__all__ = [
    "Config",
    "SearchRequest",
    "SearchResult",
    "PersonRef",
    "CacheEntry",
    "ResponseCache",
    "make_cache_key",
    "TMDBClient",
    "NameResolver",
    "QueryPlanner",
    "SearchPlan",
    "Strategy",
    "build_plan",
    "validate_request",
    "AbuseControl",
    "RateDecision",
    "AppContext",
]
