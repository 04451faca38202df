"""
Query planning for movie searches.

Validates a SearchRequest, resolves person names to TMDB IDs, chooses
between the title-search and discover strategies, and falls back to a
title search when discovery comes back empty.
"""

import asyncio
import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .client import TMDBClient
from .errors import InvalidGenre, InvalidPage, InvalidYear, MissingCriteria, NameTooLong
from .models import PersonRef, SearchRequest, SearchResult
from .resolver import NameResolver
from .utils import setup_logger

MIN_YEAR = 1880
FUTURE_YEARS = 5
MAX_PAGE = 500
MAX_NAME_LENGTH = 100
DISCOVER_SORT = "popularity.desc"

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_GENRE_PATTERN = re.compile(r"^\d+$")


class Strategy(str, Enum):
    """Upstream query strategy."""

    title = "title"
    discover = "discover"


@dataclass
class SearchPlan:
    """Upstream call chosen for a normalized request."""

    strategy: Strategy
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return "/search/movie" if self.strategy is Strategy.title else "/discover/movie"


# =============================================================================
# NORMALIZATION & VALIDATION
# =============================================================================

def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_int(value: Any) -> Optional[int]:
    """Parse a strict base-10 integer; None when the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_PATTERN.match(value.strip()):
        return int(value.strip())
    return None


def max_year(today: Optional[date] = None) -> int:
    return (today or date.today()).year + FUTURE_YEARS


def validate_request(request: SearchRequest, today: Optional[date] = None) -> SearchRequest:
    """
    Normalize and validate a search request.

    Text fields are trimmed and blank values treated as absent. Checks run
    in a fixed order and the first failure is raised.

    Args:
        request: Raw request (values may be query-string text)
        today: Reference date for the upper year bound

    Returns:
        A new SearchRequest holding ints for year/genre_id/page and trimmed names

    Raises:
        MissingCriteria, InvalidYear, InvalidPage, InvalidGenre, NameTooLong
    """
    normalized = SearchRequest(
        title_query=_clean_text(request.title_query),
        year=_clean_text(request.year) if isinstance(request.year, str) else request.year,
        genre_id=(
            _clean_text(request.genre_id) if isinstance(request.genre_id, str) else request.genre_id
        ),
        cast_name=_clean_text(request.cast_name),
        director_name=_clean_text(request.director_name),
        page=request.page,
    )

    if not normalized.has_criteria():
        raise MissingCriteria()

    if normalized.year is not None:
        year = _parse_int(normalized.year)
        if year is None or year < MIN_YEAR or year > max_year(today):
            raise InvalidYear()
        normalized = replace(normalized, year=year)

    raw_page = normalized.page
    if raw_page is None or (isinstance(raw_page, str) and not raw_page.strip()):
        raw_page = 1
    page = _parse_int(raw_page)
    if page is None or page < 1 or page > MAX_PAGE:
        raise InvalidPage()
    normalized = replace(normalized, page=page)

    if normalized.genre_id is not None:
        genre_id = normalized.genre_id
        if isinstance(genre_id, bool):
            raise InvalidGenre()
        if isinstance(genre_id, int):
            if genre_id < 0:
                raise InvalidGenre()
        elif isinstance(genre_id, str) and _GENRE_PATTERN.match(genre_id):
            genre_id = int(genre_id)
        else:
            raise InvalidGenre()
        normalized = replace(normalized, genre_id=genre_id)

    if normalized.cast_name is not None and len(normalized.cast_name) > MAX_NAME_LENGTH:
        raise NameTooLong("cast", MAX_NAME_LENGTH)
    if normalized.director_name is not None and len(normalized.director_name) > MAX_NAME_LENGTH:
        raise NameTooLong("director", MAX_NAME_LENGTH)

    return normalized


# =============================================================================
# STRATEGY SELECTION
# =============================================================================

def title_plan(request: SearchRequest) -> SearchPlan:
    """Keyword search restricted to movie titles."""
    params: Dict[str, Any] = {"query": request.title_query, "page": request.page}
    if request.year is not None:
        params["year"] = request.year
    return SearchPlan(Strategy.title, params)


def build_plan(
    request: SearchRequest,
    cast: Optional[PersonRef] = None,
    director: Optional[PersonRef] = None,
) -> SearchPlan:
    """
    Choose the upstream strategy for a validated request.

    Title search is used only when a title is the sole non-year criterion;
    everything else, including a bare year, goes through discover.
    """
    has_filters = request.genre_id is not None or cast is not None or director is not None
    if not has_filters and request.title_query is not None:
        return title_plan(request)

    params: Dict[str, Any] = {"page": request.page, "sort_by": DISCOVER_SORT}
    if request.title_query is not None:
        params["with_keywords"] = request.title_query
    if request.year is not None:
        params["primary_release_year"] = request.year
    if request.genre_id is not None:
        params["with_genres"] = str(request.genre_id)
    if cast is not None:
        params["with_cast"] = str(cast.id)
    if director is not None:
        params["with_crew"] = str(director.id)
    return SearchPlan(Strategy.discover, params)


# =============================================================================
# PLANNER
# =============================================================================

class QueryPlanner:
    """
    Executes movie searches against TMDB.

    Each search makes at most four upstream calls: cast and director
    resolution (concurrently), the primary strategy, and one fallback.
    """

    def __init__(self, client: TMDBClient, resolver: NameResolver):
        self.client = client
        self.resolver = resolver
        self.logger = setup_logger("query_planner", client.config.log_dir, client.config.log_level)

    async def plan(self, request: SearchRequest) -> SearchResult:
        """
        Run a search end to end.

        Args:
            request: Raw search request

        Returns:
            SearchResult echoing the requested page. An unresolved cast or
            director name yields an empty result rather than an error.

        Raises:
            SearchValidationError: On invalid input, before any upstream call
            UpstreamError: When the provider fails
        """
        request = validate_request(request)
        page = int(request.page)

        cast, director = await self._resolve_people(request)
        if request.cast_name is not None and cast is None:
            self.logger.info(f"No person match for cast '{request.cast_name}'")
            return SearchResult.empty(page)
        if request.director_name is not None and director is None:
            self.logger.info(f"No person match for director '{request.director_name}'")
            return SearchResult.empty(page)

        plan = build_plan(request, cast, director)
        data = await self._execute(plan)

        if (
            plan.strategy is Strategy.discover
            and request.title_query is not None
            and not data.get("results")
        ):
            self.logger.info(
                f"Discover returned no results for '{request.title_query}', "
                f"falling back to title search"
            )
            data = await self._execute(title_plan(request))

        return SearchResult.from_tmdb(data, page)

    async def _resolve_people(
        self, request: SearchRequest
    ) -> Tuple[Optional[PersonRef], Optional[PersonRef]]:
        """Resolve cast and director names in parallel."""
        cast, director = await asyncio.gather(
            self._resolve(request.cast_name),
            self._resolve(request.director_name),
            return_exceptions=True,
        )
        for outcome in (cast, director):
            if isinstance(outcome, BaseException):
                raise outcome
        return cast, director

    async def _resolve(self, name: Optional[str]) -> Optional[PersonRef]:
        if name is None:
            return None
        return await self.resolver.resolve(name)

    async def _execute(self, plan: SearchPlan) -> Dict[str, Any]:
        if plan.strategy is Strategy.title:
            return await self.client.search_movies(
                plan.params["query"],
                page=plan.params["page"],
                year=plan.params.get("year"),
            )
        return await self.client.discover_movies(plan.params)
