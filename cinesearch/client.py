"""
TMDB API client for CineSearch.

Handles all TMDB API interactions including:
- Response caching keyed on the exact resolved request
- Translation of transport/status failures into the CineSearch error taxonomy
- Non-blocking dispatch from async request handlers
"""

import asyncio
from threading import Lock
from typing import Any, Dict, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .cache import ResponseCache, make_cache_key
from .config import Config
from .errors import UpstreamNotFound, UpstreamUnavailable
from .utils import setup_logger

MOVIE_DETAIL_APPENDS = "credits,videos,images,recommendations,reviews"


class TMDBClient:
    """
    Handles all TMDB API interactions.

    Responsibilities:
    - One GET per cache miss, bounded by the configured timeout
    - Cache reads before and writes after every successful fetch
    - Mapping failures to UpstreamUnavailable / UpstreamNotFound
    """

    def __init__(
        self,
        config: Config,
        cache: ResponseCache,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.cache = cache
        self.session = session or self._create_session()
        self.logger = setup_logger("tmdb_client", config.log_dir, config.log_level)
        self.network_calls = 0
        self._counter_lock = Lock()

    def _create_session(self) -> requests.Session:
        """Create requests session with connection pooling and no automatic retries."""
        session = requests.Session()

        # The planner's fallback is the only retry in the system
        retry_strategy = Retry(total=0, raise_on_status=False)

        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=10, pool_maxsize=20)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        session.headers.update(self.config.get_headers())

        return session

    def close(self) -> None:
        self.session.close()

    def fetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Fetch a TMDB document, serving it from the cache when possible.

        Args:
            path: API path (e.g., '/movie/123')
            params: Query parameters (api_key is added automatically)

        Returns:
            Parsed JSON document

        Raises:
            UpstreamNotFound: Provider answered 404
            UpstreamUnavailable: Timeout, transport error, or any other non-2xx
        """
        params = dict(params or {})
        key = make_cache_key(path, params)

        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug(f"Cache hit for {path}")
            return cached

        data = self._request(path, params)
        self.cache.set(key, data)
        return data

    async def afetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Run fetch() in a worker thread so the event loop keeps serving other requests."""
        return await asyncio.to_thread(self.fetch, path, params)

    def _request(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Issue a single GET against the provider."""
        with self._counter_lock:
            self.network_calls += 1

        url = f"{self.config.base_url}{path}"
        query = {"api_key": self.config.api_key, **params}

        try:
            response = self.session.get(url, params=query, timeout=self.config.request_timeout)
        except requests.exceptions.Timeout:
            self.logger.error(
                f"Timeout after {self.config.request_timeout:.0f}s for {path}"
            )
            raise UpstreamUnavailable(path)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request error for {path}: {type(e).__name__}")
            raise UpstreamUnavailable(path)

        if response.status_code == 404:
            self.logger.info(f"Not found (404) for {path}")
            raise UpstreamNotFound(path)

        if not 200 <= response.status_code < 300:
            self.logger.error(f"Upstream error ({response.status_code}) for {path}")
            raise UpstreamUnavailable(path, status=response.status_code)

        try:
            return response.json()
        except ValueError:
            self.logger.error(f"Malformed JSON from {path}")
            raise UpstreamUnavailable(path, status=response.status_code)

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    async def search_movies(
        self,
        query: str,
        page: int = 1,
        year: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Title search.
        Uses: /search/movie?query={query}&primary_release_year={year}
        """
        params: Dict[str, Any] = {"query": query, "page": page, "include_adult": "false"}
        if year is not None:
            params["primary_release_year"] = year
        return await self.afetch("/search/movie", params)

    async def discover_movies(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Filter-based discovery.
        Uses: /discover/movie with with_genres / with_cast / with_crew / with_keywords
        """
        return await self.afetch("/discover/movie", {"include_adult": "false", **params})

    async def search_people(self, name: str) -> Dict[str, Any]:
        """
        Person search with adult content excluded.
        Uses: /search/person?query={name}&include_adult=false
        """
        return await self.afetch("/search/person", {"query": name, "include_adult": "false"})

    async def get_movie_details(self, movie_id: int) -> Dict[str, Any]:
        """
        Full movie document with related data merged in a single call.
        Uses: /movie/{id}?append_to_response=credits,videos,images,recommendations,reviews
        """
        return await self.afetch(
            f"/movie/{movie_id}",
            {"append_to_response": MOVIE_DETAIL_APPENDS},
        )

    async def get_genres(self, language: str = "en") -> Dict[str, Any]:
        """Uses: /genre/movie/list?language={language}"""
        return await self.afetch("/genre/movie/list", {"language": language})

    async def get_trending(self, time_window: str = "week") -> Dict[str, Any]:
        """Uses: /trending/movie/{time_window}"""
        return await self.afetch(f"/trending/movie/{time_window}")
