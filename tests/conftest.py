"""
Shared fixtures for CineSearch tests.

Provides a fake TMDB HTTP session, fresh service contexts, and sample data.
"""

import pytest
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from fastapi.testclient import TestClient

from cinesearch.abuse import AbuseControl
from cinesearch.config import Config
from cinesearch.context import AppContext


# =============================================================================
# SAMPLE DATA
# =============================================================================

TMDB_BASE_URL = "https://api.themoviedb.org/3"

EMPTY_MOVIE_LIST = {"page": 1, "results": [], "total_results": 0, "total_pages": 0}

MOVIE_LIST = {
    "page": 1,
    "results": [
        {"id": 27205, "title": "Inception", "release_date": "2010-07-16", "vote_average": 8.4},
    ],
    "total_results": 1,
    "total_pages": 1,
}

DISCOVER_LIST = {
    "page": 1,
    "results": [
        {"id": 155, "title": "The Dark Knight", "release_date": "2008-07-16", "vote_average": 8.5},
        {"id": 157336, "title": "Interstellar", "release_date": "2014-11-05", "vote_average": 8.4},
    ],
    "total_results": 2,
    "total_pages": 1,
}

PERSON_RESULTS = {
    "page": 1,
    "results": [
        {"id": 525, "name": "Christopher Nolan"},
        {"id": 9999, "name": "Christopher Nolan Jr."},
    ],
}

EMPTY_PERSON = {"page": 1, "results": []}

GENRES = {"genres": [{"id": 28, "name": "Action"}, {"id": 35, "name": "Comedy"}]}

MOVIE_DETAIL = {
    "id": 27205,
    "title": "Inception",
    "credits": {"cast": [], "crew": []},
    "videos": {"results": []},
    "images": {"backdrops": []},
    "recommendations": {"results": []},
    "reviews": {"results": []},
}


# =============================================================================
# FAKE TMDB SESSION
# =============================================================================

class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


Handler = Callable[[Dict[str, Any]], Tuple[int, Any]]


class FakeSession:
    """
    In-memory TMDB replacement that records every GET.

    Routes are matched on the path after the base URL. Unregistered paths
    answer 404.
    """

    def __init__(self, base_url: str = TMDB_BASE_URL):
        self.base_url = base_url
        self.routes: Dict[str, Handler] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.timeouts: List[Optional[float]] = []
        self.headers: Dict[str, str] = {}
        self.closed = False

    def add(self, path: str, payload: Any, status: int = 200) -> None:
        self.routes[path] = lambda params: (status, payload)

    def add_handler(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    def fail(self, path: str, exc: Exception) -> None:
        def handler(params):
            raise exc
        self.routes[path] = handler

    def get(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None):
        path = url[len(self.base_url):]
        params = dict(params or {})
        self.calls.append((path, params))
        self.timeouts.append(timeout)
        handler = self.routes.get(path)
        if handler is None:
            return FakeResponse(404, {"status_message": "The resource could not be found."})
        status, payload = handler(params)
        return FakeResponse(status, payload)

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [params for call_path, params in self.calls if call_path == path]

    def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def config():
    """Test configuration: abuse control off, no log files."""
    return Config(api_key="test-api-key", environment="test")


@pytest.fixture
def fake_session():
    """Fake TMDB with default routes for every endpoint the API uses."""
    session = FakeSession()
    session.add("/search/movie", MOVIE_LIST)
    session.add("/discover/movie", DISCOVER_LIST)
    session.add("/search/person", PERSON_RESULTS)
    session.add("/genre/movie/list", GENRES)
    session.add("/trending/movie/week", MOVIE_LIST)
    session.add("/movie/27205", MOVIE_DETAIL)
    return session


@pytest.fixture
def context(config, fake_session):
    """Fresh service context per test."""
    return AppContext.from_config(config, session=fake_session)


@pytest.fixture
def planner(context):
    return context.planner


@pytest.fixture
def api_client(context):
    """Provide FastAPI test client over a fresh context."""
    from api.main import create_app

    app = create_app(context=context)
    with TestClient(app) as client:
        yield client


def _abuse_limited_app(fake_session, trust_proxy):
    from api.main import create_app

    sleep = RecordingSleep()
    clock = FakeClock()
    config = Config(api_key="test-api-key", environment="production", trust_proxy=trust_proxy)
    abuse = AbuseControl.from_config(config, clock=clock, sleep=sleep)
    context = AppContext.from_config(config, session=fake_session, abuse=abuse)
    return create_app(context=context), sleep, clock


@pytest.fixture
def limited_client(fake_session):
    """
    Test client with abuse control enabled.

    Yields (client, sleep recorder, clock) so tests can inspect slow-down
    delays and move the window.
    """
    app, sleep, clock = _abuse_limited_app(fake_session, trust_proxy=False)
    with TestClient(app) as client:
        yield client, sleep, clock


@pytest.fixture
def proxied_client(fake_session):
    """Abuse-controlled test client that trusts X-Forwarded-For."""
    app, _, _ = _abuse_limited_app(fake_session, trust_proxy=True)
    with TestClient(app) as client:
        yield client, app.state.context.abuse


@pytest.fixture
def timeout_error():
    return requests.exceptions.Timeout("read timed out")
