"""
Upstream client tests: caching, error mapping, secret handling.
"""

import asyncio

import pytest
import requests

from cinesearch.errors import UpstreamNotFound, UpstreamUnavailable

from conftest import MOVIE_LIST


class TestFetchCaching:
    """Cache is consulted before every network call."""

    def test_second_identical_fetch_is_served_from_cache(self, context, fake_session):
        client = context.client

        first = client.fetch("/search/movie", {"query": "Inception", "page": 1})
        second = client.fetch("/search/movie", {"page": 1, "query": "Inception"})

        assert first == second == MOVIE_LIST
        assert client.network_calls == 1
        assert len(fake_session.calls) == 1

    def test_different_params_fetch_again(self, context, fake_session):
        client = context.client

        client.fetch("/search/movie", {"query": "Inception", "page": 1})
        client.fetch("/search/movie", {"query": "Inception", "page": 2})

        assert client.network_calls == 2

    def test_api_key_sent_but_not_part_of_cache_key(self, context, fake_session):
        context.client.fetch("/genre/movie/list", {"language": "en"})

        path, params = fake_session.calls[0]
        assert path == "/genre/movie/list"
        assert params["api_key"] == "test-api-key"
        assert all("test-api-key" not in key for key in context.cache._entries)

    def test_failures_are_not_cached(self, context, fake_session):
        fake_session.add("/trending/movie/week", {"status_message": "boom"}, status=500)

        with pytest.raises(UpstreamUnavailable):
            context.client.fetch("/trending/movie/week")
        with pytest.raises(UpstreamUnavailable):
            context.client.fetch("/trending/movie/week")

        assert context.client.network_calls == 2
        assert len(context.cache) == 0

    def test_fetch_is_bounded_by_request_timeout(self, context, fake_session):
        context.client.fetch("/search/movie", {"query": "Inception"})
        asyncio.run(context.client.get_genres())

        assert fake_session.timeouts == [8.0, 8.0]

    def test_async_fetch_uses_same_cache(self, context):
        client = context.client

        asyncio.run(client.get_genres())
        asyncio.run(client.get_genres())

        assert client.network_calls == 1


class TestErrorMapping:
    """Provider failures become UpstreamUnavailable / UpstreamNotFound."""

    def test_404_is_not_found(self, context):
        with pytest.raises(UpstreamNotFound) as exc_info:
            context.client.fetch("/movie/999999999")
        assert exc_info.value.path == "/movie/999999999"

    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    def test_other_non_2xx_is_unavailable(self, context, fake_session, status):
        fake_session.add("/search/movie", {"status_message": "internal detail"}, status=status)

        with pytest.raises(UpstreamUnavailable) as exc_info:
            context.client.fetch("/search/movie", {"query": "x"})

        assert exc_info.value.status == status
        assert "internal detail" not in exc_info.value.message

    def test_timeout_is_unavailable(self, context, fake_session, timeout_error):
        fake_session.fail("/search/movie", timeout_error)

        with pytest.raises(UpstreamUnavailable):
            context.client.fetch("/search/movie", {"query": "x"})

    def test_connection_error_is_unavailable(self, context, fake_session):
        fake_session.fail("/search/movie", requests.exceptions.ConnectionError("refused"))

        with pytest.raises(UpstreamUnavailable):
            context.client.fetch("/search/movie", {"query": "x"})

    def test_malformed_json_is_unavailable(self, context, fake_session):
        fake_session.add("/search/movie", ValueError("not json"))

        with pytest.raises(UpstreamUnavailable):
            context.client.fetch("/search/movie", {"query": "x"})


class TestEndpoints:
    """Endpoint wrappers build the expected TMDB requests."""

    def test_movie_details_appends_related_data(self, context, fake_session):
        asyncio.run(context.client.get_movie_details(27205))

        params = fake_session.calls_to("/movie/27205")[0]
        assert params["append_to_response"] == "credits,videos,images,recommendations,reviews"

    def test_person_search_excludes_adult(self, context, fake_session):
        asyncio.run(context.client.search_people("Christopher Nolan"))

        params = fake_session.calls_to("/search/person")[0]
        assert params["query"] == "Christopher Nolan"
        assert params["include_adult"] == "false"

    def test_close_closes_session(self, context, fake_session):
        context.close()
        assert fake_session.closed
