"""
Dependency injection for the API.

Provides dependencies for the per-app service context.
"""

from fastapi import Request

from cinesearch.client import TMDBClient
from cinesearch.config import Config
from cinesearch.context import AppContext
from cinesearch.planner import QueryPlanner


def get_context(request: Request) -> AppContext:
    """Service context owned by the running app."""
    return request.app.state.context


def get_config(request: Request) -> Config:
    return get_context(request).config


def get_tmdb_client(request: Request) -> TMDBClient:
    return get_context(request).client


def get_planner(request: Request) -> QueryPlanner:
    return get_context(request).planner


def client_address(request: Request, trust_proxy: bool = True) -> str:
    """
    Client address used for abuse control.

    Behind one trusted reverse proxy the real client is the last
    X-Forwarded-For hop, the one the proxy appended. Earlier hops come from
    the client and are ignored.
    """
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        proxy_hop = forwarded.split(",")[-1].strip()
        if proxy_hop:
            return proxy_hop
    return request.client.host if request.client else "unknown"
