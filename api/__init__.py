"""
CineSearch REST API.

This module provides a FastAPI-based REST API in front of TMDB:
search with name resolution and strategy fallback, movie details,
genres and trending, all served through a shared response cache.
"""

from api.main import create_app

__all__ = ["create_app"]
