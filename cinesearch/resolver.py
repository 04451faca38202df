"""
Person name resolution.

Turns a free-text actor or director name into a TMDB person ID.
"""

from typing import Optional

from .client import TMDBClient
from .models import PersonRef


class NameResolver:
    """Resolves names via TMDB person search, trusting the provider's ranking."""

    def __init__(self, client: TMDBClient):
        self.client = client

    async def resolve(self, name: str) -> Optional[PersonRef]:
        """
        Resolve a person name to the first matching TMDB person.

        Args:
            name: Person name (trimmed before lookup)

        Returns:
            PersonRef for the top result, or None when nobody matches
        """
        data = await self.client.search_people(name.strip())
        results = data.get("results") or []
        if not results:
            return None
        return PersonRef.from_tmdb(results[0])
