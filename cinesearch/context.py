"""
Service wiring for CineSearch.

An AppContext owns the cache, upstream client, resolver, planner and
abuse-control instances for one process (or one test). Nothing here is a
module-level singleton.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import requests

from .abuse import AbuseControl
from .cache import ResponseCache
from .client import TMDBClient
from .config import Config
from .planner import QueryPlanner
from .resolver import NameResolver
from .utils import setup_logger


@dataclass
class AppContext:
    """Explicitly constructed service graph."""

    config: Config
    cache: ResponseCache
    client: TMDBClient
    resolver: NameResolver
    planner: QueryPlanner
    abuse: AbuseControl

    @classmethod
    def from_config(
        cls,
        config: Config,
        session: Optional[requests.Session] = None,
        cache: Optional[ResponseCache] = None,
        abuse: Optional[AbuseControl] = None,
    ) -> "AppContext":
        if cache is None:
            cache = ResponseCache(ttl_seconds=config.cache_ttl_seconds)
        if abuse is None:
            abuse = AbuseControl.from_config(config)
        client = TMDBClient(config, cache, session=session)
        resolver = NameResolver(client)
        return cls(
            config=config,
            cache=cache,
            client=client,
            resolver=resolver,
            planner=QueryPlanner(client, resolver),
            abuse=abuse,
        )

    def sweep(self) -> None:
        """Purge expired cache entries and idle client windows."""
        expired = self.cache.sweep()
        idle = self.abuse.prune()
        if expired or idle:
            logger = setup_logger("housekeeping", self.config.log_dir, self.config.log_level)
            logger.debug(f"Swept {expired} cache entries, {idle} idle client windows")

    async def run_housekeeping(self) -> None:
        """Sweep on a fixed period until cancelled."""
        while True:
            await asyncio.sleep(self.config.cache_check_period)
            self.sweep()

    def close(self) -> None:
        self.client.close()
