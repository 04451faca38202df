"""
Per-client abuse control.

A sliding-window counter per client address drives two policies:
a progressive slow-down once an address passes the soft threshold, and a
hard rejection once it passes the ceiling.
"""

import asyncio
import math
import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Awaitable, Callable, Deque, Dict

from .config import Config
from .errors import RateLimited
from .utils import format_duration, setup_logger


@dataclass
class RateDecision:
    """Outcome of counting one request for an address."""

    count: int
    limit: int
    reset_after: float
    delay: float = 0.0

    @property
    def limited(self) -> bool:
        return self.count > self.limit

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)

    def headers(self) -> Dict[str, str]:
        """Standard RateLimit-* response headers."""
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(max(math.ceil(self.reset_after), 0)),
        }


class AbuseControl:
    """
    Sliding-window limiter with progressive delay.

    Thread-safe. Every request is recorded, including rejected ones, so an
    address that keeps hammering stays limited.
    """

    def __init__(
        self,
        window_seconds: float = 60,
        max_requests: int = 40,
        delay_after: int = 30,
        delay_step_ms: int = 500,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger=None,
    ):
        if delay_after > max_requests:
            raise ValueError("delay_after must not exceed max_requests")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.delay_after = delay_after
        self.delay_step = delay_step_ms / 1000.0
        self._clock = clock
        self._sleep = sleep
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = Lock()
        self.logger = logger or setup_logger("abuse_control")

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "AbuseControl":
        return cls(
            window_seconds=config.rate_limit_window_seconds,
            max_requests=config.rate_limit_max,
            delay_after=config.slow_down_after,
            delay_step_ms=config.slow_down_step_ms,
            logger=setup_logger("abuse_control", config.log_dir, config.log_level),
            **kwargs,
        )

    def _trim(self, window: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    def delay_for(self, count: int) -> float:
        """Seconds to hold the request with the given in-window count."""
        if count <= self.delay_after or count > self.max_requests:
            return 0.0
        return (count - self.delay_after) * self.delay_step

    def check(self, address: str) -> RateDecision:
        """
        Record a request from an address and evaluate both policies.

        Args:
            address: Client address

        Returns:
            RateDecision for this request
        """
        with self._lock:
            now = self._clock()
            window = self._windows.get(address)
            if window is None:
                # Beyond limit+1 the exact count no longer changes the outcome
                window = deque(maxlen=self.max_requests + 1)
                self._windows[address] = window
            self._trim(window, now)
            window.append(now)
            count = len(window)
            reset_after = window[0] + self.window_seconds - now

        return RateDecision(
            count=count,
            limit=self.max_requests,
            reset_after=reset_after,
            delay=self.delay_for(count),
        )

    async def admit(self, address: str) -> RateDecision:
        """
        Gate a request: reject above the ceiling, otherwise apply any slow-down.

        Raises:
            RateLimited: The address exceeded max_requests in the window
        """
        decision = self.check(address)
        if decision.limited:
            self.logger.warning(
                f"Rate limit exceeded for {address}: "
                f"{decision.count}/{decision.limit} in {self.window_seconds:.0f}s"
            )
            raise RateLimited(decision.limit, decision.count, decision.reset_after)

        if decision.delay > 0:
            self.logger.info(
                f"Slowing down {address} by {format_duration(decision.delay)} "
                f"(request {decision.count} in window)"
            )
            await self._sleep(decision.delay)

        return decision

    def prune(self) -> int:
        """
        Forget addresses with no requests left in the window.

        Returns:
            Number of addresses removed
        """
        with self._lock:
            now = self._clock()
            idle = []
            for address, window in self._windows.items():
                self._trim(window, now)
                if not window:
                    idle.append(address)
            for address in idle:
                del self._windows[address]
        return len(idle)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
