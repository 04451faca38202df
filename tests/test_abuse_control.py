"""
Abuse control tests: sliding-window limiter and progressive slow-down.
"""

import asyncio

import pytest

from cinesearch.abuse import AbuseControl
from cinesearch.config import Config
from cinesearch.errors import RateLimited

from conftest import FakeClock, RecordingSleep


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def abuse(clock, sleep):
    return AbuseControl(
        window_seconds=60,
        max_requests=40,
        delay_after=30,
        delay_step_ms=500,
        clock=clock,
        sleep=sleep,
    )


def admit(abuse, address="203.0.113.7"):
    return asyncio.run(abuse.admit(address))


class TestHardLimit:
    """More than 40 requests in 60 seconds are rejected."""

    def test_41st_request_is_rate_limited(self, abuse):
        for _ in range(40):
            admit(abuse)

        with pytest.raises(RateLimited) as exc_info:
            admit(abuse)

        assert exc_info.value.limit == 40
        assert exc_info.value.count == 41
        assert 0 < exc_info.value.reset_after <= 60

    def test_addresses_are_counted_separately(self, abuse):
        for _ in range(40):
            admit(abuse, "198.51.100.1")

        decision = admit(abuse, "198.51.100.2")
        assert decision.count == 1

    def test_window_slides(self, abuse, clock):
        for _ in range(40):
            admit(abuse)
            clock.advance(1)

        # Oldest request (t=0) falls out of the trailing window at t=60
        clock.advance(20.5)
        decision = admit(abuse)
        assert not decision.limited

    def test_rejected_requests_keep_counting(self, abuse, clock):
        for _ in range(40):
            admit(abuse)
        for _ in range(5):
            with pytest.raises(RateLimited):
                admit(abuse)

        clock.advance(30)
        with pytest.raises(RateLimited):
            admit(abuse)

    def test_limit_resets_after_quiet_window(self, abuse, clock):
        for _ in range(41):
            try:
                admit(abuse)
            except RateLimited:
                pass

        clock.advance(60)
        assert admit(abuse).count == 1


class TestProgressiveDelay:
    """Requests 31 through 40 are held for (n - 30) * 500ms."""

    def test_first_30_requests_are_not_delayed(self, abuse, sleep):
        for _ in range(30):
            decision = admit(abuse)
            assert decision.delay == 0
        assert sleep.delays == []

    def test_delay_grows_linearly(self, abuse, sleep):
        for _ in range(40):
            admit(abuse)

        assert sleep.delays == [(n - 30) * 0.5 for n in range(31, 41)]

    def test_rejected_request_is_not_delayed(self, abuse, sleep):
        for _ in range(40):
            admit(abuse)
        with pytest.raises(RateLimited):
            admit(abuse)

        assert len(sleep.delays) == 10

    def test_delay_for(self, abuse):
        assert abuse.delay_for(30) == 0
        assert abuse.delay_for(31) == 0.5
        assert abuse.delay_for(40) == 5.0
        assert abuse.delay_for(41) == 0


class TestBookkeeping:
    """Headers, pruning and configuration."""

    def test_decision_headers(self, abuse):
        decision = abuse.check("192.0.2.1")
        headers = decision.headers()

        assert headers["RateLimit-Limit"] == "40"
        assert headers["RateLimit-Remaining"] == "39"
        assert headers["RateLimit-Reset"] == "60"

    def test_prune_drops_idle_addresses(self, abuse, clock):
        abuse.check("192.0.2.1")
        clock.advance(30)
        abuse.check("192.0.2.2")
        clock.advance(31)

        assert abuse.prune() == 1
        assert len(abuse) == 1

    def test_from_config(self, clock, sleep):
        config = Config(api_key="k", rate_limit_max=5, slow_down_after=2, slow_down_step_ms=100)
        abuse = AbuseControl.from_config(config, clock=clock, sleep=sleep)

        for _ in range(5):
            asyncio.run(abuse.admit("a"))

        assert sleep.delays == pytest.approx([0.1, 0.2, 0.3])
        with pytest.raises(RateLimited):
            asyncio.run(abuse.admit("a"))

    def test_delay_threshold_cannot_exceed_limit(self):
        with pytest.raises(ValueError):
            AbuseControl(max_requests=10, delay_after=20)
