# tests/test_rate_limiter.py

"""Tests for the minimum-spacing request rate limiter."""

import unittest

from ticket_hawk.clients.rate_limiter import RateLimiter
from ticket_hawk.config.settings import Settings


class _FakeClock:
    """Manual clock whose sleep advances time instead of blocking."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestRateLimiter(unittest.TestCase):
    """Verify the leaky-bucket-of-one spacing discipline."""

    def setUp(self) -> None:
        """Build a limiter driven by a fake clock."""
        self.clock = _FakeClock()
        self.limiter = RateLimiter(
            min_interval=0.2,
            clock=self.clock.time,
            sleep=self.clock.sleep,
        )

    def test_default_interval_from_settings(self) -> None:
        """Without an explicit interval the Settings value is used."""
        limiter = RateLimiter()
        self.assertEqual(
            limiter.min_interval, Settings.MIN_REQUEST_INTERVAL,
        )
        self.assertAlmostEqual(limiter.min_interval, 0.2)

    def test_first_request_does_not_wait(self) -> None:
        """No previous request means no suspension."""
        waited = self.limiter.wait()
        self.assertEqual(waited, 0.0)
        self.assertEqual(self.clock.sleeps, [])

    def test_back_to_back_requests_spaced(self) -> None:
        """Consecutive request starts are at least 200ms apart."""
        starts: list[float] = []
        for _ in range(10):
            self.limiter.wait()
            starts.append(self.clock.time())

        gaps = [b - a for a, b in zip(starts, starts[1:])]
        for gap in gaps:
            self.assertGreaterEqual(gap, 0.2 - 1e-9)

    def test_waits_only_remaining_delta(self) -> None:
        """A partially elapsed interval sleeps only for the rest."""
        self.limiter.wait()
        self.clock.advance(0.05)
        waited = self.limiter.wait()
        self.assertAlmostEqual(waited, 0.15)
        self.assertAlmostEqual(self.clock.sleeps[-1], 0.15)

    def test_no_wait_after_interval_elapsed(self) -> None:
        """A caller arriving late proceeds immediately."""
        self.limiter.wait()
        self.clock.advance(0.5)
        waited = self.limiter.wait()
        self.assertEqual(waited, 0.0)
        self.assertEqual(self.clock.sleeps, [])

    def test_no_burst_allowance(self) -> None:
        """Idle time is not banked for later bursts."""
        self.limiter.wait()
        self.clock.advance(5.0)
        self.limiter.wait()
        waited = self.limiter.wait()
        self.assertAlmostEqual(waited, 0.2)

    def test_zero_interval_never_sleeps(self) -> None:
        """A zero interval disables throttling."""
        limiter = RateLimiter(
            min_interval=0.0,
            clock=self.clock.time,
            sleep=self.clock.sleep,
        )
        for _ in range(3):
            self.assertEqual(limiter.wait(), 0.0)
        self.assertEqual(self.clock.sleeps, [])


if __name__ == "__main__":
    unittest.main()
