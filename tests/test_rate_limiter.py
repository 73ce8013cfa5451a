"""Tests for the fixed-window rate limiter."""

from __future__ import annotations

import threading

from blueprint.services.rate_limiter import RateLimiter


class TestAdmit:
    def test_admits_exactly_max_requests_per_window(self, rate_limiter, clock):
        results = []
        for _ in range(15):
            results.append(rate_limiter.admit("1.2.3.4"))
            clock.advance(1)

        assert results == [True] * 10 + [False] * 5

    def test_keys_are_independent(self, rate_limiter):
        for _ in range(10):
            assert rate_limiter.admit("a")

        assert not rate_limiter.admit("a")
        assert rate_limiter.admit("b")

    def test_window_expiry_admits_again_as_fresh(self, rate_limiter, clock):
        for _ in range(10):
            rate_limiter.admit("a")
        assert not rate_limiter.admit("a")

        clock.advance(60.001)

        assert rate_limiter.admit("a")
        assert rate_limiter.status("a").remaining == 9

    def test_window_is_fixed_not_sliding(self, rate_limiter, clock):
        rate_limiter.admit("a")
        clock.advance(59)
        for _ in range(9):
            assert rate_limiter.admit("a")
        assert not rate_limiter.admit("a")

        # Reset is anchored at the first admitted call, not the last one
        clock.advance(1.5)
        assert rate_limiter.admit("a")

    def test_concurrent_admission_never_exceeds_cap(self, clock):
        limiter = RateLimiter(max_requests=50, window=60, clock=clock)
        admitted = []

        def worker():
            for _ in range(20):
                admitted.append(limiter.admit("shared"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(admitted) == 50


class TestStatus:
    def test_unknown_key_reports_full_quota(self, rate_limiter, clock):
        info = rate_limiter.status("nobody")

        assert info.remaining == 10
        assert info.reset_at == clock.now + 60

    def test_remaining_counts_down_and_floors_at_zero(self, rate_limiter):
        for _ in range(3):
            rate_limiter.admit("a")
        assert rate_limiter.status("a").remaining == 7

        for _ in range(20):
            rate_limiter.admit("a")
        assert rate_limiter.status("a").remaining == 0

    def test_status_does_not_consume_quota(self, rate_limiter):
        for _ in range(5):
            rate_limiter.status("a")

        assert rate_limiter.status("a").remaining == 10
        assert len(rate_limiter) == 0

    def test_retry_after_rounds_up(self, rate_limiter, clock):
        rate_limiter.admit("a")
        clock.advance(15.2)

        assert rate_limiter.retry_after("a") == 45


def test_sweep_removes_only_expired_records(rate_limiter, clock):
    rate_limiter.admit("old")
    clock.advance(45)
    rate_limiter.admit("new")
    clock.advance(20)

    removed = rate_limiter.sweep()

    assert removed == 1
    assert len(rate_limiter) == 1
    assert rate_limiter.status("new").remaining == 9


def test_admit_purges_expired_records_so_the_table_stays_bounded(rate_limiter, clock):
    for i in range(5000):
        rate_limiter.admit(f"10.0.{i // 256}.{i % 256}")
    assert len(rate_limiter) == 5000

    clock.advance(3600)
    rate_limiter.admit("192.168.1.1")

    assert len(rate_limiter) == 1
    assert rate_limiter.status("192.168.1.1").remaining == 9


def test_active_records_survive_the_purge(rate_limiter, clock):
    rate_limiter.admit("stale")
    clock.advance(50)
    for _ in range(3):
        rate_limiter.admit("busy")
    clock.advance(15)

    rate_limiter.admit("late")

    assert len(rate_limiter) == 2
    assert rate_limiter.status("busy").remaining == 7
