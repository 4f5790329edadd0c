"""Per-address login throttling."""
import pytest

from tests.conftest import PASSWORD
from utils.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSlidingWindowLimiter:
    def test_admits_up_to_limit(self):
        limiter = SlidingWindowLimiter(3, 60, clock=FakeClock())
        assert [limiter.hit("k")[0] for _ in range(4)] == [True, True, True, False]

    def test_retry_after_points_at_oldest_hit(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60, clock=clock)
        limiter.hit("k")
        clock.now += 10
        limiter.hit("k")
        clock.now += 5

        allowed, retry_after = limiter.hit("k")

        assert allowed is False
        assert retry_after == 45

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60, clock=clock)
        limiter.hit("k")
        clock.now += 30
        limiter.hit("k")
        assert limiter.hit("k")[0] is False

        clock.now += 31
        assert limiter.hit("k")[0] is True
        assert limiter.hit("k")[0] is False

    def test_rejections_are_not_counted(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 60, clock=clock)
        limiter.hit("k")
        for _ in range(10):
            clock.now += 5
            limiter.hit("k")

        clock.now = 1061
        assert limiter.hit("k")[0] is True

    def test_keys_are_independent(self):
        limiter = SlidingWindowLimiter(1, 60, clock=FakeClock())
        assert limiter.hit("a")[0] is True
        assert limiter.hit("b")[0] is True
        assert limiter.hit("a")[0] is False
        assert limiter.hit("c")[0] is True

    def test_idle_keys_are_dropped(self):
        clock = FakeClock(0.0)
        limiter = SlidingWindowLimiter(5, 60, clock=clock)
        for i in range(1000):
            limiter.hit(f"10.0.{i // 256}.{i % 256}")
        assert len(limiter) == 1000

        clock.now = 10000.0
        limiter.hit("198.51.100.1")

        assert len(limiter) == 1

    def test_keys_inside_window_survive_sweep(self):
        clock = FakeClock(0.0)
        limiter = SlidingWindowLimiter(1, 60, clock=clock)
        limiter.hit("old")
        clock.now = 30.0
        limiter.hit("recent")

        clock.now = 70.0
        limiter.hit("new")

        assert len(limiter) == 2
        assert limiter.hit("recent")[0] is False

    def test_reset(self):
        limiter = SlidingWindowLimiter(1, 60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset("a")
        assert limiter.hit("a")[0] is True

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            SlidingWindowLimiter(0, 60)


class TestLoginThrottle:
    def test_sixth_request_in_window_is_refused(self, login, alice):
        for _ in range(5):
            login("alice", "wrongpw", ip="192.0.2.7")

        resp = login("alice", PASSWORD, ip="192.0.2.7")

        assert resp.status_code == 429
        body = resp.get_json()
        assert body["error"] == "RATE_LIMITED"
        assert body["message"] == "Muitas tentativas de login. Tente novamente em 15 minutos."
        assert 0 < int(resp.headers["Retry-After"]) <= 900

    def test_counts_requests_not_failures(self, login, alice):
        for _ in range(5):
            assert login("alice", PASSWORD, ip="192.0.2.8").status_code == 200
        assert login("alice", PASSWORD, ip="192.0.2.8").status_code == 429

    def test_applies_before_validation(self, client):
        for _ in range(5):
            client.post("/api/auth/login", json={}, environ_base={"REMOTE_ADDR": "192.0.2.9"})
        resp = client.post("/api/auth/login", json={}, environ_base={"REMOTE_ADDR": "192.0.2.9"})
        assert resp.status_code == 429

    def test_other_addresses_unaffected(self, login, alice):
        for _ in range(6):
            login("alice", "wrongpw", ip="192.0.2.10")
        assert login("alice", "wrongpw", ip="192.0.2.11").status_code == 401

    def test_only_login_is_throttled(self, client, login, alice):
        for _ in range(6):
            login("nobody", "x", ip="192.0.2.12")
        resp = client.post(
            "/api/auth/refresh-token",
            json={"refresh_token": "x"},
            environ_base={"REMOTE_ADDR": "192.0.2.12"},
        )
        assert resp.status_code == 401
