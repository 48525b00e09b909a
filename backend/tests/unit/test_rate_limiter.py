"""
Unit tests for the fixed-window rate limiter.
"""

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from utils.rate_limiter import FixedWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter("test", 3, 60, clock=FakeClock())

        assert [limiter.hit("ip")[0] for _ in range(4)] == [True, True, True, False]

    def test_retry_after(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter("test", 1, 60, clock=clock)
        limiter.hit("ip")
        clock.now += 15

        assert limiter.hit("ip") == (False, 45)

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter("test", 1, 60, clock=clock)
        limiter.hit("ip")
        clock.now += 60

        assert limiter.hit("ip") == (True, 0)

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter("test", 1, 60, clock=FakeClock())

        assert limiter.hit("a")[0] is True
        assert limiter.hit("b")[0] is True
        assert limiter.hit("a")[0] is False

    def test_reset(self):
        limiter = FixedWindowRateLimiter("test", 1, 60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()

        assert limiter.hit("a")[0] is True

    def test_dependency_returns_429(self):
        limiter = FixedWindowRateLimiter("test", 2, 60, clock=FakeClock())
        app = FastAPI()

        @app.get("/limited", dependencies=[Depends(limiter.dependency())])
        async def limited():
            return {"ok": True}

        @app.get("/other", dependencies=[Depends(limiter.dependency())])
        async def other():
            return {"ok": True}

        client = TestClient(app)
        assert client.get("/limited").status_code == 200
        assert client.get("/limited").status_code == 200

        response = client.get("/limited")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"

        # Limits are per path
        assert client.get("/other").status_code == 200
