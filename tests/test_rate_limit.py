import asyncio
import logging

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from conftest import TWEET_URL, ok
from tweetvid.infra.rate_limit import MemoryRateLimitBackend, RedisRateLimitBackend


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_window_counts_and_resets():
    clock = FakeClock()
    backend = MemoryRateLimitBackend(clock=clock)

    for _ in range(3):
        assert (await backend.hit("rate:a", 3, 60))[0] is True

    allowed, retry_after = await backend.hit("rate:a", 3, 60)
    assert allowed is False
    assert retry_after == 60

    clock.now += 45
    allowed, retry_after = await backend.hit("rate:a", 3, 60)
    assert allowed is False
    assert retry_after == 15

    clock.now += 15
    assert (await backend.hit("rate:a", 3, 60))[0] is True


@pytest.mark.asyncio
async def test_keys_are_independent():
    backend = MemoryRateLimitBackend(clock=FakeClock())

    assert (await backend.hit("rate:a", 1, 60))[0] is True
    assert (await backend.hit("rate:a", 1, 60))[0] is False
    assert (await backend.hit("rate:b", 1, 60))[0] is True


@pytest.mark.asyncio
async def test_concurrent_hits_are_counted_exactly():
    backend = MemoryRateLimitBackend(clock=FakeClock())

    results = await asyncio.gather(*[backend.hit("rate:a", 20, 900) for _ in range(50)])

    assert sum(1 for allowed, _ in results if allowed) == 20


class StubRedis:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def eval(self, script, numkeys, *args):
        self.calls.append((numkeys, args))
        if self.error:
            raise self.error
        return self.reply


@pytest.mark.asyncio
async def test_redis_backend_passes_key_limit_and_window():
    redis = StubRedis(reply=[1, 0])
    backend = RedisRateLimitBackend(redis)

    assert await backend.hit("rate:10.0.0.1", 20, 900) == (True, 0)
    assert redis.calls == [(1, ("rate:10.0.0.1", 20, 900))]


@pytest.mark.asyncio
async def test_redis_backend_rejection_reaches_client(app, make_client, use_runner):
    use_runner(ok({"title": "t", "formats": []}))
    app.state.rate_limit_backend = RedisRateLimitBackend(StubRedis(reply=[0, 42]))

    async with make_client() as ac:
        response = await ac.post("/api/extract", json={"url": TWEET_URL})

    assert response.status_code == 429
    assert response.headers["retry-after"] == "42"
    assert response.json() == {"error": "Too many requests, please try again later."}


@pytest.mark.asyncio
async def test_redis_outage_fails_open(app, make_client, use_runner, caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("tweetvid"), "propagate", True)
    use_runner(ok({"title": "t", "formats": []}))
    app.state.rate_limit_backend = RedisRateLimitBackend(StubRedis(error=RedisConnectionError("down")))

    with caplog.at_level(logging.WARNING, logger="tweetvid.infra.rate_limit"):
        async with make_client() as ac:
            response = await ac.post("/api/extract", json={"url": TWEET_URL})

    assert response.status_code == 200
    assert any("allowing request" in record.getMessage() for record in caplog.records)
