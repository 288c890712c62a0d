import asyncio
import json
from typing import List, Optional

import httpx
import pytest

from tweetvid.api.deps import get_runner
from tweetvid.config.settings import Config
from tweetvid.main import create_app
from tweetvid.models.internal import CompletedProcess

TWEET_URL = "https://twitter.com/nasa/status/1234567890"


class FakeRunner:
    """Stands in for ProcessRunner: replays canned results and records argv"""

    def __init__(self, *results):
        self.results = list(results)
        self.calls: List[List[str]] = []

    async def __call__(self, cmd: List[str], timeout: Optional[float] = None) -> CompletedProcess:
        self.calls.append(cmd)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException) or (isinstance(result, type) and issubclass(result, BaseException)):
            raise result
        return result


def ok(stdout, returncode: int = 0) -> CompletedProcess:
    if isinstance(stdout, (dict, list)):
        stdout = json.dumps(stdout)
    return CompletedProcess(returncode=returncode, stdout=stdout.encode(), stderr=b"")


def failed(stderr: str, returncode: int = 1) -> CompletedProcess:
    return CompletedProcess(returncode=returncode, stdout=b"", stderr=stderr.encode())


def timed_out():
    return asyncio.TimeoutError()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def app(config):
    application = create_app(config)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def use_runner(app):
    def install(*results) -> FakeRunner:
        runner = FakeRunner(*results)
        app.dependency_overrides[get_runner] = lambda: runner
        return runner
    return install


@pytest.fixture
def make_client(app):
    def factory(ip: str = "127.0.0.1") -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=app, client=(ip, 123))
        return httpx.AsyncClient(transport=transport, base_url="http://test")
    return factory
