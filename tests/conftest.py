"""Pytest configuration and shared fixtures."""

import httpx
import pytest

from gemini_file_search.client import FileSearchClient
from gemini_file_search.config import ClientConfig, get_config
from gemini_file_search.transport import HttpTransport

BASE_URL = "https://generativelanguage.googleapis.com"
SESSION_URL = "https://generativelanguage.googleapis.com/upload/v1beta/files?upload_id=session123"


class FakeService:
    """
    Request handler for ``httpx.MockTransport``.

    Records every request and answers with queued responses in order. A
    queued exception is raised instead of answering.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def queue(self, status: int = 200, json=None, content: bytes = b"", headers=None) -> None:
        if json is not None:
            self.responses.append(httpx.Response(status, json=json, headers=headers))
        else:
            self.responses.append(httpx.Response(status, content=content, headers=headers))

    def fail_with(self, error: Exception) -> None:
        self.responses.append(error)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    """Monotonic clock that only advances when ``sleep`` is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep real credentials and .env files out of the tests."""
    for name in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "GEMINI_MODEL",
        "GEMINI_BASE_URL",
        "GEMINI_CREDENTIAL_PLACEMENT",
        "GEMINI_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def config():
    """Configuration with a test API key."""
    return ClientConfig(api_key="test-key")


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def transport(service):
    """HttpTransport whose requests are answered by the fake service."""
    with HttpTransport(client=httpx.Client(transport=httpx.MockTransport(service))) as transport:
        yield transport


@pytest.fixture
def client(config, transport):
    return FileSearchClient(config, transport=transport)


@pytest.fixture
def fake_clock():
    return FakeClock()
