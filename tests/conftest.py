import json
from typing import Callable, List

import httpx
import pytest

from blackbeard.constants import ENV_API_KEY, ENV_BASE_URL, ENV_CONFIG_PATH, ENV_DEBUG, ENV_TIMEOUT

MSG_GOOD = "Go Good"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


class MockPirateMetricsServer:
    """
    Stands in for the Pirate Metrics API.

    Always answers 200, with a message describing what was wrong with the
    request, or ``MSG_GOOD``.
    """

    def __init__(self, status_code: int = 200, body: str = MSG_GOOD):
        self.status_code = status_code
        self.body = body
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = json.loads(request.content)

        if not payload.get("api_key"):
            return httpx.Response(200, text="API key is not defined.")
        if not payload.get("data"):
            return httpx.Response(200, text="Request has no data.")

        return httpx.Response(self.status_code, text=self.body)

    @property
    def payloads(self) -> List[dict]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def mock_server() -> MockPirateMetricsServer:
    return MockPirateMetricsServer()


@pytest.fixture
def mock_server_factory() -> Callable[..., MockPirateMetricsServer]:
    return MockPirateMetricsServer


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Remove BLACKBEARD_* variables and point config.ini at an empty temp dir.
    """
    for name in (ENV_API_KEY, ENV_BASE_URL, ENV_DEBUG, ENV_TIMEOUT):
        monkeypatch.delenv(name, raising=False)

    config_path = tmp_path / "config.ini"
    monkeypatch.setenv(ENV_CONFIG_PATH, str(config_path))
    return config_path
