import os
from pathlib import Path
from typing import Any, Callable, List

import httpx
import pytest
from calltrace.client import ServiceClient
from calltrace.core.operation import Operation
from dotenv import load_dotenv

from tests.helpers.sample_services import BASE_URL, user_api

CALLTRACE_ENV_VARS = [
    "CALLTRACE_BASE_URL",
    "CALLTRACE_TIMEOUT",
    "CALLTRACE_INVOCATION_LOG_LEVEL",
    "CALLTRACE_REDACT_PARAMETERS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """AUTOUSE: Loads .env.test when present and clears calltrace variables leaking from the shell.

    The original environment is restored by monkeypatch after each test.
    """
    project_root = Path(__file__).parent.parent
    original_environ = os.environ.copy()
    for name in CALLTRACE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    env_file_path = project_root / ".env.test"
    if env_file_path.exists():
        load_dotenv(dotenv_path=env_file_path, override=True)

    yield

    os.environ.clear()
    os.environ.update(original_environ)


class RemoteApi:
    """Stand-in declaring type for operations built by hand in tests."""

    def method_x(self, count: int, label: str, flag: bool): ...


@pytest.fixture
def method_x() -> Operation:
    """Provides the Operation for RemoteApi.method_x."""
    return Operation.for_method(RemoteApi, RemoteApi.method_x)


@pytest.fixture
def captured_requests() -> List[httpx.Request]:
    """Collects every request the mock backend receives."""
    return []


@pytest.fixture
def mock_transport(captured_requests: List[httpx.Request]) -> httpx.MockTransport:
    """Provides a MockTransport serving the sample users backend and recording requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return user_api(request)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_client(mock_transport: httpx.MockTransport) -> Callable[..., ServiceClient]:
    """Factory for ServiceClients wired to the mock backend for both sync and async calls."""
    clients: List[ServiceClient] = []

    def factory(**kwargs: Any) -> ServiceClient:
        kwargs.setdefault("base_url", BASE_URL)
        client = ServiceClient(transport=mock_transport, async_transport=mock_transport, **kwargs)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
