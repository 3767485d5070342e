"""
Unit Test Fixtures.

Fixtures for unit tests - the PCE is simulated with httpx.MockTransport
and every sleep is replaced with an AsyncMock, so no test waits for a
backoff or a Retry-After period.
"""

import logging
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from pceclient.api.client import PCEClient
from pceclient.core.config_schema import PCESchema

BASE_URL = "https://pce.example.com:8443/api/v2"


# =============================================================================
# Simulated PCE
# =============================================================================


class FakePCE:
    """
    Scripted PCE server for httpx.MockTransport.

    Each (method, path) route holds a queue of responses. Responses are
    served in order; the last one is repeated once the queue runs dry.

    Usage:
        def test_something(fake_pce):
            fake_pce.add("GET", "/api/v2/orgs/1/labels", httpx.Response(200, json=[]))
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        """Queue responses (httpx.Response or an exception to raise) for a route."""
        self.routes.setdefault((method.upper(), path), []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": f"no route for {request.method} {request.url.path}"})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def requests_to(self, path: str) -> list[httpx.Request]:
        """Requests received for a path, in order."""
        return [request for request in self.requests if request.url.path == path]


@pytest.fixture
def fake_pce() -> FakePCE:
    """Provide an empty scripted PCE."""
    return FakePCE()


@pytest.fixture
def mock_sleep() -> AsyncMock:
    """
    Awaitable sleep replacement.

    Usage:
        async def test_backoff(make_client, mock_sleep):
            ...
            assert mock_sleep.await_count == 3
    """
    return AsyncMock(return_value=None)


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def pce_config(test_settings: dict[str, Any]) -> PCESchema:
    """PCE settings matching BASE_URL, with default retry and polling limits."""
    return PCESchema(
        fqdn=test_settings["fqdn"],
        port=test_settings["port"],
        org_id=test_settings["org_id"],
    )


@pytest.fixture
def make_client(
    pce_config: PCESchema,
    fake_pce: FakePCE,
    mock_sleep: AsyncMock,
    test_settings: dict[str, Any],
) -> Callable[..., PCEClient]:
    """
    Factory for clients wired to the fake PCE.

    Usage:
        async with make_client(force_async=True) as client:
            ...
    """

    def _make(config: PCESchema | None = None, **kwargs: Any) -> PCEClient:
        return PCEClient(
            config or pce_config,
            user=test_settings["user"],
            api_key=test_settings["api_key"],
            sleep=mock_sleep,
            transport=httpx.MockTransport(fake_pce.handler),
            **kwargs,
        )

    return _make


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def restore_root_logging():
    """
    Restore root logger handlers and level after a test that calls setup_logging.

    setup_logging binds a StreamHandler to the sys.stdout of the moment, which
    CliRunner and capsys close or swap once the test ends.
    """
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)



@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
