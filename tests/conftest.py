"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import pytest
from aiohttp import ClientSession, web

from pyiosense.api import IosenseAPI
from pyiosense.models import ClientContext
from pyiosense.resilience import RetryPolicy


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from aiohttp.test_utils import TestClient
    from multidict import CIMultiDictProxy


TEST_TOKEN = "test-access-token"


@dataclass
class RecordedRequest:
    """A request received by the recording server."""

    method: str
    path: str
    headers: CIMultiDictProxy[str]
    body: Any


@dataclass
class RecordingServer:
    """In-process backend that records requests and replays scripted responses.

    Responses are consumed in order; once the script is empty every request
    gets ``default``. Scripts in ``routes`` are keyed by request path and take
    precedence over ``responses``. A ``str`` payload is sent as raw text,
    anything else as JSON.
    """

    responses: list[tuple[int, Any]] = field(default_factory=list)
    routes: dict[str, list[tuple[int, Any]]] = field(default_factory=dict)
    default: tuple[int, Any] = (HTTPStatus.OK, {"success": True})
    requests: list[RecordedRequest] = field(default_factory=list)

    async def handle(self, request: web.Request) -> web.Response:
        text = await request.text()
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                headers=request.headers,
                body=json.loads(text) if text else None,
            )
        )

        script = self.routes.get(request.path) or self.responses
        status, payload = script.pop(0) if script else self.default
        if payload is None:
            return web.Response(status=status)
        if isinstance(payload, str):
            return web.Response(status=status, text=payload)
        return web.json_response(payload, status=status)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self.handle)
        return app

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


@pytest.fixture
def recorder() -> RecordingServer:
    """Create a recording backend."""
    return RecordingServer()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Backoff sleep that returns immediately and records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_api(
    aiohttp_client: Callable[[web.Application], Awaitable[TestClient]],
    recorder: RecordingServer,
    no_sleep: AsyncMock,
) -> Callable[..., Awaitable[IosenseAPI]]:
    """Build an IosenseAPI pointed at the recording backend.

    The API shares the test client's session and never sleeps for real.
    """

    async def _make(
        *,
        retry_policy: RetryPolicy | None = None,
        timezone: str = "UTC",
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> IosenseAPI:
        test_client = await aiohttp_client(recorder.app())
        context = ClientContext(
            backend_host=f"{test_client.host}:{test_client.port}",
            access_token=TEST_TOKEN,
            on_prem=True,
            timezone=timezone,
        )
        return IosenseAPI(
            context=context,
            session=test_client.session,
            retry_policy=retry_policy or RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=4.0),
            sleep=sleep or no_sleep,
        )

    return _make


@pytest.fixture
async def api(make_api: Callable[..., Awaitable[IosenseAPI]]) -> IosenseAPI:
    """IosenseAPI against the recording backend with a 3-attempt policy."""
    return await make_api()


@pytest.fixture
def context() -> ClientContext:
    """Plain client context for composition tests."""
    return ClientContext(backend_host="api.example.com", access_token=TEST_TOKEN)


@pytest.fixture
async def mock_session() -> AsyncGenerator[ClientSession]:
    """Create a mock aiohttp ClientSession.

    Yields:
        Mock ClientSession for testing.
    """
    session = AsyncMock(spec=ClientSession)
    session.closed = False

    async def mock_close() -> None:
        session.closed = True

    session.close = mock_close

    yield session

    if not session.closed:
        await session.close()
