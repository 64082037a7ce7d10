"""
Test fixtures for the auth session client.

FakeAuthBackend plays the auth server behind an httpx.MockTransport, so the
adapter runs its real transport code without any network.
"""
import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import pytest_asyncio

from auth_session.adapter import SessionAdapter
from auth_session.config import Settings
from auth_session.notifications import NotificationRecorder

TEST_API_URL = "http://auth.test"

Reply = Union[
    Tuple[int, Any],                                # (status, JSON body)
    Callable[[httpx.Request], httpx.Response],      # custom handler
    Exception,                                      # raised as transport error
]


class FakeAuthBackend:
    """Scripted backend: one reply per (method, path), every request recorded."""

    def __init__(self):
        self.replies: Dict[Tuple[str, str], Reply] = {}
        self.requests: List[httpx.Request] = []

    def reply(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.replies[(method, path)] = (status, body)

    def handle(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.replies[(method, path)] = handler

    def fail(self, method: str, path: str, exc: Optional[Exception] = None) -> None:
        self.replies[(method, path)] = exc or httpx.ConnectError("connection refused")

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def body_of(self, request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content) if request.content else {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.get((request.method, request.url.path))

        if reply is None:
            return httpx.Response(404, json={"message": "Not found"})
        if isinstance(reply, Exception):
            if isinstance(reply, httpx.RequestError):
                reply.request = request
            raise reply
        if callable(reply):
            return reply(request)

        status, body = reply
        if body is None:
            return httpx.Response(status)
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment and .env."""
    return Settings(_env_file=None, api_url=TEST_API_URL)


@pytest.fixture
def backend():
    return FakeAuthBackend()


@pytest.fixture
def notifications():
    return NotificationRecorder()


@pytest_asyncio.fixture
async def adapter(backend, notifications, settings):
    """SessionAdapter wired to the fake backend; its client is closed afterwards."""
    session = SessionAdapter(
        notifier=notifications,
        settings=settings,
        http_transport=httpx.MockTransport(backend),
    )
    yield session
    await session.aclose()


@pytest.fixture
def alice():
    return {
        "id": 1,
        "email": "alice@example.com",
        "name": "Alice",
        "apiHandles": {"leetcode": "alice_lc"},
    }


@pytest.fixture
def logged_in(adapter, alice):
    """Adapter whose session already holds alice."""
    adapter.state.set_user(alice)
    return adapter
