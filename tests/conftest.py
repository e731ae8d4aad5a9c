from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import Any, Callable

import pytest

from plugin_release import RemoteClient

API = "https://api.github.com"
UPLOADS = "https://uploads.github.com"
TOKEN = "ghp_super_secret_value"


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    params: dict[str, str] | None
    json: Any
    body: bytes | None


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif payload is not None:
            self.text = json.dumps(payload)
        else:
            self.text = ""


class FakeSession:
    """Stands in for ``requests.Session`` and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], FakeResponse | Callable[[RecordedCall], FakeResponse]] = {}
        self.calls: list[RecordedCall] = []
        self._lock = threading.Lock()

    def add(self, method: str, url: str, payload: Any = None, *, status: int = 200, handler=None) -> None:
        self.routes[(method.upper(), url)] = handler or FakeResponse(status, payload)

    def request(self, method, url, *, headers=None, params=None, json=None, data=None, timeout=None):
        del timeout
        body = data.read() if data is not None else None
        call = RecordedCall(method, url, dict(headers or {}), params, json, body)
        with self._lock:
            self.calls.append(call)
        route = self.routes.get((method, url))
        if route is None:
            return FakeResponse(404, {"message": "Not Found"})
        if callable(route):
            return route(call)
        return route

    def respond(self, payload: Any = None, *, status: int = 200) -> FakeResponse:
        return FakeResponse(status, payload)

    def calls_for(self, method: str, url: str | None = None) -> list[RecordedCall]:
        return [call for call in self.calls if call.method == method and (url is None or call.url == url)]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession) -> RemoteClient:
    return RemoteClient(TOKEN, session=fake_session)
