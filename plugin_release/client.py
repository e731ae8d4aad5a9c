"""Authenticated GitHub REST client built on top of requests."""

from __future__ import annotations

import json
import logging
from typing import IO, Any, Mapping

import requests

from .errors import ApiError, AuthorizationError, ConflictError
from .security import redact_headers, redact_request
from .settings import DEFAULT_API_URL, DEFAULT_UPLOADS_URL, DEFAULT_USER_AGENT
from .types import RemoteRequest

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github.v3+json"
NOT_LOGGED_IN = "You are not logged in. Pass --token or set GITHUB_TOKEN (or PLUGIN_RELEASE_TOKEN) first."


class RemoteClient:
    """Issues one authenticated request per call.

    No retries are attempted: transport errors propagate unchanged and non-2xx
    responses raise ``ApiError`` carrying the redacted request.
    """

    def __init__(
        self,
        token: str | None,
        *,
        api_url: str = DEFAULT_API_URL,
        uploads_url: str = DEFAULT_UPLOADS_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float | None = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._token = token or None
        self.api_url = api_url.rstrip("/")
        self.uploads_url = uploads_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def has_credential(self) -> bool:
        return self._token is not None

    def require_credential(self) -> None:
        if not self.has_credential:
            raise AuthorizationError(NOT_LOGGED_IN)

    def api(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def uploads(self, path: str) -> str:
        return f"{self.uploads_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        data: IO[bytes] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RemoteRequest:
        merged = {
            "Accept": ACCEPT_HEADER,
            "Authorization": f"Token {self._token}",
            "User-Agent": self.user_agent,
        }
        if headers:
            merged.update({str(k): str(v) for k, v in headers.items()})
        return RemoteRequest(method=method.upper(), url=url, headers=merged, params=params, json=json, data=data)

    def send(self, request: RemoteRequest) -> str:
        logger.debug(
            "github request method=%s url=%s headers=%s",
            request.method,
            request.url,
            redact_headers(request.headers),
        )
        response = self._session.request(
            request.method,
            request.url,
            headers=dict(request.headers),
            params=dict(request.params) if request.params else None,
            json=request.json,
            data=request.data,
            timeout=self.timeout_seconds,
        )
        status = response.status_code
        logger.debug("github response method=%s url=%s status=%s", request.method, request.url, status)
        if 200 <= status < 300:
            return response.text
        body = _parse_body(response.text)
        error_cls = ConflictError if status == 409 else ApiError
        raise error_cls(status, redact_request(request), body)

    def send_json(self, request: RemoteRequest) -> Any:
        text = self.send(request)
        if not text:
            return None
        return json.loads(text)

    def get(self, url: str, **kwargs: Any) -> Any:
        return self.send_json(self.request("GET", url, **kwargs))

    def post(self, url: str, **kwargs: Any) -> Any:
        return self.send_json(self.request("POST", url, **kwargs))

    def patch(self, url: str, **kwargs: Any) -> Any:
        return self.send_json(self.request("PATCH", url, **kwargs))

    def put(self, url: str, **kwargs: Any) -> Any:
        return self.send_json(self.request("PUT", url, **kwargs))

    def delete(self, url: str, **kwargs: Any) -> str:
        return self.send(self.request("DELETE", url, **kwargs))


def _parse_body(text: str | None) -> Any:
    if not text:
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
