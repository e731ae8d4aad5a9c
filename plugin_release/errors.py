"""Error types raised by the release and registry workflows."""

from __future__ import annotations

import json
from typing import Any, Mapping


class ReleaseError(RuntimeError):
    """Base error for plugin-release operations."""


class AuthorizationError(ReleaseError):
    """Missing credential or insufficient repository permissions."""


class ManifestError(ReleaseError):
    """Raised when the plugin manifest cannot be read or is incomplete."""


class ApiError(ReleaseError):
    """Non-2xx response from the remote API.

    The message is the pretty-printed response body with the redacted request
    attached under ``request`` so failures can be debugged without exposing
    the credential.
    """

    def __init__(self, status_code: int, request: Mapping[str, Any], body: Any) -> None:
        self.status_code = status_code
        self.request = dict(request)
        self.body = body
        super().__init__(_format_message(body, self.request))


class ConflictError(ApiError):
    """Optimistic-concurrency rejection (stale file sha)."""


def _format_message(body: Any, request: Mapping[str, Any]) -> str:
    payload: dict[str, Any]
    if isinstance(body, Mapping):
        payload = dict(body)
    elif body in (None, ""):
        payload = {}
    else:
        payload = {"body": body}
    payload["request"] = dict(request)
    return json.dumps(payload, indent=2, default=str)
