"""Redaction helpers so credentials never reach logs or error output."""

from __future__ import annotations

from typing import Any, Mapping

from .types import RemoteRequest

MASKED_AUTHORIZATION = "Token **********"
_SENSITIVE_HEADERS = ("authorization", "proxy-authorization")


def redact_token(value: str) -> str:
    if not value:
        return value
    if len(value) <= 6:
        return "***"
    return f"{value[:3]}***{value[-2:]}"


def redact_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if str(key).lower() in _SENSITIVE_HEADERS:
            redacted[str(key)] = MASKED_AUTHORIZATION
        else:
            redacted[str(key)] = str(value)
    return redacted


def redact_request(request: RemoteRequest) -> dict[str, Any]:
    """Serializable view of ``request`` with the Authorization header masked."""
    data: dict[str, Any] = {
        "method": request.method,
        "url": request.url,
        "headers": redact_headers(request.headers),
    }
    if request.params:
        data["params"] = dict(request.params)
    if request.json is not None:
        data["json"] = request.json
    if request.data is not None:
        data["body"] = "<binary stream>"
    return data
