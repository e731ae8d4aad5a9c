"""Account and repository lookups used before any mutating call."""

from __future__ import annotations

import json
from typing import Any

from .client import RemoteClient
from .errors import AuthorizationError
from .types import RepositoryRef


class GitHubAccount:
    def __init__(self, client: RemoteClient) -> None:
        self.client = client

    def get_user(self) -> dict[str, Any]:
        self.client.require_credential()
        return self.client.get(self.client.api("user"))

    def get_repo(self, repo: str | RepositoryRef) -> dict[str, Any]:
        """Fetch ``repo`` and fail unless the credential has push permission."""
        self.client.require_credential()
        ref = repo if isinstance(repo, RepositoryRef) else RepositoryRef.parse(repo)
        payload = self.client.get(self.client.api(f"repos/{ref.full_name}")) or {}
        permissions = payload.get("permissions") or {}
        if not permissions.get("push"):
            raise AuthorizationError(
                "You don't have the right permissions on the repo. "
                "Need the \"push\" permission and only got:\n"
                f"{json.dumps(permissions, indent=2)}"
            )
        return payload
