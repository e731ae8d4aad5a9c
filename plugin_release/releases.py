"""Draft, upload and publish a GitHub release for a plugin."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .client import RemoteClient
from .settings import DEFAULT_ASSET_LABEL
from .types import RepositoryRef

logger = logging.getLogger(__name__)

ZIP_MEDIA_TYPE = "application/zip"


def _full_name(repo: str | RepositoryRef) -> str:
    ref = repo if isinstance(repo, RepositoryRef) else RepositoryRef.parse(repo)
    return ref.full_name


class ReleasePublisher:
    """Three independent calls; each returns what the next one needs.

    A failed upload or publish leaves the draft release in place for manual
    recovery.
    """

    def __init__(self, client: RemoteClient, *, asset_label: str = DEFAULT_ASSET_LABEL) -> None:
        self.client = client
        self.asset_label = asset_label

    def create_draft_release(self, repo: str | RepositoryRef, tag: str) -> dict[str, Any]:
        self.client.require_credential()
        logger.debug("creating draft release repo=%s tag=%s", repo, tag)
        return self.client.post(
            self.client.api(f"repos/{_full_name(repo)}/releases"),
            json={"tag_name": tag, "name": tag, "draft": True},
        )

    def upload_asset(
        self,
        repo: str | RepositoryRef,
        release_id: int | str,
        asset_name: str,
        file_path: Path | str,
    ) -> dict[str, Any] | None:
        self.client.require_credential()
        path = Path(file_path)
        size = path.stat().st_size
        url = self.client.uploads(f"repos/{_full_name(repo)}/releases/{release_id}/assets")
        logger.debug("uploading asset release=%s name=%s size=%s", release_id, asset_name, size)
        with path.open("rb") as stream:
            request = self.client.request(
                "POST",
                url,
                params={"name": asset_name, "label": self.asset_label},
                data=stream,
                headers={"Content-Type": ZIP_MEDIA_TYPE, "Content-Length": str(size)},
            )
            return self.client.send_json(request)

    def publish_release(self, repo: str | RepositoryRef, release_id: int | str) -> dict[str, Any]:
        self.client.require_credential()
        logger.debug("publishing release repo=%s release=%s", repo, release_id)
        return self.client.patch(
            self.client.api(f"repos/{_full_name(repo)}/releases/{release_id}"),
            json={"draft": False},
        )
