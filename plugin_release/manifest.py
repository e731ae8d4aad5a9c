"""Read plugin metadata from ``package.json``."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Mapping

from .errors import ManifestError
from .types import PluginConfig, RepositoryRef

MANIFEST_FILENAME = "package.json"
_GITHUB_URL_RE = re.compile(r"github\.com[:/]+([^/\s]+)/([^/\s#?]+?)(?:\.git)?/?(?:[#?].*)?$")


def _string_or_none(value: Any) -> str | None:
    if value is None:
        return None
    data = str(value).strip()
    return data if data else None


def load_plugin_config(path: Path | str | None = None) -> PluginConfig:
    manifest_path = Path(path) if path else Path.cwd() / MANIFEST_FILENAME
    if manifest_path.is_dir():
        manifest_path = manifest_path / MANIFEST_FILENAME
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ManifestError(f"no {MANIFEST_FILENAME} found at {manifest_path}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"invalid JSON in {manifest_path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ManifestError(f"{manifest_path} must contain a JSON object")
    return plugin_config_from_dict(payload)


def plugin_config_from_dict(payload: Mapping[str, Any]) -> PluginConfig:
    section = payload.get("skpm")
    overrides: Mapping[str, Any] = section if isinstance(section, Mapping) else {}

    def pick(key: str) -> Any:
        if overrides.get(key) is not None:
            return overrides[key]
        return payload.get(key)

    name = _string_or_none(pick("name"))
    if not name:
        raise ManifestError("package.json is missing the required 'name' field")

    author = pick("author")
    if author is not None and not isinstance(author, (str, Mapping)):
        raise ManifestError("package.json 'author' must be a string or an object")

    repository = pick("repository")
    if isinstance(repository, Mapping):
        repository = repository.get("url")

    return PluginConfig(
        name=name,
        title=_string_or_none(pick("title")),
        description=_string_or_none(pick("description")),
        homepage=_string_or_none(pick("homepage")),
        author=dict(author) if isinstance(author, Mapping) else author,
        repository=_string_or_none(repository),
    )


def repository_slug(config: PluginConfig) -> str:
    """Normalize the configured repository to ``owner/name``."""
    raw = _string_or_none(config.repository)
    if not raw:
        raise ManifestError("package.json has no 'repository' field; pass --repo owner/name")
    if raw.startswith("github:"):
        raw = raw[len("github:"):]
    match = _GITHUB_URL_RE.search(raw)
    if match:
        raw = f"{match.group(1)}/{match.group(2)}"
    try:
        return RepositoryRef.parse(raw).full_name
    except ValueError as exc:
        raise ManifestError(f"unsupported repository value {config.repository!r}") from exc
