"""Datatypes shared by the release publisher and the registry submitter."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import IO, Any, Mapping

ALREADY_REGISTERED = "already registered"
SUBMITTED = "submitted"


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "RepositoryRef":
        parts = str(value or "").strip().split("/")
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise ValueError(f"expected repository in the form owner/name, got {value!r}")
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class RemoteRequest:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)
    params: Mapping[str, str] | None = None
    json: Any = None
    data: IO[bytes] | None = None


@dataclass(frozen=True)
class Author:
    name: str
    email: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class PluginConfig:
    name: str
    title: str | None = None
    description: str | None = None
    homepage: str | None = None
    author: str | Mapping[str, Any] | None = None
    repository: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.name


@dataclass(frozen=True)
class PluginEntry:
    title: str
    description: str | None
    name: str
    owner: str
    appcast: str
    homepage: str
    author: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "name": self.name,
            "owner": self.owner,
            "appcast": self.appcast,
            "homepage": self.homepage,
        }
        if self.description is None:
            del data["description"]
        if self.author is not None:
            data["author"] = self.author
        return data


@dataclass(frozen=True)
class Fork:
    full_name: str
    owner_login: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Fork":
        owner = payload.get("owner") or {}
        return cls(full_name=str(payload["full_name"]), owner_login=str(owner.get("login") or ""))


@dataclass(frozen=True)
class BotIdentity:
    name: str = "skpm-bot"
    email: str = "bot@skpm.io"

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class PullRequestTemplate:
    title: str = "Add the {repo} plugin"
    body: str = (
        "Hello :wave:\n"
        "\n"
        "The plugin is [here]({homepage}) if you want to have a look.\n"
        "\n"
        "Hope you are having a great day :)\n"
    )

    def render_title(self, *, repo: str, homepage: str) -> str:
        return _fill(self.title, repo=repo, homepage=homepage)

    def render_body(self, *, repo: str, homepage: str) -> str:
        return _fill(self.body, repo=repo, homepage=homepage)


def _fill(template: str, **values: str) -> str:
    # Only known placeholders are replaced; any other braces are kept literally.
    text = str(template)
    for key, value in values.items():
        text = text.replace("{" + key + "}", value)
    return text


@dataclass(frozen=True)
class SubmissionContext:
    """Accumulated state of one registry submission.

    Each workflow step receives the context produced by the previous one and
    returns a copy with the fields it resolved filled in.
    """

    plugin: PluginConfig
    repository: RepositoryRef
    plugins: tuple[Mapping[str, Any], ...] = ()
    fork: Fork | None = None
    fork_sha: str | None = None
    upstream_sha: str | None = None
    head_sha: str | None = None
    file_sha: str | None = None
    entry: PluginEntry | None = None
    commit: Mapping[str, Any] | None = None
    pr_title: str | None = None
    pr_body: str | None = None
    pull_request: Mapping[str, Any] | None = None

    @property
    def branch(self) -> str:
        return self.repository.full_name

    def evolve(self, **changes: Any) -> "SubmissionContext":
        return replace(self, **changes)


@dataclass(frozen=True)
class SubmissionResult:
    status: str
    pull_request: Mapping[str, Any] | None = None
    entry: PluginEntry | None = None
    existing: Mapping[str, Any] | None = None

    @property
    def already_registered(self) -> bool:
        return self.status == ALREADY_REGISTERED
