"""Register a plugin in the shared plugin-directory repository.

The submission runs as a fixed sequence of steps over remote state:

1. read the upstream ``plugins.json`` and stop if the plugin is already listed
2. fork the registry (GitHub returns the existing fork when there is one)
3. drop any feature branch left behind by an earlier run
4. fast-forward the fork's ``master`` to upstream when they differ
5. branch, write the new entry with the branch file's sha, open the pull request

Nothing is rolled back on failure. A rerun cleans the stale branch in step 3
and the sha-guarded write rejects concurrent edits of ``plugins.json``.
"""

from __future__ import annotations

import base64
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

import requests

from .authors import author_display_name
from .client import RemoteClient
from .errors import ApiError, ReleaseError
from .settings import DEFAULT_REGISTRY
from .types import (
    ALREADY_REGISTERED,
    SUBMITTED,
    BotIdentity,
    Fork,
    PluginConfig,
    PluginEntry,
    PullRequestTemplate,
    RepositoryRef,
    SubmissionContext,
    SubmissionResult,
)

logger = logging.getLogger(__name__)

REGISTRY_FILE = "plugins.json"
BASE_BRANCH = "master"


def build_plugin_entry(plugin: PluginConfig, repository: RepositoryRef) -> PluginEntry:
    return PluginEntry(
        title=plugin.display_title,
        description=plugin.description,
        name=repository.name,
        owner=repository.owner,
        appcast=f"https://raw.githubusercontent.com/{repository.full_name}/{BASE_BRANCH}/.appcast.xml",
        homepage=plugin_homepage(plugin, repository),
        author=author_display_name(plugin.author),
    )


def plugin_homepage(plugin: PluginConfig, repository: RepositoryRef) -> str:
    return plugin.homepage or f"https://github.com/{repository.full_name}"


def find_registered(
    plugins: tuple[Mapping[str, Any], ...] | list[Mapping[str, Any]],
    plugin: PluginConfig,
    repository: RepositoryRef,
) -> Mapping[str, Any] | None:
    titles = {plugin.name, plugin.display_title}
    for entry in plugins:
        if not isinstance(entry, Mapping):
            continue
        if entry.get("title") in titles or entry.get("name") == repository.name:
            return entry
    return None


def decode_registry(content: str) -> list[dict[str, Any]]:
    raw = base64.b64decode(content or "")
    plugins = json.loads(raw.decode("utf-8"))
    if not isinstance(plugins, list):
        raise ValueError(f"{REGISTRY_FILE} must contain a JSON array")
    return plugins


def encode_registry(plugins: list[Mapping[str, Any]]) -> str:
    text = json.dumps(plugins, indent=2, ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class RegistrySubmitter:
    def __init__(
        self,
        client: RemoteClient,
        *,
        registry: str | RepositoryRef = DEFAULT_REGISTRY,
        bot: BotIdentity | None = None,
        template: PullRequestTemplate | None = None,
    ) -> None:
        self.client = client
        self.registry = registry if isinstance(registry, RepositoryRef) else RepositoryRef.parse(registry)
        self.bot = bot or BotIdentity()
        self.template = template or PullRequestTemplate()

    def submit(self, plugin: PluginConfig, repo: str | RepositoryRef) -> SubmissionResult:
        self.client.require_credential()
        repository = repo if isinstance(repo, RepositoryRef) else RepositoryRef.parse(repo)
        context = self.fetch_registry(SubmissionContext(plugin=plugin, repository=repository))

        existing = find_registered(context.plugins, plugin, repository)
        if existing is not None:
            logger.debug("plugin %s already listed in %s", repository, self.registry)
            return SubmissionResult(status=ALREADY_REGISTERED, existing=existing)

        context = self.render_pull_request(context)
        context = self.fork_registry(context)
        self.delete_stale_branch(context)
        context = self.read_branch_heads(context)
        context = self.sync_fork_master(context)
        self.create_feature_branch(context)
        context = self.read_feature_file_sha(context)
        context = self.write_registry_entry(context)
        context = self.open_pull_request(context)
        return SubmissionResult(status=SUBMITTED, pull_request=context.pull_request, entry=context.entry)

    def _upstream(self, path: str) -> str:
        return self.client.api(f"repos/{self.registry.full_name}/{path}")

    def _fork(self, context: SubmissionContext, path: str) -> str:
        if context.fork is None:
            raise RuntimeError("registry fork has not been created yet")
        return self.client.api(f"repos/{context.fork.full_name}/{path}")

    def fetch_registry(self, context: SubmissionContext) -> SubmissionContext:
        payload = self.client.get(self._upstream(f"contents/{REGISTRY_FILE}"))
        plugins = decode_registry(payload.get("content", ""))
        logger.debug("fetched %s entries from %s", len(plugins), self.registry)
        return context.evolve(plugins=tuple(plugins))

    def fork_registry(self, context: SubmissionContext) -> SubmissionContext:
        fork = Fork.from_payload(self.client.post(self._upstream("forks")))
        logger.debug("using fork %s", fork.full_name)
        return context.evolve(fork=fork)

    def delete_stale_branch(self, context: SubmissionContext) -> None:
        try:
            self.client.delete(self._fork(context, f"git/refs/heads/{context.branch}"))
        except (ApiError, requests.RequestException) as exc:
            # Usually the branch does not exist yet.
            logger.debug("no stale branch %s removed: %s", context.branch, type(exc).__name__)

    def read_branch_heads(self, context: SubmissionContext) -> SubmissionContext:
        fork_url = self._fork(context, f"git/refs/heads/{BASE_BRANCH}")
        upstream_url = self._upstream(f"git/refs/heads/{BASE_BRANCH}")
        with ThreadPoolExecutor(max_workers=2) as pool:
            fork_head = pool.submit(self.client.get, fork_url)
            upstream_head = pool.submit(self.client.get, upstream_url)
            fork_sha = fork_head.result()["object"]["sha"]
            upstream_sha = upstream_head.result()["object"]["sha"]
        return context.evolve(fork_sha=fork_sha, upstream_sha=upstream_sha)

    def sync_fork_master(self, context: SubmissionContext) -> SubmissionContext:
        if context.fork_sha == context.upstream_sha:
            return context.evolve(head_sha=context.fork_sha)
        logger.debug("fast-forwarding fork %s to %s", BASE_BRANCH, context.upstream_sha)
        self.client.patch(
            self._fork(context, f"git/refs/heads/{BASE_BRANCH}"),
            json={"sha": context.upstream_sha},
        )
        return context.evolve(head_sha=context.upstream_sha)

    def create_feature_branch(self, context: SubmissionContext) -> None:
        self.client.post(
            self._fork(context, "git/refs"),
            json={"ref": f"refs/heads/{context.branch}", "sha": context.head_sha},
        )

    def read_feature_file_sha(self, context: SubmissionContext) -> SubmissionContext:
        payload = self.client.get(
            self._fork(context, f"contents/{REGISTRY_FILE}"),
            params={"ref": context.branch},
        )
        return context.evolve(file_sha=payload["sha"])

    def write_registry_entry(self, context: SubmissionContext) -> SubmissionContext:
        # The branch was just cut from upstream master, so the step-1 list is reused.
        entry = build_plugin_entry(context.plugin, context.repository)
        plugins = [*context.plugins, entry.to_dict()]
        commit = self.client.put(
            self._fork(context, f"contents/{REGISTRY_FILE}"),
            json={
                "path": REGISTRY_FILE,
                "message": f"Add the {context.branch} plugin",
                "committer": self.bot.to_dict(),
                "sha": context.file_sha,
                "content": encode_registry(plugins),
                "branch": context.branch,
            },
        )
        return context.evolve(entry=entry, commit=commit)

    def render_pull_request(self, context: SubmissionContext) -> SubmissionContext:
        homepage = plugin_homepage(context.plugin, context.repository)
        title = self.template.render_title(repo=context.branch, homepage=homepage).strip()
        if not title:
            raise ReleaseError("pull request title template renders to an empty string")
        body = self.template.render_body(repo=context.branch, homepage=homepage)
        return context.evolve(pr_title=title, pr_body=body)

    def open_pull_request(self, context: SubmissionContext) -> SubmissionContext:
        if context.fork is None:
            raise RuntimeError("registry fork has not been created yet")
        if context.pr_title is None:
            context = self.render_pull_request(context)
        pull_request = self.client.post(
            self._upstream("pulls"),
            json={
                "title": context.pr_title,
                "head": f"{context.fork.owner_login}:{context.branch}",
                "body": context.pr_body,
                "base": BASE_BRANCH,
                "maintainer_can_modify": True,
            },
        )
        return context.evolve(pull_request=pull_request)
