from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import requests
import typer

from .client import RemoteClient
from .errors import ReleaseError
from .github import GitHubAccount
from .manifest import load_plugin_config, repository_slug
from .registry import RegistrySubmitter
from .releases import ReleasePublisher
from .security import redact_token
from .settings import Settings, load_settings
from .types import PluginConfig

logger = logging.getLogger(__name__)

app = typer.Typer(help="Publish plugin releases and register them in the plugin directory")

_FAILURES = (ReleaseError, requests.RequestException, OSError, ValueError)


# -------------------------
# Helpers
# -------------------------
def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load(config: Optional[str], token: Optional[str]) -> Settings:
    settings = load_settings(config)
    if token:
        settings = replace(settings, token=token)
    if settings.token:
        logger.debug("using token %s", redact_token(settings.token))
    return settings


def _make_client(settings: Settings) -> RemoteClient:
    return RemoteClient(
        settings.token,
        api_url=settings.api_url,
        uploads_url=settings.uploads_url,
        user_agent=settings.user_agent,
        timeout_seconds=settings.timeout_seconds,
    )


def _resolve_repo(repo: Optional[str], plugin: Optional[PluginConfig]) -> str:
    if repo:
        return repo
    if plugin is None:
        raise typer.BadParameter("--repo is required when no package.json is available")
    return repository_slug(plugin)


def _fail(command: str, exc: BaseException) -> None:
    logger.debug("%s failed", command, exc_info=True)
    typer.echo(f"[plugin-release:{command}] failed: {exc}")
    raise typer.Exit(1)


def _do_release(client: RemoteClient, settings: Settings, repo: str, tag: str, asset: Path) -> dict:
    GitHubAccount(client).get_repo(repo)
    publisher = ReleasePublisher(client, asset_label=settings.asset_label)
    release = publisher.create_draft_release(repo, tag)
    typer.echo(f"[plugin-release:release] draft {tag} created (id={release['id']})")
    publisher.upload_asset(repo, release["id"], asset.name, asset)
    typer.echo(f"[plugin-release:release] uploaded {asset.name}")
    published = publisher.publish_release(repo, release["id"])
    typer.echo(f"[plugin-release:release] published {published.get('html_url') or tag}")
    return published


def _do_register(client: RemoteClient, settings: Settings, plugin: PluginConfig, repo: str) -> None:
    submitter = RegistrySubmitter(
        client,
        registry=settings.registry,
        bot=settings.bot,
        template=settings.pull_request,
    )
    result = submitter.submit(plugin, repo)
    if result.already_registered:
        typer.echo(f"[plugin-release:register] {repo} is already registered in {settings.registry}")
        return
    pull_request = result.pull_request or {}
    typer.echo(f"[plugin-release:register] opened {pull_request.get('html_url') or 'pull request'}")


# -------------------------
# COMMANDS
# -------------------------
@app.command("whoami")
def whoami(
    token: str = typer.Option(None, "--token", help="GitHub token (default: GITHUB_TOKEN)"),
    config: str = typer.Option(None, "--config", help="Path to .plugin-release.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Print the login behind the configured token."""
    _configure_logging(verbose)
    try:
        settings = _load(config, token)
        user = GitHubAccount(_make_client(settings)).get_user()
    except _FAILURES as exc:
        _fail("whoami", exc)
    typer.echo(user.get("login", ""))


@app.command("release")
def release(
    tag: str = typer.Argument(..., help="Release tag, e.g. v1.2.0"),
    asset: Path = typer.Option(..., "--asset", help="Zip archive uploaded as the release asset"),
    repo: str = typer.Option(None, "--repo", help="owner/name (default: package.json repository)"),
    manifest: str = typer.Option(None, "--manifest", help="Path to package.json"),
    token: str = typer.Option(None, "--token", help="GitHub token (default: GITHUB_TOKEN)"),
    config: str = typer.Option(None, "--config", help="Path to .plugin-release.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Create a draft release, upload the zipped plugin and publish it."""
    _configure_logging(verbose)
    try:
        settings = _load(config, token)
        plugin = None if repo else load_plugin_config(manifest)
        slug = _resolve_repo(repo, plugin)
        _do_release(_make_client(settings), settings, slug, tag, asset)
    except _FAILURES as exc:
        _fail("release", exc)


@app.command("register")
def register(
    repo: str = typer.Option(None, "--repo", help="owner/name (default: package.json repository)"),
    manifest: str = typer.Option(None, "--manifest", help="Path to package.json"),
    token: str = typer.Option(None, "--token", help="GitHub token (default: GITHUB_TOKEN)"),
    config: str = typer.Option(None, "--config", help="Path to .plugin-release.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Open a pull request adding the plugin to the registry."""
    _configure_logging(verbose)
    try:
        settings = _load(config, token)
        plugin = load_plugin_config(manifest)
        slug = _resolve_repo(repo, plugin)
        _do_register(_make_client(settings), settings, plugin, slug)
    except _FAILURES as exc:
        _fail("register", exc)


@app.command("publish")
def publish(
    tag: str = typer.Argument(..., help="Release tag, e.g. v1.2.0"),
    asset: Path = typer.Option(..., "--asset", help="Zip archive uploaded as the release asset"),
    repo: str = typer.Option(None, "--repo", help="owner/name (default: package.json repository)"),
    manifest: str = typer.Option(None, "--manifest", help="Path to package.json"),
    skip_registry: bool = typer.Option(False, "--skip-registry", help="Do not submit to the registry"),
    token: str = typer.Option(None, "--token", help="GitHub token (default: GITHUB_TOKEN)"),
    config: str = typer.Option(None, "--config", help="Path to .plugin-release.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Release the plugin, then register it unless --skip-registry is set."""
    _configure_logging(verbose)
    try:
        settings = _load(config, token)
        plugin = load_plugin_config(manifest)
        slug = _resolve_repo(repo, plugin)
        client = _make_client(settings)
        _do_release(client, settings, slug, tag, asset)
        if not skip_registry:
            _do_register(client, settings, plugin, slug)
    except _FAILURES as exc:
        _fail("publish", exc)


if __name__ == "__main__":
    app()
