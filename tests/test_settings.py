from __future__ import annotations

from pathlib import Path

import pytest

from plugin_release import BotIdentity, load_settings
from plugin_release.settings import DEFAULT_API_URL, DEFAULT_REGISTRY


def test_defaults_without_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings(env={})
    assert settings.token is None
    assert settings.api_url == DEFAULT_API_URL
    assert settings.registry == DEFAULT_REGISTRY
    assert settings.bot == BotIdentity()


def test_config_file_parsing_with_env_references(tmp_path: Path) -> None:
    config = """
token: ${MY_TOKEN}
api_url: https://github.example.com/api/v3/
registry: acme/plugin-registry
timeout_seconds: 5
bot:
  name: release-bot
  email: bot@example.com
pull_request:
  title: "Register {repo}"
  body: "Homepage: {homepage}"
"""
    path = tmp_path / "release.yml"
    path.write_text(config, encoding="utf-8")

    settings = load_settings(path, env={"MY_TOKEN": "from-env"})
    assert settings.token == "from-env"
    assert settings.api_url == "https://github.example.com/api/v3"
    assert settings.registry == "acme/plugin-registry"
    assert settings.timeout_seconds == 5.0
    assert settings.bot == BotIdentity(name="release-bot", email="bot@example.com")
    assert settings.pull_request.render_title(repo="o/n", homepage="h") == "Register o/n"
    assert settings.pull_request.render_body(repo="o/n", homepage="h") == "Homepage: h"


def test_environment_overrides_config_file(tmp_path: Path) -> None:
    path = tmp_path / "release.yml"
    path.write_text("token: file-token\nregistry: acme/one\n", encoding="utf-8")
    settings = load_settings(
        path,
        env={"GITHUB_TOKEN": "gh-token", "PLUGIN_RELEASE_REGISTRY": "acme/two", "PLUGIN_RELEASE_TIMEOUT": "12"},
    )
    assert settings.token == "gh-token"
    assert settings.registry == "acme/two"
    assert settings.timeout_seconds == 12.0


def test_plugin_release_token_wins_over_github_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings(env={"GITHUB_TOKEN": "gh-token", "PLUGIN_RELEASE_TOKEN": "own-token"})
    assert settings.token == "own-token"


def test_explicit_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yml", env={})


def test_invalid_section_type_raises(tmp_path: Path) -> None:
    path = tmp_path / "release.yml"
    path.write_text("bot: just-a-string\n", encoding="utf-8")
    with pytest.raises(ValueError, match="'bot'"):
        load_settings(path, env={})


def test_pull_request_body_with_literal_braces(tmp_path: Path) -> None:
    path = tmp_path / "release.yml"
    path.write_text(
        "pull_request:\n  body: 'Adds {repo}. JSON shape is {\"title\": ...}'\n",
        encoding="utf-8",
    )
    settings = load_settings(path, env={})
    rendered = settings.pull_request.render_body(repo="octo/my-plugin", homepage="https://example.com")
    assert rendered == 'Adds octo/my-plugin. JSON shape is {"title": ...}'
