from __future__ import annotations

import json
from pathlib import Path

import pytest

from plugin_release import (
    Author,
    ManifestError,
    PluginConfig,
    RepositoryRef,
    author_display_name,
    load_plugin_config,
    parse_author,
    repository_slug,
)


def test_parse_author_extracts_name_email_and_url() -> None:
    assert parse_author("Jane Doe <jane@example.com>") == Author(name="Jane Doe", email="jane@example.com")
    assert parse_author("Jane Doe <jane@example.com> (https://jane.dev)") == Author(
        name="Jane Doe", email="jane@example.com", url="https://jane.dev"
    )
    assert parse_author("Jane Doe") == Author(name="Jane Doe")


def test_author_display_name_handles_strings_and_mappings() -> None:
    assert author_display_name("Jane Doe <jane@example.com>") == "Jane Doe"
    assert author_display_name({"name": "Jane Doe", "email": "jane@example.com"}) == "Jane Doe"
    assert author_display_name(None) is None
    assert author_display_name("   ") is None


def test_repository_ref_parse_rejects_malformed_values() -> None:
    assert RepositoryRef.parse("octo/my-plugin") == RepositoryRef("octo", "my-plugin")
    for value in ("octo", "octo/", "/my-plugin", "a/b/c", ""):
        with pytest.raises(ValueError):
            RepositoryRef.parse(value)


def test_load_plugin_config_prefers_skpm_section(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps(
            {
                "name": "my-plugin",
                "description": "Top level description",
                "author": "Jane Doe <jane@example.com>",
                "repository": {"type": "git", "url": "git+https://github.com/octo/my-plugin.git"},
                "skpm": {"title": "My Plugin", "homepage": "https://example.com"},
            }
        ),
        encoding="utf-8",
    )
    config = load_plugin_config(tmp_path)
    assert config.name == "my-plugin"
    assert config.title == "My Plugin"
    assert config.display_title == "My Plugin"
    assert config.description == "Top level description"
    assert config.homepage == "https://example.com"
    assert repository_slug(config) == "octo/my-plugin"


def test_load_plugin_config_reports_missing_manifest(tmp_path: Path) -> None:
    with pytest.raises(ManifestError, match="no package.json"):
        load_plugin_config(tmp_path / "package.json")


def test_load_plugin_config_requires_name(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    path.write_text(json.dumps({"description": "nameless"}), encoding="utf-8")
    with pytest.raises(ManifestError, match="'name'"):
        load_plugin_config(path)


@pytest.mark.parametrize(
    "repository",
    [
        "octo/my-plugin",
        "github:octo/my-plugin",
        "https://github.com/octo/my-plugin",
        "git@github.com:octo/my-plugin.git",
    ],
)
def test_repository_slug_normalizes_common_forms(repository: str) -> None:
    assert repository_slug(PluginConfig(name="x", repository=repository)) == "octo/my-plugin"


def test_repository_slug_requires_repository() -> None:
    with pytest.raises(ManifestError, match="--repo"):
        repository_slug(PluginConfig(name="x"))
