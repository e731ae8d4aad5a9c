"""Static configuration for the release and registry workflows."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import BotIdentity, PullRequestTemplate

CONFIG_FILENAME = ".plugin-release.yml"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_UPLOADS_URL = "https://uploads.github.com"
DEFAULT_REGISTRY = "sketchplugins/plugin-directory"
DEFAULT_USER_AGENT = "SKPM-Release-Agent"
DEFAULT_ASSET_LABEL = "To install: download this file, unzip and double click on the .sketchplugin"

_TOKEN_ENV_VARS = ("PLUGIN_RELEASE_TOKEN", "GITHUB_TOKEN")


def _resolve_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_name = value[2:-1].strip()
        if env_name:
            return env.get(env_name, "")
    return value


def _string_or_none(value: Any) -> str | None:
    if value is None:
        return None
    data = str(value).strip()
    return data if data else None


def _ensure_mapping(data: Any, section: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return data
    raise ValueError(f"expected mapping for '{section}' configuration")


@dataclass(frozen=True)
class Settings:
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    uploads_url: str = DEFAULT_UPLOADS_URL
    registry: str = DEFAULT_REGISTRY
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 30.0
    asset_label: str = DEFAULT_ASSET_LABEL
    bot: BotIdentity = field(default_factory=BotIdentity)
    pull_request: PullRequestTemplate = field(default_factory=PullRequestTemplate)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        raw = _ensure_mapping(data, "root")

        def value(key: str, source: Mapping[str, Any] = raw) -> Any:
            return _resolve_env_value(source.get(key), env)

        bot_raw = _ensure_mapping(raw.get("bot"), "bot")
        default_bot = BotIdentity()
        bot = BotIdentity(
            name=_string_or_none(value("name", bot_raw)) or default_bot.name,
            email=_string_or_none(value("email", bot_raw)) or default_bot.email,
        )

        pr_raw = _ensure_mapping(raw.get("pull_request"), "pull_request")
        default_pr = PullRequestTemplate()
        pull_request = PullRequestTemplate(
            title=_string_or_none(value("title", pr_raw)) or default_pr.title,
            body=value("body", pr_raw) or default_pr.body,
        )

        timeout = value("timeout_seconds")
        return cls(
            token=_string_or_none(value("token")),
            api_url=(_string_or_none(value("api_url")) or DEFAULT_API_URL).rstrip("/"),
            uploads_url=(_string_or_none(value("uploads_url")) or DEFAULT_UPLOADS_URL).rstrip("/"),
            registry=_string_or_none(value("registry")) or DEFAULT_REGISTRY,
            user_agent=_string_or_none(value("user_agent")) or DEFAULT_USER_AGENT,
            timeout_seconds=float(timeout) if timeout not in (None, "") else 30.0,
            asset_label=_string_or_none(value("asset_label")) or DEFAULT_ASSET_LABEL,
            bot=bot,
            pull_request=pull_request,
        )


def load_settings(
    config_path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from the YAML config file, then apply environment overrides.

    A missing default config file is not an error; an explicitly requested
    one that does not exist raises ``FileNotFoundError``.
    """
    env = os.environ if env is None else env
    path = Path(config_path) if config_path else Path.cwd() / CONFIG_FILENAME
    raw: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        raw = dict(_ensure_mapping(loaded, "root"))
    elif config_path:
        raise FileNotFoundError(str(path))

    for name in _TOKEN_ENV_VARS:
        token = _string_or_none(env.get(name))
        if token:
            raw["token"] = token
            break
    overrides = {
        "registry": "PLUGIN_RELEASE_REGISTRY",
        "api_url": "PLUGIN_RELEASE_API_URL",
        "uploads_url": "PLUGIN_RELEASE_UPLOADS_URL",
        "timeout_seconds": "PLUGIN_RELEASE_TIMEOUT",
    }
    for key, env_name in overrides.items():
        override = _string_or_none(env.get(env_name))
        if override:
            raw[key] = override
    return Settings.from_dict(raw, env=env)
