"""Publish plugin releases to GitHub and register them in the plugin directory."""

from .authors import author_display_name, parse_author
from .client import RemoteClient
from .errors import ApiError, AuthorizationError, ConflictError, ManifestError, ReleaseError
from .github import GitHubAccount
from .manifest import load_plugin_config, plugin_config_from_dict, repository_slug
from .registry import RegistrySubmitter, build_plugin_entry
from .releases import ReleasePublisher
from .settings import Settings, load_settings
from .types import (
    ALREADY_REGISTERED,
    SUBMITTED,
    Author,
    BotIdentity,
    Fork,
    PluginConfig,
    PluginEntry,
    PullRequestTemplate,
    RemoteRequest,
    RepositoryRef,
    SubmissionContext,
    SubmissionResult,
)

__all__ = [
    "RemoteClient",
    "GitHubAccount",
    "ReleasePublisher",
    "RegistrySubmitter",
    "Settings",
    "load_settings",
    "load_plugin_config",
    "plugin_config_from_dict",
    "repository_slug",
    "build_plugin_entry",
    "parse_author",
    "author_display_name",
    "ReleaseError",
    "ApiError",
    "ConflictError",
    "AuthorizationError",
    "ManifestError",
    "ALREADY_REGISTERED",
    "SUBMITTED",
    "Author",
    "BotIdentity",
    "Fork",
    "PluginConfig",
    "PluginEntry",
    "PullRequestTemplate",
    "RemoteRequest",
    "RepositoryRef",
    "SubmissionContext",
    "SubmissionResult",
]
