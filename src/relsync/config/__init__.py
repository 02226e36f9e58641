"""Application configuration helpers."""

from __future__ import annotations

from .env import bool_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import GITHUB_API_URL, GitHubConfig, get_github_config
from .http_resilience import (
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ThrottleDecision,
    ThrottlePolicy,
    ThrottleSignal,
)
from .logging import configure_logging
from .release import ReleaseConfig, get_release_config, parse_file_patterns

__all__ = [
    "GITHUB_API_URL",
    "ConfigurationError",
    "GitHubConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReleaseConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "ThrottleDecision",
    "ThrottlePolicy",
    "ThrottleSignal",
    "bool_env_var",
    "configure_logging",
    "get_github_config",
    "get_release_config",
    "optional_env_var",
    "parse_file_patterns",
    "require_env_vars",
]
