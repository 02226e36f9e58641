"""GitHub API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from relsync import __version__

from .http_resilience import RateLimit, ResilienceConfig, ThrottlePolicy

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class GitHubConfig:
    """Holds GitHub API configuration values."""

    token: str
    owner: str
    repo: str
    resilience: ResilienceConfig


def default_github_headers(token: str) -> dict[str, str]:
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "User-Agent": f"relsync/{__version__}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }


def get_github_config(
    *,
    token: str,
    owner: str,
    repo: str,
    api_url: str | None = None,
    resilience: ResilienceConfig | None = None,
) -> GitHubConfig:
    return GitHubConfig(
        token=token,
        owner=owner,
        repo=repo,
        resilience=resilience
        or ResilienceConfig(
            name="github",
            base_url=(api_url or GITHUB_API_URL).rstrip("/"),
            timeout_seconds=GITHUB_TIMEOUT_SECONDS,
            throttle=ThrottlePolicy(),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers=default_github_headers(token),
        ),
    )
