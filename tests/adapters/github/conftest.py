from __future__ import annotations

from collections.abc import Callable

import pytest

from relsync.adapters.github import GitHubReleaseService
from relsync.config.github import GitHubConfig, get_github_config
from tests.support.github import API_URL, Handler, make_client_factory


@pytest.fixture
def github_config() -> GitHubConfig:
    return get_github_config(token="t0ken", owner="octo", repo="widgets", api_url=API_URL)


@pytest.fixture
def make_service(
    github_config: GitHubConfig,
) -> Callable[[Handler], GitHubReleaseService]:
    def build(handler: Handler) -> GitHubReleaseService:
        client = make_client_factory(handler)(github_config.resilience)
        return GitHubReleaseService(config=github_config, client=client)

    return build
