"""Run configuration: desired release, process context and API access.

Everything a run needs is read here once, at the process boundary, and handed
to the reconciler as plain values. Inputs follow the workflow-runner
convention (``INPUT_<NAME>`` variables); explicit keyword overrides, usually
coming from CLI flags, win over the environment.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from relsync.domain.model import DesiredRelease, ProcessContext, Repository

from .env import bool_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import GitHubConfig, get_github_config

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_PATTERN_SEPARATOR = re.compile(r"\r?\n|,")


@dataclass(frozen=True)
class ReleaseConfig:
    """Holds everything one reconciliation run is allowed to know."""

    desired: DesiredRelease
    context: ProcessContext
    github: GitHubConfig
    output_path: Path | None = None
    debug: bool = False


def parse_file_patterns(files: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split newline and comma separated patterns, dropping blanks."""

    if files is None:
        return ()
    lines = [files] if isinstance(files, str) else list(files)
    patterns: list[str] = []
    for line in lines:
        for pattern in _PATTERN_SEPARATOR.split(line):
            stripped = pattern.strip()
            if stripped:
                patterns.append(stripped)
    return tuple(patterns)


def get_release_config(
    *,
    environ: Mapping[str, str] | None = None,
    tag: str | None = None,
    target_commitish: str | None = None,
    files: Iterable[str] | None = None,
    draft: bool | None = None,
    prerelease: bool | None = None,
    recreate: bool | None = None,
    move_tag: bool | None = None,
    keep_assets: bool | None = None,
    token: str | None = None,
    repository: str | None = None,
    sha: str | None = None,
    api_url: str | None = None,
) -> ReleaseConfig:
    env = os.environ if environ is None else environ

    def _flag(value: bool | None, name: str) -> bool:
        return value if value is not None else bool_env_var(name, environ=env)

    resolved_tag = tag or optional_env_var("INPUT_TAG_NAME", environ=env)
    if not resolved_tag:
        raise MissingConfigurationError("Missing configuration for: INPUT_TAG_NAME")

    resolved_token = (
        token
        or optional_env_var("INPUT_TOKEN", environ=env)
        or optional_env_var("GITHUB_TOKEN", environ=env)
    )
    if not resolved_token:
        raise MissingConfigurationError("Missing configuration for: INPUT_TOKEN, GITHUB_TOKEN")

    process = _process_values(env, repository=repository, sha=sha)
    try:
        coordinates = Repository.parse(process["GITHUB_REPOSITORY"])
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    patterns = (
        parse_file_patterns(files)
        if files is not None
        else parse_file_patterns(env.get("INPUT_FILES"))
    )

    desired = DesiredRelease(
        tag=resolved_tag.strip(),
        target_commitish=target_commitish
        or optional_env_var("INPUT_TARGET_COMMITISH", environ=env),
        draft=_flag(draft, "INPUT_DRAFT"),
        prerelease=_flag(prerelease, "INPUT_PRERELEASE"),
        recreate=_flag(recreate, "INPUT_RECREATE"),
        move_tag=_flag(move_tag, "INPUT_MOVE_TAG"),
        keep_assets=_flag(keep_assets, "INPUT_KEEP_ASSETS"),
        file_patterns=patterns,
    )

    output_file = optional_env_var("GITHUB_OUTPUT", environ=env)
    return ReleaseConfig(
        desired=desired,
        context=ProcessContext(repository=coordinates, target_sha=process["GITHUB_SHA"].strip()),
        github=get_github_config(
            token=resolved_token,
            owner=coordinates.owner,
            repo=coordinates.name,
            api_url=api_url or optional_env_var("GITHUB_API_URL", environ=env),
        ),
        output_path=Path(output_file) if output_file else None,
        debug=optional_env_var("RUNNER_DEBUG", environ=env) == "1",
    )


def _process_values(
    env: Mapping[str, str],
    *,
    repository: str | None,
    sha: str | None,
) -> dict[str, str]:
    overrides = {"GITHUB_REPOSITORY": repository, "GITHUB_SHA": sha}
    missing = [name for name, value in overrides.items() if not value]
    values = require_env_vars(missing, environ=env) if missing else {}
    values.update({name: value for name, value in overrides.items() if value})
    return values
