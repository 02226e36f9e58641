"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

_TRUE_VALUES = frozenset({"true", "True", "TRUE"})
_FALSE_VALUES = frozenset({"false", "False", "FALSE"})


def require_env_vars(
    names: Sequence[str],
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    source = os.environ if environ is None else environ
    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = source.get(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def optional_env_var(name: str, *, environ: Mapping[str, str] | None = None) -> str | None:
    """Return a stripped environment variable, or ``None`` when unset or blank."""

    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def bool_env_var(name: str, *, environ: Mapping[str, str] | None = None) -> bool:
    """Parse a boolean input the way workflow runners do (YAML 1.2 core schema).

    Unset or blank values are ``False``.
    """

    value = optional_env_var(name, environ=environ)
    if value is None or value in _FALSE_VALUES:
        return False
    if value in _TRUE_VALUES:
        return True
    raise ConfigurationError(
        f"Input does not follow the YAML 1.2 core schema: {name}={value!r} "
        "(expected true|True|TRUE|false|False|FALSE)"
    )
