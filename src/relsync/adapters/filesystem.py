"""Expand file patterns into local release assets."""

from __future__ import annotations

import glob
import mimetypes
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from relsync.domain.model import LocalAsset
from relsync.domain.ports.assets import AssetResolution

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relsync.domain.ports.assets import AssetSetResolver

log = getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: Path) -> str:
    guessed, _encoding = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_CONTENT_TYPE


def build_local_asset(path: Path) -> LocalAsset:
    payload = path.read_bytes()
    return LocalAsset(
        name=path.name,
        content_type=content_type_for(path),
        size_bytes=len(payload),
        payload=payload,
        path=path,
    )


@dataclass(slots=True)
class GlobAssetResolver:
    """Glob-based resolver; relative patterns are anchored at ``root`` (default: cwd)."""

    root: Path | None = None

    def resolve(self, patterns: Sequence[str]) -> AssetResolution:
        assets: list[LocalAsset] = []
        unmatched: list[str] = []
        seen_paths: set[Path] = set()
        seen_names: dict[str, Path] = {}

        for pattern in patterns:
            matches = self.matching_files(pattern)
            if not matches:
                unmatched.append(pattern)
                continue
            for path in matches:
                resolved = path.resolve()
                if resolved in seen_paths:
                    continue
                seen_paths.add(resolved)
                if (previous := seen_names.get(path.name)) is not None:
                    log.warning(
                        "Skipping %s: asset name %s already taken by %s", path, path.name, previous
                    )
                    continue
                seen_names[path.name] = path
                assets.append(build_local_asset(path))

        return AssetResolution(assets=tuple(assets), unmatched_patterns=tuple(unmatched))

    def matching_files(self, pattern: str) -> list[Path]:
        root = str(self.root) if self.root is not None else None
        matches = sorted(glob.glob(pattern, root_dir=root, recursive=True))
        base = self.root or Path()
        return [path for path in (base / match for match in matches) if path.is_file()]


if TYPE_CHECKING:
    _resolver_check: AssetSetResolver = GlobAssetResolver()
