"""Port for expanding file patterns into local release assets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relsync.domain.model import LocalAsset


@dataclass(slots=True, frozen=True)
class AssetResolution:
    """Local assets matched by a set of patterns plus the patterns that matched nothing."""

    assets: tuple[LocalAsset, ...] = ()
    unmatched_patterns: tuple[str, ...] = ()


@runtime_checkable
class AssetSetResolver(Protocol):
    def resolve(self, patterns: Sequence[str]) -> AssetResolution: ...


__all__ = ["AssetResolution", "AssetSetResolver"]
