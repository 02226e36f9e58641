"""Release domain model (pure, dependency-light)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

type AssetName = str
type CommitSha = str


@dataclass(slots=True, frozen=True, kw_only=True)
class DesiredRelease:
    """Caller-supplied description of the release a run must converge to."""

    tag: str
    target_commitish: str | None = None
    draft: bool = False
    prerelease: bool = False
    recreate: bool = False
    move_tag: bool = False
    keep_assets: bool = False
    file_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.tag or not self.tag.strip():
            raise ValueError("Release tag must be a non-empty string")


@dataclass(slots=True, frozen=True, kw_only=True)
class RemoteAsset:
    """Asset attached to a remote release. ``name`` is unique within a release."""

    id: int
    name: AssetName
    size: int = 0
    content_type: str | None = None
    download_url: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class RemoteRelease:
    id: int
    tag_name: str
    name: str | None
    target_commitish: str
    draft: bool
    prerelease: bool
    upload_url: str
    html_url: str
    assets: tuple[RemoteAsset, ...] = ()

    @property
    def asset_names(self) -> frozenset[AssetName]:
        return frozenset(asset.name for asset in self.assets)

    def without_assets(self) -> RemoteRelease:
        return replace(self, assets=())


@dataclass(slots=True, frozen=True, kw_only=True)
class LocalAsset:
    """File on disk ready to be uploaded as a release asset."""

    name: AssetName
    content_type: str
    size_bytes: int
    payload: bytes = field(repr=False)
    path: Path | None = None


@dataclass(slots=True, frozen=True)
class TagRef:
    """Remote pointer a tag name resolves to."""

    name: str
    commit_sha: CommitSha


@dataclass(slots=True, frozen=True)
class Repository:
    owner: str
    name: str

    @classmethod
    def parse(cls, full_name: str) -> Repository:
        owner, sep, name = full_name.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Invalid repository coordinates: {full_name!r}")
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(slots=True, frozen=True)
class ProcessContext:
    """Immutable facts about the triggering run."""

    repository: Repository
    target_sha: CommitSha
