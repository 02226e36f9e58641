"""In-memory fakes for the release-hosting and asset-resolver ports."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from relsync.domain.errors import ServiceError, ServiceErrorKind
from relsync.domain.model import LocalAsset, RemoteAsset, RemoteRelease, TagRef
from relsync.domain.ports.assets import AssetResolution

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from relsync.domain.ports.assets import AssetSetResolver
    from relsync.domain.ports.hosting import ReleaseHostingService

HEAD_SHA = "head0000"
TARGET_SHA = "target1111"
DEFAULT_BRANCH = "main"


def make_local_asset(name: str, payload: bytes = b"payload") -> LocalAsset:
    return LocalAsset(
        name=name,
        content_type="application/zip",
        size_bytes=len(payload),
        payload=payload,
    )


def service_error(
    operation: str,
    kind: ServiceErrorKind = ServiceErrorKind.OTHER,
    status: int | None = 500,
) -> ServiceError:
    return ServiceError(f"{operation} failed", kind=kind, operation=operation, status=status)


class StaticAssetResolver:
    """Resolver returning fixed assets; patterns name assets directly."""

    def __init__(self, assets: Iterable[LocalAsset] = ()) -> None:
        self._assets = {asset.name: asset for asset in assets}
        self.calls: list[tuple[str, ...]] = []

    def resolve(self, patterns: Sequence[str]) -> AssetResolution:
        self.calls.append(tuple(patterns))
        matched = [self._assets[pattern] for pattern in patterns if pattern in self._assets]
        unmatched = [pattern for pattern in patterns if pattern not in self._assets]
        return AssetResolution(assets=tuple(matched), unmatched_patterns=tuple(unmatched))


class InMemoryReleaseService:
    """Behaves like the hosting service for one repository.

    Like the real service, drafts are invisible to the direct tag lookup and
    publishing a release creates its tag when it does not exist yet.
    """

    def __init__(self, *, head_sha: str = HEAD_SHA) -> None:
        self.head_sha = head_sha
        self.releases: dict[int, RemoteRelease] = {}
        self.refs: dict[str, str] = {}
        self.calls: list[tuple[str, object]] = []
        self.failures: dict[str, ServiceError] = {}
        self.failing_uploads: set[str] = set()
        self.lagging_tags: set[str] = set()
        self._next_id = 100

    # test helpers

    def seed_release(
        self,
        tag: str,
        *,
        draft: bool = False,
        target_commitish: str = DEFAULT_BRANCH,
        assets: Sequence[str] = (),
    ) -> RemoteRelease:
        release = self._new_release(
            tag, draft=draft, prerelease=False, target_commitish=target_commitish
        )
        release = replace(release, assets=tuple(self._new_asset(name) for name in assets))
        self.releases[release.id] = release
        return release

    def release_for(self, tag: str) -> RemoteRelease | None:
        return next((r for r in self.releases.values() if r.tag_name == tag), None)

    def called(self, operation: str) -> list[object]:
        return [argument for name, argument in self.calls if name == operation]

    # port implementation

    async def get_release_by_tag(self, tag: str) -> RemoteRelease:
        self._record("get_release_by_tag", tag)
        release = self.release_for(tag)
        if release is None or release.draft or tag in self.lagging_tags:
            raise service_error("get_release_by_tag", ServiceErrorKind.NOT_FOUND, 404)
        return release

    async def list_releases(self) -> list[RemoteRelease]:
        self._record("list_releases", None)
        return list(self.releases.values())

    async def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        draft: bool,
        prerelease: bool,
        target_commitish: str | None = None,
        generate_release_notes: bool = True,
    ) -> RemoteRelease:
        self._record(
            "create_release",
            {
                "tag_name": tag_name,
                "name": name,
                "draft": draft,
                "prerelease": prerelease,
                "target_commitish": target_commitish,
                "generate_release_notes": generate_release_notes,
            },
        )
        release = self._new_release(
            tag_name,
            draft=draft,
            prerelease=prerelease,
            target_commitish=target_commitish or DEFAULT_BRANCH,
        )
        release = replace(release, name=name)
        self.releases[release.id] = release
        self._publish_tag(release)
        return release

    async def update_release(
        self,
        release_id: int,
        *,
        tag_name: str,
        target_commitish: str,
        draft: bool,
        prerelease: bool,
    ) -> RemoteRelease:
        self._record(
            "update_release",
            {
                "release_id": release_id,
                "tag_name": tag_name,
                "target_commitish": target_commitish,
                "draft": draft,
                "prerelease": prerelease,
            },
        )
        release = self._get(release_id, "update_release")
        updated = replace(
            release,
            tag_name=tag_name,
            target_commitish=target_commitish,
            draft=draft,
            prerelease=prerelease,
        )
        self.releases[release_id] = updated
        self._publish_tag(updated)
        return updated

    async def delete_release(self, release_id: int) -> None:
        self._record("delete_release", release_id)
        self._get(release_id, "delete_release")
        del self.releases[release_id]

    async def list_release_assets(self, release_id: int) -> list[RemoteAsset]:
        self._record("list_release_assets", release_id)
        return list(self._get(release_id, "list_release_assets").assets)

    async def delete_release_asset(self, asset_id: int) -> None:
        self._record("delete_release_asset", asset_id)
        for release in self.releases.values():
            remaining = tuple(asset for asset in release.assets if asset.id != asset_id)
            if len(remaining) != len(release.assets):
                self.releases[release.id] = replace(release, assets=remaining)
                return
        raise service_error("delete_release_asset", ServiceErrorKind.NOT_FOUND, 404)

    async def upload_release_asset(self, release: RemoteRelease, asset: LocalAsset) -> RemoteAsset:
        self._record("upload_release_asset", asset.name)
        if asset.name in self.failing_uploads:
            raise service_error("upload_release_asset")
        current = self._get(release.id, "upload_release_asset")
        if asset.name in current.asset_names:
            raise service_error("upload_release_asset", status=422)
        remote = self._new_asset(asset.name, size=asset.size_bytes)
        self.releases[release.id] = replace(current, assets=(*current.assets, remote))
        return remote

    async def get_ref(self, tag: str) -> TagRef:
        self._record("get_ref", tag)
        if tag not in self.refs:
            raise service_error("get_ref", ServiceErrorKind.NOT_FOUND, 404)
        return TagRef(name=tag, commit_sha=self.refs[tag])

    async def create_ref(self, tag: str, sha: str) -> TagRef:
        self._record("create_ref", (tag, sha))
        if tag in self.refs:
            raise service_error("create_ref", status=422)
        self.refs[tag] = sha
        return TagRef(name=tag, commit_sha=sha)

    async def delete_ref(self, tag: str) -> None:
        self._record("delete_ref", tag)
        if tag not in self.refs:
            raise service_error("delete_ref", ServiceErrorKind.NOT_FOUND, 404)
        del self.refs[tag]

    # internals

    def _record(self, operation: str, argument: object) -> None:
        self.calls.append((operation, argument))
        if (failure := self.failures.get(operation)) is not None:
            raise failure

    def _get(self, release_id: int, operation: str) -> RemoteRelease:
        try:
            return self.releases[release_id]
        except KeyError:
            raise service_error(operation, ServiceErrorKind.NOT_FOUND, 404) from None

    def _publish_tag(self, release: RemoteRelease) -> None:
        if release.draft or release.tag_name in self.refs:
            return
        target = release.target_commitish
        self.refs[release.tag_name] = self.head_sha if target == DEFAULT_BRANCH else target

    def _new_release(
        self,
        tag: str,
        *,
        draft: bool,
        prerelease: bool,
        target_commitish: str,
    ) -> RemoteRelease:
        self._next_id += 1
        return RemoteRelease(
            id=self._next_id,
            tag_name=tag,
            name=tag,
            target_commitish=target_commitish,
            draft=draft,
            prerelease=prerelease,
            upload_url=f"https://uploads.example.com/releases/{self._next_id}/assets{{?name}}",
            html_url=f"https://example.com/releases/tag/{tag}",
        )

    def _new_asset(self, name: str, *, size: int = 0) -> RemoteAsset:
        self._next_id += 1
        return RemoteAsset(id=self._next_id, name=name, size=size)


if TYPE_CHECKING:
    _service_check: ReleaseHostingService = InMemoryReleaseService()
    _resolver_check: AssetSetResolver = StaticAssetResolver()
