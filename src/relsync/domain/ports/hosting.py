"""Port for the remote release-hosting service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from relsync.domain.model import LocalAsset, RemoteAsset, RemoteRelease, TagRef


@runtime_checkable
class ReleaseHostingService(Protocol):
    """Remote operations the reconciler needs.

    Implementations raise :class:`relsync.domain.errors.ServiceError` on failure,
    tagged with a :class:`~relsync.domain.errors.ServiceErrorKind`.
    """

    async def get_release_by_tag(self, tag: str) -> RemoteRelease: ...

    async def list_releases(self) -> list[RemoteRelease]: ...

    async def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        draft: bool,
        prerelease: bool,
        target_commitish: str | None = None,
        generate_release_notes: bool = True,
    ) -> RemoteRelease: ...

    async def update_release(
        self,
        release_id: int,
        *,
        tag_name: str,
        target_commitish: str,
        draft: bool,
        prerelease: bool,
    ) -> RemoteRelease: ...

    async def delete_release(self, release_id: int) -> None: ...

    async def list_release_assets(self, release_id: int) -> list[RemoteAsset]: ...

    async def delete_release_asset(self, asset_id: int) -> None: ...

    async def upload_release_asset(
        self,
        release: RemoteRelease,
        asset: LocalAsset,
    ) -> RemoteAsset: ...

    async def get_ref(self, tag: str) -> TagRef: ...

    async def create_ref(self, tag: str, sha: str) -> TagRef: ...

    async def delete_ref(self, tag: str) -> None: ...


__all__ = ["ReleaseHostingService"]
