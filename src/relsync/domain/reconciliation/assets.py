"""Asset synchronisation for one release.

Deletions run sequentially; uploads are the one point of true concurrency in a
run. Every upload is its own task and a failing upload never cancels its
siblings: assets that made it are genuinely attached and stay attached.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from relsync.domain.errors import AssetUploadFailed, ReconciliationFailed, ServiceError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from relsync.domain.model import LocalAsset, RemoteAsset, RemoteRelease
    from relsync.domain.ports.assets import AssetResolution, AssetSetResolver
    from relsync.domain.ports.hosting import ReleaseHostingService

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AssetUploadOutcome:
    """Result of uploading a single local asset: a remote record or an error."""

    name: str
    asset: RemoteAsset | None = None
    error: AssetUploadFailed | None = None

    @property
    def succeeded(self) -> bool:
        return self.asset is not None


@dataclass(slots=True, frozen=True)
class AssetSyncResult:
    outcomes: tuple[AssetUploadOutcome, ...] = ()
    removed: tuple[RemoteAsset, ...] = ()
    unmatched_patterns: tuple[str, ...] = ()
    no_files_matched: bool = False

    @property
    def uploaded(self) -> tuple[RemoteAsset, ...]:
        return tuple(outcome.asset for outcome in self.outcomes if outcome.asset is not None)

    @property
    def failures(self) -> tuple[AssetUploadFailed, ...]:
        return tuple(outcome.error for outcome in self.outcomes if outcome.error is not None)

    @property
    def warnings(self) -> tuple[str, ...]:
        messages = [
            f"Pattern '{pattern}' does not match any files." for pattern in self.unmatched_patterns
        ]
        if self.no_files_matched:
            messages.append("File patterns were given but no files matched; no assets uploaded.")
        messages.extend(str(failure) for failure in self.failures)
        return tuple(messages)


@dataclass(slots=True, frozen=True)
class UploadBatch:
    """Deletions and uploads needed to bring a release's assets in line."""

    stale: tuple[RemoteAsset, ...] = ()
    uploads: tuple[LocalAsset, ...] = ()


def plan_uploads(
    remote_assets: Iterable[RemoteAsset],
    local_assets: Sequence[LocalAsset],
    *,
    keep_assets: bool,
) -> UploadBatch:
    """Decide which remote assets go away before uploading ``local_assets``.

    Without ``keep_assets`` every remote asset is stale. With it, only remote
    assets sharing a name with a desired asset are replaced, since the service
    refuses two assets with the same name on one release.
    """

    desired_names = {asset.name for asset in local_assets}
    stale = tuple(
        asset for asset in remote_assets if not keep_assets or asset.name in desired_names
    )
    return UploadBatch(stale=stale, uploads=tuple(local_assets))


@dataclass(slots=True)
class AssetSynchronizer:
    service: ReleaseHostingService
    resolver: AssetSetResolver

    async def remove(self, assets: Iterable[RemoteAsset], *, tag: str) -> tuple[RemoteAsset, ...]:
        """Delete ``assets`` one after the other.

        An asset that is already gone counts as removed; any other failure
        aborts with :class:`ReconciliationFailed`.
        """

        removed: list[RemoteAsset] = []
        for asset in assets:
            try:
                await self.service.delete_release_asset(asset.id)
            except ServiceError as exc:
                if not exc.is_not_found:
                    raise ReconciliationFailed(
                        "Deleting release asset failed",
                        operation="delete_release_asset",
                        tag=tag,
                        target=asset.name,
                        cause=exc,
                    ) from exc
                log.debug("Asset %s (%s) already deleted", asset.name, asset.id)
            else:
                log.debug("Deleted asset %s (%s)", asset.name, asset.id)
            removed.append(asset)
        return tuple(removed)

    async def synchronize(
        self,
        release: RemoteRelease,
        patterns: Sequence[str],
        *,
        keep_assets: bool,
    ) -> AssetSyncResult:
        resolution = self._resolve(patterns)
        no_files_matched = bool(patterns) and not resolution.assets
        if no_files_matched:
            log.warning("Patterns %s did not include any valid file", list(patterns))

        batch = plan_uploads(release.assets, resolution.assets, keep_assets=keep_assets)
        removed = await self.remove(batch.stale, tag=release.tag_name)

        outcomes = await self.upload_all(release, batch.uploads)
        result = AssetSyncResult(
            outcomes=outcomes,
            removed=removed,
            unmatched_patterns=resolution.unmatched_patterns,
            no_files_matched=no_files_matched,
        )
        log.info(
            "Assets for %s: uploaded=%s, failed=%s, removed=%s",
            release.tag_name,
            len(result.uploaded),
            len(result.failures),
            len(removed),
        )
        return result

    async def upload_all(
        self,
        release: RemoteRelease,
        assets: Sequence[LocalAsset],
    ) -> tuple[AssetUploadOutcome, ...]:
        """Upload every asset concurrently and wait for the whole batch."""

        if not assets:
            return ()
        outcomes = await asyncio.gather(*(self._upload_one(release, asset) for asset in assets))
        return tuple(outcomes)

    async def _upload_one(self, release: RemoteRelease, asset: LocalAsset) -> AssetUploadOutcome:
        log.debug("Uploading %s (%s bytes, %s)", asset.name, asset.size_bytes, asset.content_type)
        try:
            remote = await self.service.upload_release_asset(release, asset)
        except ServiceError as exc:
            failure = AssetUploadFailed(
                "Uploading release asset failed",
                asset_name=asset.name,
                tag=release.tag_name,
                cause=exc,
            )
            log.warning("%s", failure)
            return AssetUploadOutcome(name=asset.name, error=failure)
        return AssetUploadOutcome(name=asset.name, asset=remote)

    def _resolve(self, patterns: Sequence[str]) -> AssetResolution:
        resolution = self.resolver.resolve(patterns)
        for pattern in resolution.unmatched_patterns:
            log.warning("Pattern '%s' does not match any files.", pattern)
        return resolution
