"""Release reconciler: converge one remote release onto a desired description.

The reconciler looks up the release for the desired tag, plans create, update
or recreate, runs the planned steps strictly in order and finally hands the
resulting release to the asset synchroniser. All state is re-derived from the
hosting service on every run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from relsync.domain.errors import ReconciliationFailed, ServiceError

from .plan import ReleaseAction, ReleaseStep, plan_reconciliation

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from relsync.domain.model import DesiredRelease, ProcessContext, RemoteRelease
    from relsync.domain.ports.hosting import ReleaseHostingService

    from .assets import AssetSynchronizer, AssetSyncResult
    from .plan import ReconciliationPlan
    from .tags import TagResolver

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReconciliationOutcome:
    action: ReleaseAction
    release: RemoteRelease
    assets: AssetSyncResult
    tag_moved: bool = False


@dataclass(slots=True)
class _RunState:
    desired: DesiredRelease
    plan: ReconciliationPlan
    release: RemoteRelease | None
    tag_existed: bool = False
    tag_moved: bool = False


@dataclass(slots=True)
class ReleaseReconciler:
    """Drive the tag resolver and asset synchroniser to converge one release."""

    service: ReleaseHostingService
    tags: TagResolver
    assets: AssetSynchronizer
    context: ProcessContext
    _steps: dict[ReleaseStep, Callable[[_RunState], Awaitable[None]]] = field(
        init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._steps = {
            ReleaseStep.DELETE_RELEASE: self._delete_release,
            ReleaseStep.DELETE_TAG: self._delete_tag,
            ReleaseStep.CREATE_RELEASE: self._create_release,
            ReleaseStep.RESTORE_TAG: self._restore_tag,
            ReleaseStep.PRUNE_ASSETS: self._prune_assets,
            ReleaseStep.PLACE_TAG: self._place_tag,
            ReleaseStep.UPDATE_RELEASE: self._update_release,
        }

    async def reconcile(self, desired: DesiredRelease) -> ReconciliationOutcome:
        existing = await self.lookup(desired.tag)
        if existing is not None:
            log.debug("Found release %s with id %s", existing.name, existing.id)

        plan = plan_reconciliation(desired, existing)
        log.info(
            "Reconciling release %s: action=%s, steps=%s",
            desired.tag,
            plan.action,
            ", ".join(plan.steps),
        )

        state = _RunState(desired=desired, plan=plan, release=existing)
        for step in plan.steps:
            log.debug("Running step %s", step)
            await self._steps[step](state)

        release = self._require_release(state)
        synced = await self.assets.synchronize(
            release,
            desired.file_patterns,
            keep_assets=desired.keep_assets,
        )
        log.info(
            "Release %s reconciled: id=%s, action=%s, tag_moved=%s",
            desired.tag,
            release.id,
            plan.action,
            state.tag_moved,
        )
        return ReconciliationOutcome(
            action=plan.action,
            release=release,
            assets=synced,
            tag_moved=state.tag_moved,
        )

    async def lookup(self, tag: str) -> RemoteRelease | None:
        """Find the release for ``tag``.

        The direct lookup lags behind for freshly pushed tags on some
        backends, so "not found" falls back to scanning the release list.
        """

        try:
            return await self.service.get_release_by_tag(tag)
        except ServiceError as exc:
            if not exc.is_not_found:
                raise self._failure("get_release_by_tag", tag, exc) from exc
            log.info("Release was not published or tag does not exist yet: %s", tag)

        try:
            releases = await self.service.list_releases()
        except ServiceError as exc:
            raise self._failure("list_releases", tag, exc) from exc
        return next((release for release in releases if release.tag_name == tag), None)

    async def _delete_release(self, state: _RunState) -> None:
        release = self._require_release(state)
        try:
            await self.service.delete_release(release.id)
        except ServiceError as exc:
            raise self._failure(
                "delete_release", state.desired.tag, exc, target=release.id
            ) from exc
        log.info("Deleted release %s (id %s)", release.tag_name, release.id)
        state.release = None

    async def _delete_tag(self, state: _RunState) -> None:
        state.tag_existed = await self.tags.delete_ref(state.desired.tag)

    async def _create_release(self, state: _RunState) -> None:
        desired = state.desired
        plan = state.plan
        try:
            release = await self.service.create_release(
                tag_name=desired.tag,
                name=desired.tag,
                draft=plan.draft,
                prerelease=desired.prerelease,
                target_commitish=plan.target_commitish,
                generate_release_notes=True,
            )
        except ServiceError as exc:
            raise self._failure(
                "create_release", desired.tag, exc, target=plan.target_commitish
            ) from exc
        log.info(
            "Created release %s (id %s, draft=%s)", release.tag_name, release.id, release.draft
        )
        state.release = release

    async def _restore_tag(self, state: _RunState) -> None:
        if not state.tag_existed:
            log.debug("Tag %s did not exist before recreate; leaving it absent", state.desired.tag)
            return
        state.tag_moved = await self.tags.reconcile_ref(
            state.desired.tag,
            self.context.target_sha,
            allow_create=True,
        )

    async def _prune_assets(self, state: _RunState) -> None:
        release = self._require_release(state)
        try:
            current = await self.service.list_release_assets(release.id)
        except ServiceError as exc:
            raise self._failure(
                "list_release_assets", state.desired.tag, exc, target=release.id
            ) from exc
        await self.assets.remove(current, tag=state.desired.tag)
        state.release = release.without_assets()

    async def _place_tag(self, state: _RunState) -> None:
        release = self._require_release(state)
        state.tag_moved = await self.tags.place(
            state.desired.tag,
            self.context.target_sha,
            release_is_draft=release.draft,
        )

    async def _update_release(self, state: _RunState) -> None:
        desired = state.desired
        plan = state.plan
        release = self._require_release(state)
        target_commitish = plan.target_commitish or release.target_commitish
        log.debug(
            "Updating release %s: target_commitish=%s, draft=%s, prerelease=%s",
            release.id,
            target_commitish,
            plan.draft,
            desired.prerelease,
        )
        try:
            updated = await self.service.update_release(
                release.id,
                tag_name=desired.tag,
                target_commitish=target_commitish,
                draft=plan.draft,
                prerelease=desired.prerelease,
            )
        except ServiceError as exc:
            raise self._failure("update_release", desired.tag, exc, target=release.id) from exc
        state.release = updated

    def _require_release(self, state: _RunState) -> RemoteRelease:
        if state.release is None:
            raise ReconciliationFailed(
                "No release available after the sequential steps",
                operation=state.plan.action,
                tag=state.desired.tag,
            )
        return state.release

    @staticmethod
    def _failure(
        operation: str,
        tag: str,
        cause: ServiceError,
        *,
        target: object | None = None,
    ) -> ReconciliationFailed:
        return ReconciliationFailed(
            "Release reconciliation failed",
            operation=operation,
            tag=tag,
            target=str(target) if target is not None else None,
            cause=cause,
        )
