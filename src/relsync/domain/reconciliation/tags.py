"""Tag reference placement.

Moving a tag is always expressed as delete followed by create: the hosting
service's ref update primitive refuses non fast-forward moves, so delete and
create is the portable equivalent.

Tag placement is best-effort relative to the release record. Failures are
logged as :class:`TagPlacementFailed` and reported as "not moved", they never
abort a reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from relsync.domain.errors import ServiceError, TagPlacementFailed

if TYPE_CHECKING:
    from relsync.domain.model import TagRef
    from relsync.domain.ports.hosting import ReleaseHostingService

log = getLogger(__name__)


@dataclass(slots=True)
class TagResolver:
    service: ReleaseHostingService

    async def get_ref(self, tag: str) -> TagRef | None:
        """Return the ref ``tag`` points at, or ``None`` when it was never created."""

        try:
            return await self.service.get_ref(tag)
        except ServiceError as exc:
            if exc.is_not_found:
                log.debug("Tag %s has no ref yet", tag)
                return None
            raise

    async def reconcile_ref(self, tag: str, target_sha: str, *, allow_create: bool) -> bool:
        """Make ``tag`` point at ``target_sha``. Returns whether the ref was (re)created."""

        try:
            current = await self.get_ref(tag)
        except ServiceError as exc:
            _log_placement_failure("get_ref", tag, target_sha, exc)
            return False
        return await self._reconcile(tag, target_sha, current=current, allow_create=allow_create)

    async def place(self, tag: str, target_sha: str, *, release_is_draft: bool) -> bool:
        """Move ``tag`` for an existing release.

        An unpublished draft without a ref yet must not get one ahead of
        publication, so creation is only allowed when the ref exists or the
        release is published.
        """

        try:
            current = await self.get_ref(tag)
        except ServiceError as exc:
            _log_placement_failure("get_ref", tag, target_sha, exc)
            return False
        allow_create = not (current is None and release_is_draft)
        if not allow_create:
            log.info("Not creating tag %s: release is an unpublished draft", tag)
        return await self._reconcile(tag, target_sha, current=current, allow_create=allow_create)

    async def delete_ref(self, tag: str) -> bool:
        """Delete the ref for ``tag``. Returns whether a ref existed."""

        try:
            await self.service.delete_ref(tag)
        except ServiceError as exc:
            if exc.is_not_found:
                log.debug("Tag %s already absent", tag)
                return False
            _log_placement_failure("delete_ref", tag, None, exc)
            return False
        log.info("Deleted tag %s", tag)
        return True

    async def _reconcile(
        self,
        tag: str,
        target_sha: str,
        *,
        current: TagRef | None,
        allow_create: bool,
    ) -> bool:
        log.debug(
            "Tag %s: current=%s target=%s allow_create=%s",
            tag,
            current.commit_sha if current else None,
            target_sha,
            allow_create,
        )
        if current is not None and current.commit_sha == target_sha:
            log.info("Tag %s already on %s", tag, target_sha)
            return False

        if current is not None:
            try:
                await self.service.delete_ref(tag)
            except ServiceError as exc:
                if not exc.is_not_found:
                    _log_placement_failure("delete_ref", tag, target_sha, exc)
                    return False
            log.debug("Deleted tag %s from %s", tag, current.commit_sha)
        elif not allow_create:
            return False

        try:
            await self.service.create_ref(tag, target_sha)
        except ServiceError as exc:
            _log_placement_failure("create_ref", tag, target_sha, exc)
            return False

        log.info("Tag %s placed on %s", tag, target_sha)
        return True


def _log_placement_failure(
    operation: str,
    tag: str,
    target_sha: str | None,
    cause: ServiceError,
) -> None:
    failure = TagPlacementFailed(
        "Tag placement failed",
        operation=operation,
        tag=tag,
        target=target_sha,
        cause=cause,
    )
    log.warning("%s", failure)
