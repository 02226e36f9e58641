"""Reconciliation plan types.

A run is split in two phases:
- an ordered list of sequential steps mutating the release record and its tag
- a fan-out/fan-in batch of asset uploads against the resulting release

The plan for the first phase is a pure function of the desired release and the
release found remotely, so the branching rules can be tested without I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relsync.domain.model import DesiredRelease, RemoteRelease


class ReleaseAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    RECREATE = "recreate"


class ReleaseStep(StrEnum):
    """One sequential mutation. Each step may depend on the previous one's result."""

    DELETE_RELEASE = "delete_release"
    DELETE_TAG = "delete_tag"
    CREATE_RELEASE = "create_release"
    RESTORE_TAG = "restore_tag"
    PRUNE_ASSETS = "prune_assets"
    PLACE_TAG = "place_tag"
    UPDATE_RELEASE = "update_release"


@dataclass(slots=True, frozen=True, kw_only=True)
class ReconciliationPlan:
    action: ReleaseAction
    steps: tuple[ReleaseStep, ...]
    draft: bool
    target_commitish: str | None
    existing: RemoteRelease | None = None


def plan_reconciliation(
    desired: DesiredRelease,
    existing: RemoteRelease | None,
) -> ReconciliationPlan:
    """Choose create, update or recreate and lay out the sequential steps."""

    if existing is None:
        return ReconciliationPlan(
            action=ReleaseAction.CREATE,
            steps=(ReleaseStep.CREATE_RELEASE,),
            draft=desired.draft,
            target_commitish=desired.target_commitish or None,
        )

    if desired.recreate:
        # The replacement is always a draft so nothing public is left behind
        # if a later step fails.
        return ReconciliationPlan(
            action=ReleaseAction.RECREATE,
            steps=(
                ReleaseStep.DELETE_RELEASE,
                ReleaseStep.DELETE_TAG,
                ReleaseStep.CREATE_RELEASE,
                ReleaseStep.RESTORE_TAG,
            ),
            draft=True,
            target_commitish=desired.target_commitish or None,
            existing=existing,
        )

    steps: list[ReleaseStep] = []
    if not desired.keep_assets:
        steps.append(ReleaseStep.PRUNE_ASSETS)
    if desired.move_tag:
        steps.append(ReleaseStep.PLACE_TAG)
    steps.append(ReleaseStep.UPDATE_RELEASE)
    return ReconciliationPlan(
        action=ReleaseAction.UPDATE,
        steps=tuple(steps),
        draft=desired.draft,
        target_commitish=desired.target_commitish or existing.target_commitish,
        existing=existing,
    )
