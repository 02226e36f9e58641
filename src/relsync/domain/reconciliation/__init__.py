"""Release reconciliation core.

Layered flow for one run:
1) look up the release for the desired tag
2) plan create, update or recreate as an ordered list of steps
3) run the steps sequentially (release mutation, tag placement)
4) fan out asset uploads against the resulting release and wait for all of them
"""

from __future__ import annotations

from .assets import (
    AssetSynchronizer,
    AssetSyncResult,
    AssetUploadOutcome,
    UploadBatch,
    plan_uploads,
)
from .engine import ReconciliationOutcome, ReleaseReconciler
from .plan import ReconciliationPlan, ReleaseAction, ReleaseStep, plan_reconciliation
from .tags import TagResolver

__all__ = [
    "AssetSyncResult",
    "AssetSynchronizer",
    "AssetUploadOutcome",
    "ReconciliationOutcome",
    "ReconciliationPlan",
    "ReleaseAction",
    "ReleaseReconciler",
    "ReleaseStep",
    "TagResolver",
    "UploadBatch",
    "plan_reconciliation",
    "plan_uploads",
]
