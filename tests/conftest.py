from __future__ import annotations

import pytest

from relsync.app import build_reconciler
from relsync.domain.model import ProcessContext, Repository
from relsync.domain.reconciliation import ReleaseReconciler
from tests.support.hosting import (
    TARGET_SHA,
    InMemoryReleaseService,
    StaticAssetResolver,
    make_local_asset,
)


@pytest.fixture
def service() -> InMemoryReleaseService:
    return InMemoryReleaseService()


@pytest.fixture
def resolver() -> StaticAssetResolver:
    return StaticAssetResolver(
        make_local_asset(name) for name in ("a.zip", "b.zip", "c.zip", "x.zip", "y.zip")
    )


@pytest.fixture
def process_context() -> ProcessContext:
    return ProcessContext(repository=Repository("octo", "widgets"), target_sha=TARGET_SHA)


@pytest.fixture
def reconciler(
    service: InMemoryReleaseService,
    resolver: StaticAssetResolver,
    process_context: ProcessContext,
) -> ReleaseReconciler:
    return build_reconciler(service, resolver, process_context)
