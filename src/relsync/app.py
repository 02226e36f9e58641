"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from relsync.adapters.actions_output import GitHubActionsReporter
from relsync.adapters.filesystem import GlobAssetResolver
from relsync.adapters.github import GitHubReleaseService
from relsync.adapters.http_resilience import ResilientClient
from relsync.domain.errors import ReconciliationFailed
from relsync.domain.reconciliation import AssetSynchronizer, ReleaseReconciler, TagResolver

if TYPE_CHECKING:
    from relsync.config.http_resilience import ResilienceConfig
    from relsync.config.release import ReleaseConfig
    from relsync.domain.model import ProcessContext
    from relsync.domain.ports import AssetSetResolver, OutputReporter, ReleaseHostingService
    from relsync.domain.reconciliation import ReconciliationOutcome

ClientFactory = Callable[["ResilienceConfig"], ResilientClient]


log = getLogger(__name__)


def build_reconciler(
    service: ReleaseHostingService,
    resolver: AssetSetResolver,
    context: ProcessContext,
) -> ReleaseReconciler:
    return ReleaseReconciler(
        service=service,
        tags=TagResolver(service),
        assets=AssetSynchronizer(service=service, resolver=resolver),
        context=context,
    )


def run_release(
    config: ReleaseConfig,
    *,
    client_factory: ClientFactory | None = None,
    resolver: AssetSetResolver | None = None,
    reporter: OutputReporter | None = None,
) -> ReconciliationOutcome:
    """Reconcile the configured release and report the outcome."""

    effective_factory = client_factory or ResilientClient
    effective_resolver = resolver or GlobAssetResolver()
    effective_reporter = reporter or GitHubActionsReporter(output_path=config.output_path)
    desired = config.desired
    log.info(
        "Starting release reconciliation: repository=%s, tag=%s, recreate=%s, move_tag=%s, "
        "keep_assets=%s, files=%s",
        config.context.repository.full_name,
        desired.tag,
        desired.recreate,
        desired.move_tag,
        desired.keep_assets,
        len(desired.file_patterns),
    )

    try:
        outcome = asyncio.run(
            _reconcile(config, client_factory=effective_factory, resolver=effective_resolver)
        )
    except ReconciliationFailed as exc:
        effective_reporter.fail(str(exc))
        raise

    for warning in outcome.assets.warnings:
        effective_reporter.warning(warning)
    effective_reporter.report(outcome)

    log.info(
        f"Finished release reconciliation: id={outcome.release.id}, action={outcome.action}, "
        f"uploaded={len(outcome.assets.uploaded)}, failed={len(outcome.assets.failures)}, "
        f"url={outcome.release.html_url}"
    )
    return outcome


async def _reconcile(
    config: ReleaseConfig,
    *,
    client_factory: ClientFactory,
    resolver: AssetSetResolver,
) -> ReconciliationOutcome:
    async with client_factory(config.github.resilience) as client:
        service = GitHubReleaseService(config=config.github, client=client)
        reconciler = build_reconciler(service, resolver, config.context)
        return await reconciler.reconcile(config.desired)
