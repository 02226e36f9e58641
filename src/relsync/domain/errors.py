"""Typed error hierarchy shared by the reconciliation core and its adapters."""

from __future__ import annotations

from enum import StrEnum


class ServiceErrorKind(StrEnum):
    """Classification of a failed hosting-service call."""

    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    ABUSE_DETECTED = "abuse_detected"
    OTHER = "other"


class ServiceError(RuntimeError):
    """Raised by hosting-service adapters when a remote call fails."""

    def __init__(
        self,
        message: str,
        *,
        kind: ServiceErrorKind,
        operation: str,
        status: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.operation = operation
        self.status = status
        self.detail = detail

    @property
    def is_not_found(self) -> bool:
        return self.kind is ServiceErrorKind.NOT_FOUND


class ReconciliationError(RuntimeError):
    """Base class for failures raised by the reconciliation core.

    Every instance carries enough context (operation, tag and target) to
    diagnose the failure from the log line alone.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        tag: str,
        target: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        context = f"operation={operation}, tag={tag}"
        if target:
            context += f", target={target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(f"{message} ({context})")
        self.operation = operation
        self.tag = tag
        self.target = target
        self.cause = cause


class ReconciliationFailed(ReconciliationError):
    """A mutation of the release record itself failed; fatal for the run."""


class TagPlacementFailed(ReconciliationError):
    """Deleting or creating the tag reference failed; the run carries on."""


class AssetUploadFailed(ReconciliationError):
    """Uploading one asset failed; sibling uploads are unaffected."""

    def __init__(
        self,
        message: str,
        *,
        asset_name: str,
        tag: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            operation="upload_release_asset",
            tag=tag,
            target=asset_name,
            cause=cause,
        )
        self.asset_name = asset_name
