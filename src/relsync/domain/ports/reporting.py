"""Port for publishing the run result to the caller."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from relsync.domain.reconciliation.engine import ReconciliationOutcome


@runtime_checkable
class OutputReporter(Protocol):
    """Receives caller-visible warnings, the final outcome or the fatal error."""

    def warning(self, message: str) -> None: ...

    def report(self, outcome: ReconciliationOutcome) -> None: ...

    def fail(self, message: str) -> None: ...


__all__ = ["OutputReporter"]
