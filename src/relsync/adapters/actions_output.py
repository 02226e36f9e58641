"""Output reporter speaking the workflow-runner protocol.

Outputs go to the file named by ``GITHUB_OUTPUT`` using the multi-line
delimiter syntax; warnings and errors are emitted as workflow commands so they
show up as annotations on the run.
"""

from __future__ import annotations

import json
import sys
import uuid
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from pathlib import Path

    from relsync.domain.model import RemoteAsset
    from relsync.domain.ports.reporting import OutputReporter
    from relsync.domain.reconciliation.engine import ReconciliationOutcome

log = getLogger(__name__)


def _escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def asset_record(asset: RemoteAsset) -> dict[str, object]:
    return {
        "id": asset.id,
        "name": asset.name,
        "size": asset.size,
        "content_type": asset.content_type,
        "browser_download_url": asset.download_url,
    }


def outcome_outputs(outcome: ReconciliationOutcome) -> dict[str, str]:
    """Flatten a reconciliation outcome into string outputs."""

    return {
        "id": str(outcome.release.id),
        "url": outcome.release.html_url,
        "upload_url": outcome.release.upload_url,
        "action": str(outcome.action),
        "tag_moved": "true" if outcome.tag_moved else "false",
        "assets": json.dumps([asset_record(asset) for asset in outcome.assets.uploaded]),
    }


@dataclass(slots=True)
class GitHubActionsReporter:
    output_path: Path | None = None
    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def warning(self, message: str) -> None:
        self._command("warning", message)

    def fail(self, message: str) -> None:
        self._command("error", message)

    def report(self, outcome: ReconciliationOutcome) -> None:
        outputs = outcome_outputs(outcome)
        if self.output_path is None:
            for name, value in outputs.items():
                self.stream.write(f"{name}={value}\n")
            self.stream.flush()
            return

        with self.output_path.open("a", encoding="utf-8") as handle:
            for name, value in outputs.items():
                handle.write(_format_output(name, value))
        log.debug("Wrote outputs %s to %s", sorted(outputs), self.output_path)

    def _command(self, command: str, message: str) -> None:
        self.stream.write(f"::{command}::{_escape_command_data(message)}\n")
        self.stream.flush()


def _format_output(name: str, value: str) -> str:
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


if TYPE_CHECKING:
    _reporter_check: OutputReporter = GitHubActionsReporter()
