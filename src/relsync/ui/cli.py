from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from relsync.adapters.actions_output import GitHubActionsReporter
from relsync.adapters.filesystem import GlobAssetResolver
from relsync.app import run_release
from relsync.config import ConfigurationError, configure_logging, get_release_config
from relsync.domain.errors import ReconciliationFailed

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create, update or recreate a GitHub release and its assets",
    )
    parser.add_argument("--tag", type=str, help="Tag name of the release (INPUT_TAG_NAME)")
    parser.add_argument(
        "--target-commitish",
        type=str,
        help="Branch or commit the release points at (defaults to the current value)",
    )
    parser.add_argument(
        "--file",
        dest="files",
        action="append",
        help="File pattern to attach; repeat or separate with commas (INPUT_FILES)",
    )
    for flag, help_text in (
        ("--draft", "Create or keep the release as a draft"),
        ("--prerelease", "Mark the release as a prerelease"),
        ("--recreate", "Delete the existing release and its tag, then create it again"),
        ("--move-tag", "Move the tag to the triggering commit"),
        ("--keep-assets", "Keep assets already attached to the release"),
    ):
        parser.add_argument(flag, action="store_true", default=None, help=help_text)
    parser.add_argument("--repository", type=str, help="owner/name (GITHUB_REPOSITORY)")
    parser.add_argument("--sha", type=str, help="Commit the tag should point at (GITHUB_SHA)")
    parser.add_argument("--api-url", type=str, help="GitHub API base URL (GITHUB_API_URL)")
    parser.add_argument(
        "--workdir",
        type=Path,
        help="Directory relative file patterns are resolved against (default: cwd)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        config = get_release_config(
            tag=parsed_args.tag,
            target_commitish=parsed_args.target_commitish,
            files=parsed_args.files,
            draft=parsed_args.draft,
            prerelease=parsed_args.prerelease,
            recreate=parsed_args.recreate,
            move_tag=parsed_args.move_tag,
            keep_assets=parsed_args.keep_assets,
            repository=parsed_args.repository,
            sha=parsed_args.sha,
            api_url=parsed_args.api_url,
        )
    except (ConfigurationError, ValueError) as exc:
        log.error("Configuration error: %s", exc)  # noqa: TRY400
        sys.exit(2)

    if config.debug and not parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    reporter = GitHubActionsReporter(output_path=config.output_path)
    try:
        run_release(
            config,
            resolver=GlobAssetResolver(root=parsed_args.workdir),
            reporter=reporter,
        )
    except ReconciliationFailed:
        log.exception("Release reconciliation failed")
        sys.exit(1)
    except Exception as exc:
        log.exception("Fatal error during release reconciliation")
        reporter.fail(f"Fatal error during release reconciliation: {exc}")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
