"""Command-line interface for wscmt."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .config import load_config
from .core import (
    OutcomeStatus,
    ProcessingOutcome,
    WorkspaceResult,
    WorkspaceWorkflow,
)
from .exceptions import WorkspaceError

RESET = "\033[0m"
BOLD = "\033[1m"
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RED = "\033[91m"


class CLI:
    """Command-line interface for the workspace commit workflow."""

    def __init__(self) -> None:
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="wscmt",
            description=(
                "Commit and push every repository under packages/ with an "
                "AI-drafted message, then commit the root workspace."
            ),
        )
        parser.add_argument(
            "--workspace",
            dest="workspace_path",
            help="Root workspace (default: current directory)",
        )
        parser.add_argument(
            "--packages-dir",
            help="Directory holding nested repositories (default: packages)",
        )
        parser.add_argument("--remote", help="Remote to push to (default: origin)")
        parser.add_argument("--branch", help="Branch to push to (default: main)")
        parser.add_argument("--model", help="Model used to draft messages")
        parser.add_argument(
            "--no-push",
            action="store_true",
            help="Commit without pushing",
        )
        verbosity = parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "--debug", action="store_true", help="Show git commands and requests"
        )
        verbosity.add_argument(
            "--quiet", action="store_true", help="Only show warnings and errors"
        )
        return parser

    def run(self, args: Optional[list[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as e:
            return int(e.code or 0)

        self._configure_logging(parsed)

        try:
            config = load_config(
                workspace_root=parsed.workspace_path,
                overrides={
                    "packages_dir": parsed.packages_dir,
                    "remote": parsed.remote,
                    "branch": parsed.branch,
                    "model": parsed.model,
                    "auto_push": "0" if parsed.no_push else None,
                },
            )
            result = WorkspaceWorkflow(config=config).run()
        except WorkspaceError as e:
            self._print_error(str(e))
            return 1
        except Exception as e:  # noqa: BLE001
            self._print_error(f"Error: {e}")
            return 1

        self._print_report(result)
        return 0

    @staticmethod
    def _configure_logging(parsed: argparse.Namespace) -> None:
        if parsed.debug:
            level = logging.DEBUG
        elif parsed.quiet:
            level = logging.WARNING
        else:
            level = logging.INFO
        logging.basicConfig(format="%(message)s")
        logging.getLogger("wscmt").setLevel(level)

    def _print_error(self, message: str) -> None:
        print(f"{RED}{message}{RESET}", file=sys.stderr)

    def _print_report(self, result: WorkspaceResult) -> None:
        print()
        for outcome in result.outcomes:
            print(self._format_outcome(outcome))
        print()
        color = YELLOW if result.failures else GREEN
        print(f"{BOLD}{color}{result.summary()}{RESET}")
        print(f"{GREEN}All submodules processed.{RESET}")

    @staticmethod
    def _format_outcome(outcome: ProcessingOutcome) -> str:
        label = f"{outcome.name} (root)" if outcome.is_root else outcome.name
        if outcome.status is OutcomeStatus.SKIPPED:
            return f"{DIM}[clean]  {label}{RESET}"
        if outcome.status is OutcomeStatus.FAILED:
            first = (outcome.error or "").splitlines()
            detail = first[0] if first else "unknown error"
            return f"{RED}[failed] {label}: {detail}{RESET}"

        subject = outcome.message.text.splitlines()[0] if outcome.message else ""
        tag = "[pushed]" if outcome.pushed else "[commit]"
        note = ""
        if outcome.message and outcome.message.is_fallback:
            note = f" {YELLOW}(fallback message){RESET}"
        return f"{GREEN}{tag} {label}:{RESET} {CYAN}{subject}{RESET}{note}"


def main(argv: Optional[list[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
