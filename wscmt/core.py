"""Core workflow logic for wscmt."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from .changes import FileStat, detect_changes
from .commit import CommitGenerator, CommitMessage
from .config import Config, get_active_config
from .exceptions import GitError, WorkspaceCommitError, WorkspaceError
from .git import GitRepo

RepoFactory = Callable[[Path], GitRepo]
PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    """Terminal state of one repository's processing."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RefreshResult:
    """Result of refreshing one submodule reference."""

    path: str
    success: bool
    error: Optional[str] = None


@dataclass
class ProcessingOutcome:
    """Result of processing one repository."""

    repo_path: str
    status: OutcomeStatus
    is_root: bool = False
    message: Optional[CommitMessage] = None
    summary: List[FileStat] = field(default_factory=list)
    pushed: bool = False
    error: Optional[str] = None
    refreshed: List[RefreshResult] = field(default_factory=list)

    @property
    def name(self) -> str:
        return os.path.basename(self.repo_path.rstrip(os.sep)) or self.repo_path

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED


@dataclass
class WorkspaceResult:
    """Outcomes of one workspace run, nested repositories first."""

    nested: List[ProcessingOutcome] = field(default_factory=list)
    root: Optional[ProcessingOutcome] = None

    @property
    def outcomes(self) -> List[ProcessingOutcome]:
        if self.root is None:
            return list(self.nested)
        return [*self.nested, self.root]

    @property
    def failures(self) -> List[ProcessingOutcome]:
        return [o for o in self.outcomes if o.failed]

    def summary(self) -> str:
        """Generate a human-readable summary string."""
        outcomes = self.outcomes
        committed = [o for o in outcomes if o.succeeded]
        skipped = [o for o in outcomes if o.status is OutcomeStatus.SKIPPED]

        parts: List[str] = []
        if committed:
            parts.append(f"Committed {len(committed)} repositories")
        else:
            parts.append("No commits were made")
        if skipped:
            parts.append(f"Skipped {len(skipped)} clean")
        if self.failures:
            parts.append(f"{len(self.failures)} failed")
        return ". ".join(parts)


def discover_nested_repositories(
    workspace_root: PathLike, packages_dir: str = "packages"
) -> List[Path]:
    """List the directories directly under ``workspace_root/packages_dir``.

    Raises WorkspaceError when that directory does not exist. Hidden
    entries are skipped.
    """
    packages = Path(workspace_root) / packages_dir
    if not packages.is_dir():
        raise WorkspaceError(f"Packages directory not found: {packages}")
    with os.scandir(packages) as it:
        found = [
            Path(entry.path)
            for entry in it
            if entry.is_dir() and not entry.name.startswith(".")
        ]
    return sorted(found)


class SubmoduleRefresher:
    """Moves every registered submodule of the root onto its remote branch."""

    def __init__(
        self,
        config: Optional[Config] = None,
        repo_factory: RepoFactory = GitRepo,
    ) -> None:
        self._config = config or get_active_config()
        self._repo_factory = repo_factory

    async def refresh_refs(self, root_path: PathLike) -> List[RefreshResult]:
        root = Path(root_path)
        try:
            paths = await self._repo_factory(root).list_submodule_paths()
        except GitError as e:
            logger.error("Error listing submodules in %s: %s", root, e)
            return []

        self._report_drift(root, paths)
        results = await asyncio.gather(*(self._refresh_one(root, p) for p in paths))
        return list(results)

    async def _refresh_one(self, root: Path, rel_path: str) -> RefreshResult:
        repo = self._repo_factory(root / rel_path)
        branch = self._config.branch
        try:
            await repo.ensure_repository()
            await repo.checkout(branch)
            await repo.pull(self._config.remote, branch)
        except (WorkspaceCommitError, OSError) as e:
            logger.error("Error updating submodule %s: %s", rel_path, e)
            return RefreshResult(rel_path, False, str(e))
        logger.info(
            "Updated submodule %s to %s/%s", rel_path, self._config.remote, branch
        )
        return RefreshResult(rel_path, True)

    def _report_drift(self, root: Path, registered: List[str]) -> None:
        packages_dir = self._config.packages_dir
        try:
            on_disk = {
                p.relative_to(root).as_posix()
                for p in discover_nested_repositories(root, packages_dir)
            }
        except WorkspaceError:
            return
        prefix = Path(packages_dir).as_posix().rstrip("/") + "/"
        registered_set = {Path(p).as_posix() for p in registered}
        registered_here = {p for p in registered_set if p.startswith(prefix)}

        for path in sorted(on_disk - registered_set):
            logger.warning(
                "Directory %s is not a registered submodule; its reference "
                "will not be refreshed",
                path,
            )
        for path in sorted(registered_here - on_disk):
            logger.warning(
                "Registered submodule %s has no directory; it will not be "
                "committed",
                path,
            )


class RepositoryCommitter:
    """Detects, stages, commits and pushes the changes of one repository."""

    def __init__(
        self,
        config: Optional[Config] = None,
        generator: Optional[CommitGenerator] = None,
        refresher: Optional[SubmoduleRefresher] = None,
        repo_factory: RepoFactory = GitRepo,
    ) -> None:
        self._config = config or get_active_config()
        self._repo_factory = repo_factory
        self.generator = generator or CommitGenerator(self._config)
        self.refresher = refresher or SubmoduleRefresher(
            self._config, repo_factory=repo_factory
        )

    async def commit_and_push(
        self, repo_path: PathLike, is_root: bool = False
    ) -> ProcessingOutcome:
        """Process one repository; failures become a failed outcome."""
        path = Path(repo_path)
        kind = "repository" if is_root else "submodule"
        outcome = ProcessingOutcome(str(path), OutcomeStatus.FAILED, is_root=is_root)
        logger.info("Processing %s: %s", kind, path)

        try:
            repo = self._repo_factory(path)
            await repo.ensure_repository()
            if is_root:
                outcome.refreshed = await self.refresher.refresh_refs(path)

            changes = await detect_changes(repo)
            if not changes.dirty:
                logger.info("No changes in %s %s", kind, outcome.name)
                outcome.status = OutcomeStatus.SKIPPED
                return outcome

            outcome.summary = changes.summary
            logger.info("%s: %s", outcome.name, changes.describe())
            for stat in changes.summary:
                logger.debug(
                    "  %s +%d -%d", stat.path, stat.insertions, stat.deletions
                )

            await repo.stage_all()
            outcome.message = await self.generator.generate(changes.diff or "")
            await self._commit(repo, outcome.message.text)

            if self._config.auto_push:
                await repo.push(self._config.remote, self._config.branch)
                outcome.pushed = True
        except Exception as e:  # noqa: BLE001
            logger.error("Error processing %s %s: %s", kind, path, e)
            outcome.error = str(e)
            return outcome

        outcome.status = OutcomeStatus.SUCCEEDED
        logger.info("Successfully committed changes in %s %s", kind, outcome.name)
        return outcome

    async def _commit(self, repo: GitRepo, message: str) -> None:
        try:
            await repo.commit(message)
        except GitError as e:
            logger.error("Commit failed in %s: %s", repo.repo_path, e)
            raise


class WorkspaceWorkflow:
    """Commits every nested repository concurrently, then the root."""

    def __init__(
        self,
        workspace_path: Optional[PathLike] = None,
        config: Optional[Config] = None,
        committer: Optional[RepositoryCommitter] = None,
    ) -> None:
        self._config = config or get_active_config()
        self.workspace_path = Path(
            workspace_path or self._config.workspace_path
        ).resolve()
        self.committer = committer or RepositoryCommitter(self._config)

    def discover(self) -> List[Path]:
        return discover_nested_repositories(
            self.workspace_path, self._config.packages_dir
        )

    async def execute(self) -> WorkspaceResult:
        """Execute the complete workspace workflow.

        Raises WorkspaceError, before touching any repository, when the
        nested-repository directory is missing.
        """
        nested_paths = self.discover()
        logger.info(
            "Found %d submodule(s) in %s",
            len(nested_paths),
            self.workspace_path / self._config.packages_dir,
        )

        nested = await asyncio.gather(
            *(self.committer.commit_and_push(p) for p in nested_paths)
        )
        root = await self.committer.commit_and_push(self.workspace_path, is_root=True)
        return WorkspaceResult(nested=list(nested), root=root)

    def run(self) -> WorkspaceResult:
        return asyncio.run(self.execute())
