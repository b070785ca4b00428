"""Git operations for wscmt.

Every command runs as a child process whose working directory is the
repository path held by :class:`GitRepo`. The process-wide current
directory is never changed, so several repositories can be driven from
concurrent tasks on the same event loop.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Union

from .exceptions import GitError

logger = logging.getLogger(__name__)


class GitRepo:
    """Handles Git operations for one working tree."""

    def __init__(self, repo_path: Union[str, Path]) -> None:
        self.repo_path = Path(repo_path)

    def __repr__(self) -> str:
        return f"GitRepo({str(self.repo_path)!r})"

    async def _run_git_command(self, args: list[str]) -> str:
        """Run a Git command and return its stdout without trailing whitespace."""
        cmd = " ".join(args)
        logger.debug("git %s (cwd=%s)", cmd, self.repo_path)
        try:
            proc = await asyncio.create_subprocess_exec(
                "git",
                *args,
                cwd=str(self.repo_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise GitError("Git command not found. Please install Git.") from exc
        except NotADirectoryError as exc:
            raise GitError(f"Not a directory: {self.repo_path}") from exc

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            err = stderr.decode("utf-8", "replace").strip()
            raise GitError(f"Git command failed: {cmd}\n{err}")
        return stdout.decode("utf-8", "replace").rstrip()

    async def ensure_repository(self) -> None:
        """Raise GitError unless ``repo_path`` is the top of its own work tree.

        Git otherwise walks up from a plain directory (or an uninitialised
        submodule) and would act on the enclosing repository.
        """
        if not self.repo_path.is_dir():
            raise GitError(f"Not a Git repository: {self.repo_path}")
        try:
            top = await self._run_git_command(["rev-parse", "--show-toplevel"])
        except GitError as exc:
            raise GitError(f"Not a Git repository: {self.repo_path}") from exc
        expected = self.repo_path.resolve(strict=False)
        if Path(top).resolve(strict=False) != expected:
            raise GitError(
                f"Not a Git repository: {self.repo_path} (inside {top})"
            )

    async def has_changes(self) -> bool:
        """Check for staged, unstaged or untracked changes."""
        output = await self._run_git_command(["status", "--porcelain"])
        return bool(output.strip())

    async def has_head(self) -> bool:
        try:
            await self._run_git_command(["rev-parse", "--verify", "-q", "HEAD"])
        except GitError:
            return False
        return True

    async def add_untracked_intent(self) -> list[str]:
        """Record untracked files as intent-to-add so diffs include them.

        Untracked nested repositories (listed with a trailing slash) are left
        alone. Returns the paths that were marked.
        """
        output = await self._run_git_command(
            ["ls-files", "-z", "--others", "--exclude-standard"]
        )
        paths = [p for p in output.split("\0") if p and not p.endswith("/")]
        if paths:
            await self._run_git_command(["add", "--intent-to-add", "--", *paths])
        return paths

    async def get_diff(self) -> str:
        """Get the diff of staged and unstaged changes against HEAD.

        On a repository without commits there is no HEAD to compare with,
        so the index diff and the working tree diff are concatenated.
        """
        if await self.has_head():
            return await self._run_git_command(["diff", "HEAD"])
        staged = await self._run_git_command(["diff", "--cached"])
        working = await self._run_git_command(["diff"])
        return "\n".join(part for part in (staged, working) if part)

    async def get_numstat(self) -> str:
        """Get ``--numstat`` output for the same changes as :meth:`get_diff`."""
        if await self.has_head():
            return await self._run_git_command(["diff", "HEAD", "--numstat"])
        staged = await self._run_git_command(["diff", "--cached", "--numstat"])
        working = await self._run_git_command(["diff", "--numstat"])
        return "\n".join(part for part in (staged, working) if part)

    async def stage_all(self) -> None:
        """Stage all changes (including new and deleted files)."""
        await self._run_git_command(["add", "-A"])

    async def commit(self, message: str) -> None:
        """Create a commit with the given message."""
        await self._run_git_command(["commit", "-m", message])

    async def push(self, remote: str = "origin", branch: str = "main") -> str:
        """Push ``branch`` to ``remote`` and return git's output."""
        return await self._run_git_command(["push", remote, branch])

    async def checkout(self, branch: str) -> None:
        await self._run_git_command(["checkout", branch])

    async def pull(self, remote: str = "origin", branch: str = "main") -> str:
        """Fast-forward ``branch`` from ``remote``."""
        return await self._run_git_command(["pull", "--ff-only", remote, branch])

    async def list_submodule_paths(self) -> list[str]:
        """Return submodule paths registered in ``.gitmodules``.

        Entries are read NUL-separated (``key\\nvalue\\0``) so names and
        paths containing spaces survive intact.
        """
        if not (self.repo_path / ".gitmodules").is_file():
            return []
        output = await self._run_git_command(
            [
                "config",
                "-z",
                "-f",
                ".gitmodules",
                "--get-regexp",
                r"^submodule\..*\.path$",
            ]
        )
        paths: list[str] = []
        for entry in output.split("\0"):
            _key, sep, value = entry.partition("\n")
            if sep and value:
                paths.append(value)
        return paths
