import subprocess
from collections.abc import Generator
from pathlib import Path
from typing import Optional

import pytest

from wscmt.exceptions import GitError


@pytest.fixture(autouse=True)
def reset_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    for name in (
        "ANTHROPIC_API_KEY",
        "WSCMT_MODEL",
        "WSCMT_LLM_ENDPOINT",
        "WSCMT_MAX_TOKENS",
        "WSCMT_LLM_REQUEST_TIMEOUT",
        "WSCMT_PACKAGES_DIR",
        "WSCMT_REMOTE",
        "WSCMT_BRANCH",
    ):
        monkeypatch.delenv(name, raising=False)

    # Keep the user's ~/.workspace-commit and git config out of tests
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    from wscmt.config import clear_active_config

    clear_active_config()
    yield
    clear_active_config()


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.rstrip()


def make_repo(path: Path, remote: Optional[Path] = None) -> Path:
    """Create a repo on branch main with one commit, optionally pushed to a
    bare remote registered as origin."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    (path / "README.md").write_text("hello\n")
    git(path, "add", "README.md")
    git(path, "commit", "-q", "-m", "chore: init")
    if remote is not None:
        remote.parent.mkdir(parents=True, exist_ok=True)
        git(remote.parent, "init", "-q", "--bare", str(remote))
        git(remote, "symbolic-ref", "HEAD", "refs/heads/main")
        git(path, "remote", "add", "origin", str(remote))
        git(path, "push", "-q", "origin", "main")
    return path


class FakeRepo:
    """In-memory stand-in for GitRepo that records every call."""

    def __init__(self, repo_path, registry: "FakeRepoRegistry") -> None:
        self.repo_path = Path(repo_path)
        self._registry = registry

    @property
    def state(self) -> dict:
        return self._registry.state_for(self.repo_path)

    def _record(self, op: str, *args) -> None:
        self._registry.calls.append((self.repo_path.name, op, *args))
        failure = self.state["fail"].get(op)
        if failure is not None:
            raise GitError(failure)

    async def ensure_repository(self) -> None:
        failure = self.state["fail"].get("verify")
        if failure is not None:
            raise GitError(failure)

    async def add_untracked_intent(self) -> list:
        return []

    async def has_changes(self) -> bool:
        self._record("status")
        return self.state["dirty"]

    async def get_diff(self) -> str:
        self._record("diff")
        return self.state["diff"]

    async def get_numstat(self) -> str:
        self._record("numstat")
        return self.state["numstat"]

    async def stage_all(self) -> None:
        self._record("add")

    async def commit(self, message: str) -> None:
        self._record("commit", message)
        self.state["dirty"] = False

    async def push(self, remote: str = "origin", branch: str = "main") -> str:
        self._record("push", remote, branch)
        return ""

    async def checkout(self, branch: str) -> None:
        self._record("checkout", branch)

    async def pull(self, remote: str = "origin", branch: str = "main") -> str:
        self._record("pull", remote, branch)
        return ""

    async def list_submodule_paths(self) -> list:
        self._record("submodules")
        return list(self.state["submodules"])


class FakeRepoRegistry:
    def __init__(self) -> None:
        self.calls: list = []
        self._states: dict = {}

    def state_for(self, path) -> dict:
        key = Path(path).name
        return self._states.setdefault(
            key,
            {
                "dirty": False,
                "diff": "",
                "numstat": "",
                "submodules": [],
                "fail": {},
            },
        )

    def set_dirty(self, name: str, numstat: str = "1\t0\tfile.txt") -> None:
        state = self.state_for(name)
        state["dirty"] = True
        state["diff"] = f"diff --git a/{name} b/{name}"
        state["numstat"] = numstat

    def ops(self, name: str) -> list:
        return [c[1:] for c in self.calls if c[0] == name]

    def __call__(self, path) -> FakeRepo:
        return FakeRepo(path, self)


@pytest.fixture
def fake_repos() -> FakeRepoRegistry:
    return FakeRepoRegistry()
