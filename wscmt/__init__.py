"""wscmt - AI-assisted commit and push across a multi-repository workspace."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "load_config",
    # Git
    "GitRepo",
    # Change detection
    "ChangeSet", "FileStat", "detect_changes",
    # Commit generation
    "CommitGenerator", "GeneratedMessage", "FallbackMessage",
    "FALLBACK_COMMIT_MESSAGE",
    # Core workflow
    "RepositoryCommitter", "SubmoduleRefresher", "WorkspaceWorkflow",
    "ProcessingOutcome", "OutcomeStatus", "WorkspaceResult",
    # Exceptions
    "WorkspaceCommitError", "GitError", "LLMError", "ConfigError",
    "WorkspaceError",
]


def __getattr__(name: str):
    """Lazy attribute loader so importing the package stays cheap."""
    mapping = {
        "Config": ("wscmt.config", "Config"),
        "load_config": ("wscmt.config", "load_config"),
        "GitRepo": ("wscmt.git", "GitRepo"),
        "ChangeSet": ("wscmt.changes", "ChangeSet"),
        "FileStat": ("wscmt.changes", "FileStat"),
        "detect_changes": ("wscmt.changes", "detect_changes"),
        "CommitGenerator": ("wscmt.commit", "CommitGenerator"),
        "GeneratedMessage": ("wscmt.commit", "GeneratedMessage"),
        "FallbackMessage": ("wscmt.commit", "FallbackMessage"),
        "FALLBACK_COMMIT_MESSAGE": ("wscmt.commit", "FALLBACK_COMMIT_MESSAGE"),
        "RepositoryCommitter": ("wscmt.core", "RepositoryCommitter"),
        "SubmoduleRefresher": ("wscmt.core", "SubmoduleRefresher"),
        "WorkspaceWorkflow": ("wscmt.core", "WorkspaceWorkflow"),
        "ProcessingOutcome": ("wscmt.core", "ProcessingOutcome"),
        "OutcomeStatus": ("wscmt.core", "OutcomeStatus"),
        "WorkspaceResult": ("wscmt.core", "WorkspaceResult"),
        "WorkspaceCommitError": ("wscmt.exceptions", "WorkspaceCommitError"),
        "GitError": ("wscmt.exceptions", "GitError"),
        "LLMError": ("wscmt.exceptions", "LLMError"),
        "ConfigError": ("wscmt.exceptions", "ConfigError"),
        "WorkspaceError": ("wscmt.exceptions", "WorkspaceError"),
    }
    if name in mapping:
        mod_name, attr = mapping[name]
        mod = import_module(mod_name)
        value = getattr(mod, attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'wscmt' has no attribute {name!r}")


if TYPE_CHECKING:
    from .changes import ChangeSet, FileStat, detect_changes
    from .commit import (
        FALLBACK_COMMIT_MESSAGE,
        CommitGenerator,
        FallbackMessage,
        GeneratedMessage,
    )
    from .config import Config, load_config
    from .core import (
        OutcomeStatus,
        ProcessingOutcome,
        RepositoryCommitter,
        SubmoduleRefresher,
        WorkspaceResult,
        WorkspaceWorkflow,
    )
    from .exceptions import (
        ConfigError,
        GitError,
        LLMError,
        WorkspaceCommitError,
        WorkspaceError,
    )
    from .git import GitRepo
