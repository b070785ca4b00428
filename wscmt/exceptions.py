"""Custom exceptions for wscmt."""


class WorkspaceCommitError(Exception):
    """Base exception for wscmt errors."""


class GitError(WorkspaceCommitError):
    """Raised when a Git command fails."""


class LLMError(WorkspaceCommitError):
    """Raised when the text-generation service cannot produce a message."""


class ConfigError(WorkspaceCommitError):
    """Raised for invalid configuration values."""


class WorkspaceError(WorkspaceCommitError):
    """Raised when the workspace layout cannot be processed at all."""
