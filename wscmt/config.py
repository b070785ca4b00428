"""Configuration management for wscmt."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

ENV_FILE_NAME = ".workspace-commit"

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODEL = "claude-3-haiku-20240307"
DEFAULT_ENDPOINT = "https://api.anthropic.com"
DEFAULT_API_KEY_ENV = "ANTHROPIC_API_KEY"
DEFAULT_MAX_TOKENS = 300
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_PACKAGES_DIR = "packages"
DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "main"

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Runtime configuration for wscmt."""

    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    llm_endpoint: str = DEFAULT_ENDPOINT
    api_key_env: str = DEFAULT_API_KEY_ENV
    max_tokens: int = DEFAULT_MAX_TOKENS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    workspace_path: str = "."
    packages_dir: str = DEFAULT_PACKAGES_DIR
    remote: str = DEFAULT_REMOTE
    branch: str = DEFAULT_BRANCH
    auto_push: bool = True

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the configured environment variable."""
        return os.environ.get(self.api_key_env) or None


_CONFIG_STATE: Dict[str, Optional[Config]] = {"active": None}


def _ensure_path(path_like: Optional[Path]) -> Path:
    if path_like is None:
        return Path.cwd().resolve(strict=False)
    return Path(path_like).expanduser().resolve(strict=False)


def env_file_candidates(
    workspace_root: Optional[Path] = None, home: Optional[Path] = None
) -> List[Path]:
    """Return the env-file locations in lookup order."""
    home_dir = Path(home) if home is not None else Path.home()
    return [
        _ensure_path(workspace_root) / ENV_FILE_NAME,
        home_dir.expanduser() / ENV_FILE_NAME,
    ]


def load_env_file(
    workspace_root: Optional[Path] = None, home: Optional[Path] = None
) -> Optional[Path]:
    """Load the first env file found into ``os.environ``.

    Variables already present in the environment are left untouched.
    Returns the path that was loaded, or ``None`` when no file exists.
    """
    for candidate in env_file_candidates(workspace_root, home):
        if candidate.is_file():
            load_dotenv(candidate, override=False)
            logger.debug("Loaded environment from %s", candidate)
            return candidate
    return None


def _as_int(raw: object, name: str) -> int:
    try:
        return int(str(raw))
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _as_timeout(raw: Optional[object]) -> float:
    if raw is None or raw == "":
        return DEFAULT_REQUEST_TIMEOUT
    try:
        value = float(str(raw))
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return value if value > 0 else DEFAULT_REQUEST_TIMEOUT


def load_config(
    *,
    workspace_root: Optional[Path] = None,
    overrides: Optional[Dict[str, object]] = None,
) -> Config:
    """Build configuration from the env file, environment and overrides."""

    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    root = _ensure_path(
        overrides.get("workspace_path") or workspace_root  # type: ignore[arg-type]
    )
    load_env_file(root)

    model = str(
        overrides.get("model") or os.environ.get("WSCMT_MODEL") or DEFAULT_MODEL
    )
    endpoint = str(
        overrides.get("endpoint")
        or os.environ.get("WSCMT_LLM_ENDPOINT")
        or DEFAULT_ENDPOINT
    )
    api_key_env = str(overrides.get("api_key_env") or DEFAULT_API_KEY_ENV)
    max_tokens = _as_int(
        overrides.get("max_tokens")
        or os.environ.get("WSCMT_MAX_TOKENS")
        or DEFAULT_MAX_TOKENS,
        "max_tokens",
    )
    if max_tokens <= 0:
        raise ConfigError(f"max_tokens must be positive, got {max_tokens}")

    request_timeout = _as_timeout(
        overrides.get("request_timeout")
        or os.environ.get("WSCMT_LLM_REQUEST_TIMEOUT")
    )

    packages_dir = str(
        overrides.get("packages_dir")
        or os.environ.get("WSCMT_PACKAGES_DIR")
        or DEFAULT_PACKAGES_DIR
    )
    remote = str(
        overrides.get("remote") or os.environ.get("WSCMT_REMOTE") or DEFAULT_REMOTE
    )
    branch = str(
        overrides.get("branch") or os.environ.get("WSCMT_BRANCH") or DEFAULT_BRANCH
    )

    auto_push_raw = overrides.get("auto_push")
    if auto_push_raw is None:
        auto_push = True
    else:
        auto_push = str(auto_push_raw).lower() in {"1", "true", "yes", "on"}

    config = Config(
        model=model,
        llm_endpoint=endpoint,
        api_key_env=api_key_env,
        max_tokens=max_tokens,
        request_timeout=request_timeout,
        workspace_path=str(root),
        packages_dir=packages_dir,
        remote=remote,
        branch=branch,
        auto_push=auto_push,
    )

    set_active_config(config)
    return config


def set_active_config(config: Config) -> None:
    _CONFIG_STATE["active"] = config


def get_active_config() -> Config:
    active = _CONFIG_STATE.get("active")
    if active is None:
        return load_config()
    return active


def clear_active_config() -> None:
    _CONFIG_STATE["active"] = None
