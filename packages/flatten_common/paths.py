from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional


# ---------------------------------------------------------------------------
# Repo root
# ---------------------------------------------------------------------------

# nearest ancestor holding any of these is the project root
PROJECT_MARKERS = (
    "foundry.toml",
    "hardhat.config.js",
    "hardhat.config.ts",
    "pyproject.toml",
)


@lru_cache(maxsize=1)
def repo_root(start: Optional[Path] = None) -> Path:
    """
    Resolve the project root by searching upward (from CWD) for PROJECT_MARKERS.
    Falls back to CWD itself, so a bare directory with contracts/ + test/ works too.
    Env override:
      - FLAT_REPO_ROOT: absolute path to the project root (the one holding contracts/, test/, ...)
    """
    override = os.getenv("FLAT_REPO_ROOT")
    if override:
        return Path(override).expanduser().resolve()

    if start is None:
        start = Path.cwd().resolve()
    cur = start if start.is_dir() else start.parent

    for candidate in (cur, *cur.parents):
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate.resolve()

    # Fallback: best-effort current directory
    return cur.resolve()


def as_repo_path(path: Path | str, *, root: Optional[Path] = None) -> Path:
    """
    Normalize relative paths against the repo root (CWD-independent).
    """
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (root or repo_root()) / p


# ---------------------------------------------------------------------------
# Config roots
# ---------------------------------------------------------------------------


def configs_root() -> Path:
    return repo_root() / "configs"


def flatten_config_path() -> Path:
    return configs_root() / "flatten.yaml"


def flatten_config_local_path() -> Path:
    return configs_root() / "flatten.local.yaml"


# ---------------------------------------------------------------------------
# Build / deploy / coverage roots
# ---------------------------------------------------------------------------


def forge_out_root() -> Path:
    """
    Compiler build artifacts (`out/<Name>.sol/<Name>.json`).
    Env override:
      - FLAT_FORGE_OUT
    """
    override = os.getenv("FLAT_FORGE_OUT")
    if override:
        return Path(override).expanduser().resolve()
    return repo_root() / "out"


def broadcast_root() -> Path:
    return repo_root() / "broadcast"


def coverage_root() -> Path:
    return repo_root() / "coverage"


def lcov_info_path() -> Path:
    return repo_root() / "lcov.info"
