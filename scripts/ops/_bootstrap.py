"""
scripts/ops bootstrap helpers.

Two roots are involved when an ops tool runs:
  - tool root:    this checkout (holds `packages/flatten_common`), found from __file__
  - project root: the Solidity project being processed, found from CWD by
                  `flatten_common.paths.repo_root()` (FLAT_REPO_ROOT wins)

`bootstrap()` makes `flatten_common` importable, resolves the project root
once and pins it in FLAT_REPO_ROOT so every later path lookup (sources,
configs/, out/, broadcast/, coverage/) agrees on it.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional


def _tool_root() -> Optional[Path]:
    here = Path(__file__).resolve()
    for candidate in here.parents:
        if (candidate / "packages" / "flatten_common").is_dir():
            return candidate
    # installed with `pip install .`: flatten_common is already importable
    return None


def _load_env_file(env_path: Path) -> None:
    """Fail-soft `.env` loader; existing env vars are never overridden."""
    if not env_path.exists():
        return
    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip().strip("\"'"))


def bootstrap(*, load_env: bool = True) -> Path:
    tool_root = _tool_root()
    if tool_root is not None:
        packages_dir = str(tool_root / "packages")
        if packages_dir not in sys.path:
            sys.path.insert(0, packages_dir)

    from flatten_common.paths import repo_root  # noqa: E402 (needs sys.path above)

    project_root = repo_root()
    os.environ.setdefault("FLAT_REPO_ROOT", str(project_root))

    if load_env:
        _load_env_file(project_root / ".env")

    return project_root
