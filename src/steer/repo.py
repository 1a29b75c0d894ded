"""Locate the project root and the agent home directory.

Steering discovery consumes these paths but never walks the filesystem
for them itself.
"""

from __future__ import annotations

import os
import pathlib


def find_repo_root(cwd: pathlib.Path) -> pathlib.Path | None:
    """Walk up from *cwd* looking for a ``.git`` marker.

    The marker may be a directory or a file (worktrees and submodules
    use a ``.git`` file).  Returns the repo root path, or ``None`` if
    not found.
    """
    current = cwd.resolve()
    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def project_root(cwd: pathlib.Path) -> pathlib.Path:
    """Return the repository root for *cwd*, falling back to *cwd* itself."""
    root = find_repo_root(cwd)
    return root if root is not None else cwd


def agent_home() -> pathlib.Path:
    """Return CODEX_HOME (or ~/.codex)."""
    env_home = os.environ.get("CODEX_HOME")
    if env_home:
        return pathlib.Path(env_home).expanduser()
    return pathlib.Path.home() / ".codex"
