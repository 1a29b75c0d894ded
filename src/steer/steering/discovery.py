"""Steering file discovery.

Steering files are discovered from two fixed locations:

- Global: ``$CODEX_HOME/steering/*.md``
- Project: ``<repo_root>/.codex/steering/*.md``

Both directories are scanned non-recursively. Files are returned in a
stable order so that later files can override earlier ones: global
steering first, then project steering, each sorted by filename bytes.
"""

from __future__ import annotations

import logging
import os
import pathlib
import stat

from steer.steering.models import (
    GLOBAL_STEERING_DIR,
    PROJECT_STEERING_DIR,
    STEERING_EXTENSION,
    CandidateFile,
    DirState,
    Discovery,
    SteeringScope,
)

logger = logging.getLogger("steer.steering.discovery")


def _display_path(scope: SteeringScope, filename: str) -> str:
    if scope is SteeringScope.GLOBAL:
        return f"$CODEX_HOME/{GLOBAL_STEERING_DIR}/{filename}"
    return f"{PROJECT_STEERING_DIR}/{filename}"


def list_scope(
    directory: pathlib.Path,
    scope: SteeringScope,
) -> tuple[DirState, list[CandidateFile]]:
    """List the ``.md`` files directly inside *directory*.

    A missing directory is normal and yields no candidates.  Only regular
    files are returned; symlinks and subdirectories are ignored.
    """
    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        return DirState("missing"), []
    except OSError as exc:
        logger.warning("Cannot read steering directory %s: %s", directory, exc)
        return DirState("error", str(exc)), []

    out: list[CandidateFile] = []
    for entry in entries:
        # A bare ".md" has no stem and is not a candidate
        if os.path.splitext(entry.name)[1] != STEERING_EXTENSION:
            continue
        try:
            mode = entry.stat(follow_symlinks=False).st_mode
        except OSError as exc:
            logger.warning("Failed to stat steering file %s: %s", entry.path, exc)
            continue
        if not stat.S_ISREG(mode):
            continue
        out.append(
            CandidateFile(
                scope=scope,
                path=pathlib.Path(entry.path).absolute(),
                filename=entry.name,
                display_path=_display_path(scope, entry.name),
            )
        )

    out.sort(key=lambda c: os.fsencode(c.filename))
    return DirState("present"), out


def discover(agent_home: pathlib.Path, repo_root: pathlib.Path) -> Discovery:
    """Resolve both scopes into one ordered candidate sequence."""
    global_dir = agent_home / GLOBAL_STEERING_DIR
    project_dir = repo_root / PROJECT_STEERING_DIR

    global_state, global_files = list_scope(global_dir, SteeringScope.GLOBAL)
    project_state, project_files = list_scope(project_dir, SteeringScope.PROJECT)

    logger.debug(
        "Discovered %d global and %d project steering files",
        len(global_files),
        len(project_files),
    )
    return Discovery(
        global_dir=global_dir,
        project_dir=project_dir,
        repo_root=repo_root,
        files=tuple(global_files + project_files),
        global_state=global_state,
        project_state=project_state,
    )
