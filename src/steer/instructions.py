"""Read the instruction blocks that surround injected steering.

- Leading: ``$CODEX_HOME/AGENTS.md`` (user-wide instructions)
- Trailing: ``<repo_root>/AGENTS.md`` (project instructions)
"""

from __future__ import annotations

import logging
import pathlib

logger = logging.getLogger("steer.instructions")

INSTRUCTIONS_FILENAME = "AGENTS.md"
MAX_INSTRUCTION_BYTES = 32 * 1024


def read_instructions(path: pathlib.Path, max_bytes: int = MAX_INSTRUCTION_BYTES) -> str:
    """Return the stripped text of *path*, or ``""`` if it cannot be read."""
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return ""
    except OSError as exc:
        logger.warning("Cannot read instructions %s: %s", path, exc)
        return ""
    if len(data) > max_bytes:
        data = data[:max_bytes]
    return data.decode("utf-8", errors="ignore").strip()


def global_instructions(agent_home: pathlib.Path) -> str:
    return read_instructions(agent_home / INSTRUCTIONS_FILENAME)


def project_instructions(repo_root: pathlib.Path) -> str:
    return read_instructions(repo_root / INSTRUCTIONS_FILENAME)
