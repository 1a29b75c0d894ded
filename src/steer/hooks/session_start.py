"""SessionStart hook — inject aggregated steering files.

Reads the hook input dict (``cwd`` is optional), loads steering for the
project containing it, and returns the hook JSON with the composed
document as ``additionalContext``.
"""

from __future__ import annotations

import json
import logging
import pathlib

import steer.config
import steer.repo
import steer.steering.config
from steer.steering.loader import load_steering

logger = logging.getLogger("steer.hooks.session_start")


def gather_context(cwd: pathlib.Path) -> str:
    """Return the composed steering document for *cwd* (may be empty)."""
    root = steer.repo.project_root(cwd)
    cfg = steer.config.load("steering", root)
    result = load_steering(cfg, agent_home=steer.repo.agent_home(), repo_root=root)
    return result.combined


def main(hook_input: dict) -> str:
    """Run the SessionStart hook. Returns JSON output string."""
    cwd_str = hook_input.get("cwd")
    cwd = pathlib.Path(cwd_str) if cwd_str else pathlib.Path.cwd()

    context = gather_context(cwd)
    logger.debug("SessionStart steering context: %d chars", len(context))

    output = {
        "hookSpecificOutput": {
            "hookEventName": "SessionStart",
            "additionalContext": context,
        }
    }
    return json.dumps(output)
