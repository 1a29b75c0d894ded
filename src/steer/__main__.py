"""steer — durable steering files for coding agents.

Usage:
    steer list [--path DIR]            List steering files in load order
    steer explain [--path DIR]         Explain discovery, budget and omissions
    steer show [--path DIR] [--chain]  Print the injected steering document
    steer config <cmd>                 Configuration (get/set/list/show/edit)
    steer hook <event>                 Run a hook (called by the agent, not users)

Options:
    -v, --verbose                      Log discovery and budget decisions
"""

from __future__ import annotations

import json
import logging
import sys

_HOOK_EVENTS = {
    "SessionStart": "steer.hooks.session_start",
}


def _cmd_hook(args: list[str]) -> int:
    """Dispatch a hook event. Called by the agent, not users."""
    if not args:
        print("Usage: steer hook <event>", file=sys.stderr)
        print(f"Events: {', '.join(_HOOK_EVENTS)}", file=sys.stderr)
        return 1

    event = args[0]
    module_name = _HOOK_EVENTS.get(event)
    if module_name is None:
        print(f"Unknown hook event: {event}", file=sys.stderr)
        return 1

    import importlib

    module = importlib.import_module(module_name)

    hook_data: dict = {}
    try:
        raw = sys.stdin.read()
        if raw:
            hook_data = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        pass
    if not isinstance(hook_data, dict):
        hook_data = {}

    print(module.main(hook_data))
    return 0


def _cmd_steering(cmd: str, args: list[str]) -> int:
    import steer.steering_cli

    return steer.steering_cli.main(cmd, args)


def _cmd_config(args: list[str]) -> int:
    import steer.config_cli

    return steer.config_cli.main(args)


def _configure_logging(args: list[str]) -> list[str]:
    """Strip ``-v/--verbose`` from *args* and set up logging."""
    verbose = any(a in ("-v", "--verbose") for a in args)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )
    return [a for a in args if a not in ("-v", "--verbose")]


def main() -> None:
    args = _configure_logging(sys.argv[1:])
    if not args:
        print(__doc__)
        sys.exit(1)

    cmd = args[0]
    rest = args[1:]

    if cmd in ("list", "explain", "show"):
        sys.exit(_cmd_steering(cmd, rest))
    elif cmd == "config":
        sys.exit(_cmd_config(rest))
    elif cmd == "hook":
        sys.exit(_cmd_hook(rest))
    else:
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
