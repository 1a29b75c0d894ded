"""CLI for steer configuration.

Usage:
    steer config list                         Show all configurable sections
    steer config get <section.key>            Print effective value
    steer config set [--global] <key> <value> Write a config value
    steer config reset [--global] <key>       Remove an override
    steer config show                         Dump full effective config
    steer config edit [--global]              Open config.toml in $EDITOR

Examples:
    steer config set steering.doc_max_bytes 65536
    steer config set --global steering.enabled false
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import subprocess
import sys
from pathlib import Path

import steer.config
import steer.repo

_EDIT_TEMPLATE = """\
# steer configuration
# See: steer config list
#
# [steering]
# enabled = true
# doc_max_bytes = 32768
"""


def _ensure_registry() -> None:
    """Import all config modules so the registry is populated."""
    import steer.steering.config  # noqa: F401


def _split_key(key: str) -> tuple[str, str] | None:
    parts = key.split(".", 1)
    if len(parts) != 2 or not all(parts):
        print(f"Invalid key format: {key!r} (expected section.key)", file=sys.stderr)
        return None
    return parts[0], parts[1]


def cmd_list() -> int:
    """Print all registered sections with their fields."""
    _ensure_registry()
    sections = steer.config.list_sections()
    if not sections:
        print("No configurable sections registered.")
        return 0

    for name, cls in sorted(sections.items()):
        print(f"[{name}]")
        for f in dataclasses.fields(cls):
            type_name = f.type if isinstance(f.type, str) else f.type.__name__
            print(f"  {f.name}: {type_name} = {f.default!r}")
        print()
    return 0


def cmd_get(key: str, root: Path) -> int:
    """Print the effective value for section.key."""
    _ensure_registry()
    parsed = _split_key(key)
    if parsed is None:
        return 1
    section, field = parsed
    try:
        value = steer.config.get_effective(section, field, root)
    except (KeyError, AttributeError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(value)
    return 0


def cmd_set(key: str, value: str, *, global_flag: bool, root: Path) -> int:
    """Set a config value in the TOML file."""
    _ensure_registry()
    parsed = _split_key(key)
    if parsed is None:
        return 1
    section, field = parsed
    scope = "global" if global_flag else "local"
    try:
        steer.config.set_value(section, field, value, scope=scope, root=root)
    except (KeyError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(f"Set {key} = {value} ({scope})")
    return 0


def cmd_reset(key: str, *, global_flag: bool, root: Path) -> int:
    """Remove a config override."""
    _ensure_registry()
    parsed = _split_key(key)
    if parsed is None:
        return 1
    section, field = parsed
    scope = "global" if global_flag else "local"
    steer.config.reset_value(section, field, scope=scope, root=root)
    print(f"Reset {key} ({scope})")
    return 0


def cmd_show(root: Path) -> int:
    """Dump the full effective config."""
    _ensure_registry()
    for name in sorted(steer.config.list_sections()):
        instance = steer.config.load(name, root)
        print(f"[{name}]")
        for f in dataclasses.fields(instance):
            print(f"  {f.name} = {getattr(instance, f.name)!r}")
        print()
    return 0


def cmd_edit(*, global_flag: bool, root: Path) -> int:
    """Open the config TOML in the user's editor."""
    if global_flag:
        path = steer.config._global_path()
    else:
        path = steer.config._local_path(root)

    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.write_text(_EDIT_TEMPLATE)

    editor = os.environ.get("EDITOR", "vi")
    return subprocess.call([editor, str(path)])


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``steer config``."""
    parser = argparse.ArgumentParser(
        prog="steer config",
        description="Steering configuration.",
    )
    sub = parser.add_subparsers(dest="subcmd")

    sub.add_parser("list", help="Show all configurable sections")

    p_get = sub.add_parser("get", help="Print effective value")
    p_get.add_argument("key", help="section.key")

    p_set = sub.add_parser("set", help="Set a config value")
    p_set.add_argument("key", help="section.key")
    p_set.add_argument("value", help="New value")

    p_reset = sub.add_parser("reset", help="Remove an override")
    p_reset.add_argument("key", help="section.key")

    sub.add_parser("show", help="Dump full effective config")
    sub.add_parser("edit", help="Open config.toml in $EDITOR")

    for name in ("get", "set", "reset", "show", "edit"):
        p = sub.choices[name]
        p.add_argument("--path", type=Path, default=Path.cwd())
        if name in ("set", "reset", "edit"):
            p.add_argument("--global", dest="global_flag", action="store_true")

    args = parser.parse_args(argv)

    if args.subcmd is None:
        parser.print_help()
        return 1
    if args.subcmd == "list":
        return cmd_list()

    root = steer.repo.project_root(args.path)
    if args.subcmd == "get":
        return cmd_get(args.key, root)
    elif args.subcmd == "set":
        return cmd_set(args.key, args.value, global_flag=args.global_flag, root=root)
    elif args.subcmd == "reset":
        return cmd_reset(args.key, global_flag=args.global_flag, root=root)
    elif args.subcmd == "show":
        return cmd_show(root)
    elif args.subcmd == "edit":
        return cmd_edit(global_flag=args.global_flag, root=root)
    else:
        parser.print_help()
        return 1
