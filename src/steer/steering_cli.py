"""CLI for inspecting steering aggregation.

Usage:
    steer list [--path DIR]             List steering files in load order
    steer explain [--path DIR]          Explain discovery, budget and omissions
    steer show [--path DIR] [--chain]   Print the injected steering document
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import steer.config
import steer.instructions
import steer.repo
from steer.steering.config import SteeringConfig
from steer.steering.loader import (
    SteeringLoadResult,
    build_instruction_chain,
    load_steering,
)
from steer.steering.models import DirState


def _load(path: Path) -> SteeringLoadResult:
    root = steer.repo.project_root(path)
    cfg: SteeringConfig = steer.config.load("steering", root)
    return load_steering(cfg, agent_home=steer.repo.agent_home(), repo_root=root)


def _describe_dir(state: DirState) -> str:
    if state.status == "error":
        return f"error ({state.detail})"
    return state.status


def cmd_list(path: Path) -> int:
    """Print every discovered steering file with its status."""
    result = _load(path)
    rows = result.outcomes()
    if not rows:
        print("No steering files found.")
        return 0
    for idx, (candidate, status) in enumerate(rows, start=1):
        print(f"{idx:3d}  {candidate.scope.value:<7}  {candidate.display_path}  [{status}]")
    return 0


def cmd_explain(path: Path) -> int:
    """Print a diagnostic of discovery decisions, budget use and omissions."""
    result = _load(path)
    found = result.discovery
    print(f"Repo root:    {found.repo_root}")
    print(f"Global dir:   {found.global_dir} ({_describe_dir(found.global_state)})")
    print(f"Project dir:  {found.project_dir} ({_describe_dir(found.project_state)})")
    print(f"Enabled:      {'yes' if result.enabled else 'no'}")
    print(f"Budget:       {result.max_bytes} bytes")

    manifest = result.manifest
    if manifest is None:
        print("Steering is disabled; no files were loaded.")
        return 0

    print(f"Used:         {manifest.bytes_used} bytes")
    print()
    if not found.files:
        print("No steering files found.")
        return 0

    for entry in manifest.entries:
        if entry.truncated:
            print(
                f"  truncated  {entry.display_path} "
                f"({entry.content_bytes} of {entry.original_bytes} bytes kept)"
            )
        else:
            print(f"  included   {entry.display_path} ({entry.wrapped_bytes} bytes)")
    for skipped in manifest.skipped:
        print(f"  skipped    {skipped.display_path} (empty)")
    for record in manifest.omissions:
        detail = f": {record.detail}" if record.detail else ""
        print(f"  omitted    {record.display_path} ({record.reason.value}{detail})")

    if manifest.omissions or manifest.truncated:
        print()
        print(
            f"{len(manifest.truncated)} truncated, {len(manifest.omissions)} omitted; "
            "raise steering.doc_max_bytes to load more."
        )
    return 0


def cmd_show(path: Path, *, chain: bool = False) -> int:
    """Print the composed steering document (or the full instruction chain)."""
    result = _load(path)
    if not chain:
        if result.combined:
            print(result.combined)
        return 0

    leading = steer.instructions.global_instructions(steer.repo.agent_home())
    trailing = steer.instructions.project_instructions(result.discovery.repo_root)
    text = build_instruction_chain(result, leading, trailing)
    if text:
        print(text)
    return 0


def main(cmd: str, argv: list[str] | None = None) -> int:
    """Entry point for ``steer list|explain|show``."""
    parser = argparse.ArgumentParser(prog=f"steer {cmd}")
    parser.add_argument("--path", type=Path, default=Path.cwd())
    if cmd == "show":
        parser.add_argument(
            "--chain",
            action="store_true",
            help="Include the surrounding AGENTS.md instructions",
        )

    args = parser.parse_args(argv)

    if cmd == "list":
        return cmd_list(args.path)
    elif cmd == "explain":
        return cmd_explain(args.path)
    elif cmd == "show":
        return cmd_show(args.path, chain=args.chain)
    else:
        print(f"Unknown steering command: {cmd}", file=sys.stderr)
        return 1
