"""Render a ``RunManifest`` into the injected steering document."""

from __future__ import annotations

from steer.steering.models import RunManifest, SteeringScope

NOTE_HEADER = "[Steering: note]"
ENTRY_SEPARATOR = "\n\n"


def format_header(scope: SteeringScope, filename: str, *, truncated: bool) -> str:
    """Return the single header line that precedes an entry's content.

    The header is kept short because it is charged against the budget:
    ``[global/a.md]`` or ``[project/b.md truncated]``.
    """
    marker = " truncated" if truncated else ""
    return f"[{scope.value}/{filename}{marker}]"


def format_omission_note(manifest: RunManifest) -> str:
    """Return the trailing note block, or ``""`` when nothing was omitted."""
    if not manifest.omissions:
        return ""
    lines = [
        NOTE_HEADER,
        f"Omitted {len(manifest.omissions)} file(s) "
        f"(steering.doc_max_bytes={manifest.budget}).",
    ]
    for record in manifest.omissions:
        lines.append(
            f"- scope={record.scope.value} file={record.display_path} "
            f"reason={record.reason.value}"
        )
    return "\n".join(lines)


def compose(manifest: RunManifest) -> str:
    parts = [entry.wrapped for entry in manifest.entries]
    note = format_omission_note(manifest)
    if note:
        parts.append(note)
    return ENTRY_SEPARATOR.join(parts)
