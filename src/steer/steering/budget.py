"""Fixed-budget allocation of steering content.

Candidates are processed strictly in discovery order against a single
running byte counter.  Each wrapped entry (header line plus content)
counts against the budget.  Once the budget is spent every remaining
candidate is recorded as ``budget-exhausted`` without being read, so a
small late file is never packed in ahead of a larger earlier one.
Reads are bounded by the bytes still available, so an oversized file
costs no more I/O than the prefix that can be kept.
"""

from __future__ import annotations

import logging
import os
import pathlib
from collections.abc import Iterable

from steer.steering import encoding
from steer.steering.compose import format_header
from steer.steering.models import (
    AdmittedEntry,
    CandidateFile,
    OmissionReason,
    OmissionRecord,
    RunManifest,
)

logger = logging.getLogger("steer.steering.budget")


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _omit(
    manifest: RunManifest,
    candidate: CandidateFile,
    reason: OmissionReason,
    detail: str = "",
) -> None:
    logger.debug("Omitting %s: %s %s", candidate.display_path, reason.value, detail)
    manifest.omissions.append(
        OmissionRecord(
            scope=candidate.scope,
            filename=candidate.filename,
            display_path=candidate.display_path,
            reason=reason,
            detail=detail,
        )
    )


def _read_prefix(path: pathlib.Path, limit: int) -> tuple[bytes, int]:
    """Read at most *limit* bytes of *path*; return them with the file size."""
    with path.open("rb") as fh:
        size = os.fstat(fh.fileno()).st_size
        return fh.read(limit), size


def allocate(candidates: Iterable[CandidateFile], budget: int) -> RunManifest:
    """Admit candidates into *budget* bytes and return the run manifest."""
    budget = max(budget, 0)
    manifest = RunManifest(budget=budget)
    remaining = budget

    for candidate in candidates:
        if remaining <= 0:
            _omit(manifest, candidate, OmissionReason.BUDGET_EXHAUSTED)
            continue

        # Content can never use more than ``remaining`` bytes, so one extra
        # byte is enough to tell whether the file was read to the end.
        try:
            raw, size = _read_prefix(candidate.path, remaining + 1)
        except OSError as exc:
            _omit(manifest, candidate, OmissionReason.READ_ERROR, str(exc))
            continue
        complete = len(raw) <= remaining

        text = encoding.decode(raw, complete=complete)
        if text is None:
            _omit(manifest, candidate, OmissionReason.NON_UTF8)
            continue

        if complete and not text.strip():
            logger.debug("Skipping empty steering file %s", candidate.display_path)
            manifest.skipped.append(candidate)
            continue

        header = format_header(candidate.scope, candidate.filename, truncated=False)
        # The newline after the header is part of the injected entry
        wrapped_len = _utf8_len(header) + 1 + len(raw)

        if complete and wrapped_len <= remaining:
            content = text
            truncated = False
        else:
            header = format_header(candidate.scope, candidate.filename, truncated=True)
            room = remaining - _utf8_len(header) - 1
            content = encoding.safe_prefix(text, room)
            if not content.strip():
                # Not even a useful prefix fits; close the budget here.
                _omit(manifest, candidate, OmissionReason.BUDGET_EXHAUSTED)
                remaining = 0
                continue
            truncated = True

        entry = AdmittedEntry(
            scope=candidate.scope,
            filename=candidate.filename,
            display_path=candidate.display_path,
            header=header,
            content=content,
            truncated=truncated,
            original_bytes=max(size, len(raw)),
        )
        manifest.entries.append(entry)
        manifest.bytes_used += entry.wrapped_bytes
        remaining = 0 if truncated else remaining - entry.wrapped_bytes
        logger.debug(
            "Admitted %s (%d bytes%s)",
            candidate.display_path,
            entry.wrapped_bytes,
            ", truncated" if truncated else "",
        )

    logger.info(
        "Steering: %d admitted (%d truncated), %d omitted, %d/%d bytes",
        len(manifest.entries),
        len(manifest.truncated),
        len(manifest.omissions),
        manifest.bytes_used,
        budget,
    )
    return manifest
