"""Data types shared by the steering pipeline.

A run moves through three shapes: ``CandidateFile`` (discovered),
``AdmittedEntry`` / ``OmissionRecord`` (allocated), and ``RunManifest``
(the ordered record of one allocation pass).
"""

from __future__ import annotations

import dataclasses
import enum
import pathlib
from collections.abc import Iterator

GLOBAL_STEERING_DIR = "steering"
PROJECT_STEERING_DIR = ".codex/steering"
STEERING_EXTENSION = ".md"


class SteeringScope(enum.Enum):
    GLOBAL = "global"
    PROJECT = "project"


class OmissionReason(enum.Enum):
    BUDGET_EXHAUSTED = "budget-exhausted"
    NON_UTF8 = "non-utf8"
    READ_ERROR = "read-error"


@dataclasses.dataclass(frozen=True)
class CandidateFile:
    scope: SteeringScope
    path: pathlib.Path
    filename: str
    # Path shown in injected headers and CLI output
    display_path: str


@dataclasses.dataclass(frozen=True)
class DirState:
    """Outcome of listing one scope directory: missing, present or error."""

    status: str
    detail: str = ""

    @property
    def present(self) -> bool:
        return self.status == "present"


@dataclasses.dataclass(frozen=True)
class Discovery:
    global_dir: pathlib.Path
    project_dir: pathlib.Path
    repo_root: pathlib.Path
    files: tuple[CandidateFile, ...]
    global_state: DirState
    project_state: DirState


@dataclasses.dataclass(frozen=True)
class AdmittedEntry:
    scope: SteeringScope
    filename: str
    display_path: str
    header: str
    content: str
    truncated: bool
    original_bytes: int

    @property
    def wrapped(self) -> str:
        """Header line plus content, exactly as injected."""
        return f"{self.header}\n{self.content}"

    @property
    def wrapped_bytes(self) -> int:
        return len(self.wrapped.encode("utf-8"))

    @property
    def content_bytes(self) -> int:
        return len(self.content.encode("utf-8"))


@dataclasses.dataclass(frozen=True)
class OmissionRecord:
    scope: SteeringScope
    filename: str
    display_path: str
    reason: OmissionReason
    detail: str = ""


@dataclasses.dataclass
class RunManifest:
    """Ordered result of one allocation pass.

    Every candidate lands in exactly one of ``entries``, ``omissions`` or
    ``skipped`` (empty or whitespace-only files).
    """

    budget: int
    entries: list[AdmittedEntry] = dataclasses.field(default_factory=list)
    omissions: list[OmissionRecord] = dataclasses.field(default_factory=list)
    skipped: list[CandidateFile] = dataclasses.field(default_factory=list)
    bytes_used: int = 0

    @property
    def truncated(self) -> list[AdmittedEntry]:
        return [e for e in self.entries if e.truncated]

    def status_of(self, candidate: CandidateFile) -> str:
        """Return the outcome label for *candidate* in this run."""
        for entry in self.entries:
            if (entry.scope, entry.filename) == (candidate.scope, candidate.filename):
                return "truncated" if entry.truncated else "included"
        for record in self.omissions:
            if (record.scope, record.filename) == (candidate.scope, candidate.filename):
                return record.reason.value
        if candidate in self.skipped:
            return "empty"
        return "unknown"

    def outcomes(
        self, candidates: tuple[CandidateFile, ...] | list[CandidateFile]
    ) -> Iterator[tuple[CandidateFile, str]]:
        """Yield ``(candidate, status)`` in discovery order."""
        for candidate in candidates:
            yield candidate, self.status_of(candidate)
