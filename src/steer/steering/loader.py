"""Steering pipeline entry point.

Ties discovery, allocation and composition together for one run.  The
configuration is passed in explicitly; nothing here reads module-level
state, so independent runs never interfere with each other.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib

from steer.steering import budget, compose, discovery, merge
from steer.steering.config import SteeringConfig
from steer.steering.models import CandidateFile, Discovery, RunManifest

logger = logging.getLogger("steer.steering.loader")


@dataclasses.dataclass
class SteeringLoadResult:
    enabled: bool
    max_bytes: int
    discovery: Discovery
    manifest: RunManifest | None
    combined: str

    def outcomes(self) -> list[tuple[CandidateFile, str]]:
        """Return ``(candidate, status)`` pairs in load order."""
        if self.manifest is None:
            return [(f, "disabled") for f in self.discovery.files]
        return list(self.manifest.outcomes(self.discovery.files))


def load_steering(
    config: SteeringConfig,
    *,
    agent_home: pathlib.Path,
    repo_root: pathlib.Path,
) -> SteeringLoadResult:
    """Discover, budget and compose steering files for one session."""
    found = discovery.discover(agent_home, repo_root)
    max_bytes = config.doc_max_bytes

    if not config.enabled or max_bytes <= 0:
        logger.debug(
            "Steering disabled (enabled=%s, doc_max_bytes=%d)",
            config.enabled,
            max_bytes,
        )
        return SteeringLoadResult(
            enabled=False,
            max_bytes=max_bytes,
            discovery=found,
            manifest=None,
            combined="",
        )

    manifest = budget.allocate(found.files, max_bytes)
    return SteeringLoadResult(
        enabled=True,
        max_bytes=max_bytes,
        discovery=found,
        manifest=manifest,
        combined=compose.compose(manifest),
    )


def build_instruction_chain(
    result: SteeringLoadResult,
    leading: str,
    trailing: str,
) -> str:
    """Merge a load result between the global and project instructions."""
    return merge.merge(leading, result.combined, trailing)
